# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.account import Account, ActiveAccountManager
from accounting.models.ledger import LedgerEntry
from accounting.models.sequence import VoucherSequence
from accounting.models.voucher import (
    ActiveVoucherManager,
    EntryType,
    Voucher,
    VoucherLine,
)

__all__ = [
    "Account",
    "ActiveAccountManager",
    "EntryType",
    "Voucher",
    "VoucherLine",
    "ActiveVoucherManager",
    "LedgerEntry",
    "VoucherSequence",
]
