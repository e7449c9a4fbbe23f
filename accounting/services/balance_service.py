# accounting/services/balance_service.py

"""
BALANCE & REPORTING SERVICE (AUTHORITATIVE)

Read-only ledger aggregation helpers.

RULES:
- READ-ONLY: no writes, ever
- LedgerEntry is the single source of truth; opening_balance is folded in
- Accounting timeline uses LedgerEntry.entry_date (the voucher date)
- Only ACTIVE entries count toward balances; a voided original and its
  reversal cancel out, so including both never changes a total
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Case, F, Sum, When
from django.db.models.functions import Coalesce

from accounting.models.account import Account
from accounting.models.ledger import LedgerEntry
from accounting.services.account_registry import balance_delta
from accounting.services.ledger_engine import find_ledger_entries_by_account

TWOPLACES = Decimal("0.01")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def debit_credit_totals(qs) -> tuple[Decimal, Decimal]:
    aggregates = qs.aggregate(
        debit_total=Coalesce(
            Sum(Case(When(entry_type=LedgerEntry.DEBIT, then=F("amount")))),
            Decimal("0.00"),
        ),
        credit_total=Coalesce(
            Sum(Case(When(entry_type=LedgerEntry.CREDIT, then=F("amount")))),
            Decimal("0.00"),
        ),
    )
    return _q2(aggregates["debit_total"]), _q2(aggregates["credit_total"])


def signed_net(account: Account, debit: Decimal, credit: Decimal) -> Decimal:
    """
    Balance rule:
    - Assets & Expenses → Debit balance  (debits - credits)
    - Liabilities, Equity & Revenue → Credit balance (credits - debits)
    """
    if account.is_debit_normal:
        return _q2(debit - credit)
    return _q2(credit - debit)


def get_account_balance(account: Account, *, as_of=None) -> Decimal:
    qs = LedgerEntry.objects.filter(
        organization_id=account.organization_id,
        account=account,
        status=LedgerEntry.STATUS_ACTIVE,
    )
    if as_of is not None:
        qs = qs.filter(entry_date__lte=as_of)

    debit, credit = debit_credit_totals(qs)
    return _q2(account.opening_balance + signed_net(account, debit, credit))


def get_account_ledger(
    account: Account,
    *,
    start_date=None,
    end_date=None,
    include_void: bool = False,
) -> dict:
    """
    Account statement:
    - opening balance = opening_balance + active entries before start_date
    - one row per entry with a recomputed running balance
    - totals and closing balance
    """
    opening = _q2(account.opening_balance)
    if start_date is not None:
        before = LedgerEntry.objects.filter(
            organization_id=account.organization_id,
            account=account,
            status=LedgerEntry.STATUS_ACTIVE,
            entry_date__lt=start_date,
        )
        debit, credit = debit_credit_totals(before)
        opening = _q2(opening + signed_net(account, debit, credit))

    entries = find_ledger_entries_by_account(
        account.organization_id,
        account,
        start_date=start_date,
        end_date=end_date,
        include_void=include_void,
    )

    running = opening
    total_debit = Decimal("0.00")
    total_credit = Decimal("0.00")
    rows = []

    for e in entries:
        running = _q2(running + balance_delta(account, e.entry_type, e.amount))
        total_debit += e.debit
        total_credit += e.credit
        rows.append(
            {
                "id": e.pk,
                "entry_date": e.entry_date.isoformat(),
                "voucher_id": str(e.voucher_id),
                "voucher_number": e.voucher_number,
                "voucher_type": e.voucher_type,
                "description": e.description,
                "narration": e.narration,
                "debit": str(e.debit),
                "credit": str(e.credit),
                "balance": str(running),
                "status": e.status,
                "reversal_of": e.reversal_of_id,
            }
        )

    return {
        "account": {
            "id": account.pk,
            "code": account.code,
            "name": account.name,
            "account_type": account.account_type,
            "normal_balance": account.normal_balance,
        },
        "start_date": start_date.isoformat() if start_date else None,
        "end_date": end_date.isoformat() if end_date else None,
        "include_void": include_void,
        "opening_balance": str(opening),
        "entries": rows,
        "totals": {
            "debit": str(_q2(total_debit)),
            "credit": str(_q2(total_credit)),
        },
        "closing_balance": str(running),
    }
