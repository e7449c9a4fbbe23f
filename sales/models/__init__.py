# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .sales_invoice import SalesInvoice
from .walk_in_sale import WalkInSale

__all__ = [
    "SalesInvoice",
    "WalkInSale",
]
