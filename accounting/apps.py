# accounting/apps.py

"""
ACCOUNTING APP CONFIG

Chart of accounts, vouchers, ledger engine and reports.
"""

from django.apps import AppConfig


class AccountingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounting"
    verbose_name = "Accounting"
