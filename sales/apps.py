# sales/apps.py

"""
SALES APP CONFIG

Customer-facing revenue documents:
- Sales invoices (credit sales, posted as JV)
- Walk-in sales (cash counter sales, posted as RV)
"""

from django.apps import AppConfig


class SalesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sales"
    verbose_name = "Sales"
