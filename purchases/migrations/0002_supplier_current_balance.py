"""
======================================================
PATH: purchases/migrations/0002_supplier_current_balance.py
======================================================
MIGRATION: Supplier running balance (amount owed)
"""

from __future__ import annotations

from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("purchases", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="supplier",
            name="current_balance",
            field=models.DecimalField(
                decimal_places=2,
                default=Decimal("0.00"),
                editable=False,
                help_text="Amount owed to the supplier; moved by invoice posting and cancellation",
                max_digits=18,
            ),
        ),
    ]
