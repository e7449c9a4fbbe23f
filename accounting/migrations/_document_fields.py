"""
Column definitions shared by the initial migrations of apps whose models
extend accounting.models.document.PostableDocument.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import models

STATUS_CHOICES = [("draft", "Draft"), ("posted", "Posted"), ("cancelled", "Cancelled")]


def document_fields():
    """Columns shared by every PostableDocument subclass."""
    return [
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ("organization_id", models.CharField(db_index=True, max_length=64)),
        ("status", models.CharField(choices=STATUS_CHOICES, default="draft", max_length=20)),
        ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
        ("total_discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
        ("taxable_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), editable=False, max_digits=18)),
        ("total_tax", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
        ("shipping_charges", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
        ("other_charges", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
        ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), editable=False, max_digits=18)),
        ("notes", models.TextField(blank=True, default="")),
        ("is_posted", models.BooleanField(default=False)),
        ("posted_at", models.DateTimeField(blank=True, null=True)),
        ("cancelled_at", models.DateTimeField(blank=True, null=True)),
        ("cancel_reason", models.CharField(blank=True, default="", max_length=500)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        (
            "voucher",
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="+",
                to="accounting.voucher",
            ),
        ),
        (
            "posted_by",
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        (
            "cancelled_by",
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        (
            "created_by",
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]


def account_fk(related_name: str):
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.PROTECT,
        related_name=related_name,
        to="accounting.account",
    )
