# accounting/models/account.py

"""
======================================================
PATH: accounting/models/account.py
======================================================
ACCOUNT MODEL (CHART OF ACCOUNTS NODE)

Represents a single account within an organization's chart of accounts.

Guarantees:
- Account codes are unique per organization (normalized: trimmed, upper-case)
- normal_balance is derived from account_type (never caller-supplied)
- Hierarchy: parent must be in the same organization; level = parent.level + 1
- current_balance is only moved by the ledger engine (F() increments),
  never through save() on an existing row
- Soft delete only (is_deleted); rows with ledger history are never removed
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

MAX_ACCOUNT_LEVEL = 5


class ActiveAccountManager(models.Manager):
    """Repository-level soft-delete filter (the ActiveAccounts view)."""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class Account(models.Model):
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    ACCOUNT_TYPES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (EQUITY, "Equity"),
        (REVENUE, "Revenue"),
        (EXPENSE, "Expense"),
    ]

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

    NORMAL_BALANCES = [
        (DEBIT, "Debit"),
        (CREDIT, "Credit"),
    ]

    NORMAL_BALANCE_BY_TYPE = {
        ASSET: DEBIT,
        EXPENSE: DEBIT,
        LIABILITY: CREDIT,
        EQUITY: CREDIT,
        REVENUE: CREDIT,
    }

    CATEGORIES = [
        ("current_asset", "Current Asset"),
        ("fixed_asset", "Fixed Asset"),
        ("other_asset", "Other Asset"),
        ("current_liability", "Current Liability"),
        ("long_term_liability", "Long-term Liability"),
        ("other_liability", "Other Liability"),
        ("owner_equity", "Owner Equity"),
        ("retained_earnings", "Retained Earnings"),
        ("sales_revenue", "Sales Revenue"),
        ("other_revenue", "Other Revenue"),
        ("cost_of_goods_sold", "Cost of Goods Sold"),
        ("operating_expense", "Operating Expense"),
        ("financial_expense", "Financial Expense"),
        ("other_expense", "Other Expense"),
    ]

    CATEGORY_TYPES = {
        "current_asset": ASSET,
        "fixed_asset": ASSET,
        "other_asset": ASSET,
        "current_liability": LIABILITY,
        "long_term_liability": LIABILITY,
        "other_liability": LIABILITY,
        "owner_equity": EQUITY,
        "retained_earnings": EQUITY,
        "sales_revenue": REVENUE,
        "other_revenue": REVENUE,
        "cost_of_goods_sold": EXPENSE,
        "operating_expense": EXPENSE,
        "financial_expense": EXPENSE,
        "other_expense": EXPENSE,
    }

    organization_id = models.CharField(max_length=64, db_index=True)

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True, default="")

    account_type = models.CharField(max_length=20, choices=ACCOUNT_TYPES)
    category = models.CharField(
        max_length=32,
        choices=CATEGORIES,
        blank=True,
        default="",
    )
    normal_balance = models.CharField(
        max_length=6,
        choices=NORMAL_BALANCES,
        blank=True,
        editable=False,
    )

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )
    level = models.PositiveSmallIntegerField(default=1)
    is_group = models.BooleanField(
        default=False,
        help_text="Group accounts roll up children and never receive postings",
    )

    opening_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    current_balance = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Signed running balance (normal-balance convention); ledger-managed",
    )

    is_system_account = models.BooleanField(default=False)
    is_tax_account = models.BooleanField(default=False)
    tax_rate = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )
    is_bank_account = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="accounts_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = models.Manager()
    active_objects = ActiveAccountManager()

    class Meta:
        ordering = ["organization_id", "code"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["organization_id", "account_type"], name="acct_org_type_idx"),
            models.Index(fields=["organization_id", "parent"], name="acct_org_parent_idx"),
            models.Index(fields=["organization_id", "is_deleted", "is_active"], name="acct_org_state_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["organization_id", "code"],
                name="uniq_account_org_code",
            ),
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_account_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
            models.CheckConstraint(
                condition=Q(level__gte=1) & Q(level__lte=MAX_ACCOUNT_LEVEL),
                name="chk_account_level_range",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    @classmethod
    def normal_balance_for(cls, account_type: str) -> str:
        try:
            return cls.NORMAL_BALANCE_BY_TYPE[account_type]
        except KeyError as exc:
            raise ValidationError({"account_type": f"Unknown account type: {account_type}"}) from exc

    @property
    def is_debit_normal(self) -> bool:
        return self.normal_balance == self.DEBIT

    @property
    def is_postable(self) -> bool:
        return self.is_active and not self.is_deleted and not self.is_group

    def clean(self):
        self.code = (self.code or "").strip().upper()
        self.name = (self.name or "").strip()
        self.organization_id = (self.organization_id or "").strip()

        if not self.organization_id:
            raise ValidationError({"organization_id": "organization_id is required"})
        if not self.code:
            raise ValidationError({"code": "Account code is required"})
        if not self.name:
            raise ValidationError({"name": "Account name is required"})

        self.normal_balance = self.normal_balance_for(self.account_type)

        if self.category:
            expected = self.CATEGORY_TYPES.get(self.category)
            if expected and expected != self.account_type:
                raise ValidationError(
                    {"category": f"Category {self.category} does not belong to {self.account_type}"}
                )

        if self.parent_id:
            if self.pk and self.parent_id == self.pk:
                raise ValidationError({"parent": "An account cannot be its own parent"})
            if self.parent.organization_id != self.organization_id:
                raise ValidationError({"parent": "Parent account must belong to the same organization"})
            if self.parent.is_deleted:
                raise ValidationError({"parent": "Parent account is deleted"})
            self.level = self.parent.level + 1
        else:
            self.level = 1

        if self.level > MAX_ACCOUNT_LEVEL:
            raise ValidationError({"parent": f"Account hierarchy is limited to {MAX_ACCOUNT_LEVEL} levels"})

        if self.tax_rate is not None and not (Decimal("0") <= self.tax_rate <= Decimal("100")):
            raise ValidationError({"tax_rate": "tax_rate must be between 0 and 100"})

    def save(self, *args, **kwargs):
        # current_balance belongs to the ledger engine; keep the stored value on edits.
        update_fields = kwargs.get("update_fields")
        if self.pk and not self._state.adding and update_fields is None:
            stored = (
                type(self).objects.filter(pk=self.pk)
                .values_list("current_balance", flat=True)
                .first()
            )
            if stored is not None:
                self.current_balance = stored

        self.full_clean()
        return super().save(*args, **kwargs)
