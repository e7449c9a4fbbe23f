import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("organization_id", models.CharField(db_index=True, max_length=64)),
                ("code", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=150)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "account_type",
                    models.CharField(
                        choices=[
                            ("ASSET", "Asset"),
                            ("LIABILITY", "Liability"),
                            ("EQUITY", "Equity"),
                            ("REVENUE", "Revenue"),
                            ("EXPENSE", "Expense"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "category",
                    models.CharField(
                        blank=True,
                        choices=[
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
                        ],
                        default="",
                        max_length=32,
                    ),
                ),
                (
                    "normal_balance",
                    models.CharField(
                        blank=True,
                        choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")],
                        editable=False,
                        max_length=6,
                    ),
                ),
                ("level", models.PositiveSmallIntegerField(default=1)),
                (
                    "is_group",
                    models.BooleanField(
                        default=False,
                        help_text="Group accounts roll up children and never receive postings",
                    ),
                ),
                ("opening_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                (
                    "current_balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Signed running balance (normal-balance convention); ledger-managed",
                        max_digits=18,
                    ),
                ),
                ("is_system_account", models.BooleanField(default=False)),
                ("is_tax_account", models.BooleanField(default=False)),
                ("tax_rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("is_bank_account", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("is_deleted", models.BooleanField(default=False)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="accounts_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="accounting.account",
                    ),
                ),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["organization_id", "code"],
                "indexes": [
                    models.Index(fields=["organization_id", "account_type"], name="acct_org_type_idx"),
                    models.Index(fields=["organization_id", "parent"], name="acct_org_parent_idx"),
                    models.Index(fields=["organization_id", "is_deleted", "is_active"], name="acct_org_state_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("organization_id", "code"), name="uniq_account_org_code"),
                    models.CheckConstraint(condition=models.Q(("code", ""), _negated=True), name="chk_account_code_not_blank"),
                    models.CheckConstraint(condition=models.Q(("name", ""), _negated=True), name="chk_account_name_not_blank"),
                    models.CheckConstraint(
                        condition=models.Q(("level__gte", 1), ("level__lte", 5)),
                        name="chk_account_level_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Voucher",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("organization_id", models.CharField(db_index=True, max_length=64)),
                ("voucher_number", models.CharField(max_length=32)),
                (
                    "voucher_type",
                    models.CharField(
                        choices=[
                            ("JV", "Journal Voucher"),
                            ("PV", "Payment Voucher"),
                            ("RV", "Receipt Voucher"),
                            ("CV", "Contra Voucher"),
                        ],
                        max_length=2,
                    ),
                ),
                ("voucher_date", models.DateField(default=django.utils.timezone.localdate)),
                ("fiscal_year", models.CharField(blank=True, editable=False, max_length=4)),
                ("fiscal_period", models.CharField(blank=True, editable=False, max_length=7)),
                ("narration", models.TextField()),
                (
                    "reference_type",
                    models.CharField(
                        choices=[
                            ("invoice", "Sales Invoice"),
                            ("payment", "Payment"),
                            ("receipt", "Receipt"),
                            ("purchase", "Purchase Invoice"),
                            ("walk_in_sale", "Walk-in Sale"),
                            ("manual", "Manual"),
                            ("other", "Other"),
                        ],
                        default="manual",
                        max_length=20,
                    ),
                ),
                ("reference_id", models.CharField(blank=True, default="", max_length=64)),
                ("reference_number", models.CharField(blank=True, default="", max_length=64)),
                ("total_debit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("total_credit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("posted", "Posted"), ("void", "Void")],
                        default="draft",
                        max_length=10,
                    ),
                ),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("voided_at", models.DateTimeField(blank=True, null=True)),
                ("void_reason", models.CharField(blank=True, default="", max_length=500)),
                ("is_deleted", models.BooleanField(default=False)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="vouchers_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "posted_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="vouchers_posted",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "voided_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="vouchers_voided",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Voucher",
                "verbose_name_plural": "Vouchers",
                "ordering": ["-voucher_date", "-created_at"],
                "permissions": [
                    ("post_voucher", "Can post voucher to the ledger"),
                    ("void_voucher", "Can void posted voucher"),
                ],
                "indexes": [
                    models.Index(fields=["organization_id", "voucher_date"], name="voucher_org_date_idx"),
                    models.Index(fields=["organization_id", "status"], name="voucher_org_status_idx"),
                    models.Index(fields=["organization_id", "voucher_type", "fiscal_year"], name="voucher_org_type_fy_idx"),
                    models.Index(fields=["organization_id", "fiscal_year", "fiscal_period"], name="voucher_org_period_idx"),
                    models.Index(fields=["reference_type", "reference_id"], name="voucher_reference_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("organization_id", "voucher_number"), name="uniq_voucher_org_number"),
                    models.CheckConstraint(
                        condition=models.Q(("status", "draft"), ("posted_at__isnull", False), _connector="OR"),
                        name="chk_voucher_posted_requires_posted_at",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("status", "void"), _negated=True),
                            ("voided_at__isnull", False),
                            _connector="OR",
                        ),
                        name="chk_voucher_void_requires_voided_at",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoucherLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_number", models.PositiveIntegerField()),
                (
                    "entry_type",
                    models.CharField(choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")], max_length=6),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=18,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="voucher_lines",
                        to="accounting.account",
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="accounting.voucher",
                    ),
                ),
            ],
            options={
                "verbose_name": "Voucher Line",
                "verbose_name_plural": "Voucher Lines",
                "ordering": ["voucher", "line_number"],
                "constraints": [
                    models.UniqueConstraint(fields=("voucher", "line_number"), name="uniq_voucher_line_number"),
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", Decimal("0.00"))),
                        name="chk_voucher_line_amount_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("organization_id", models.CharField(db_index=True, max_length=64)),
                ("line_number", models.PositiveIntegerField(default=0)),
                (
                    "entry_type",
                    models.CharField(choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")], max_length=6),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Positive monetary value",
                        max_digits=18,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "running_balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Account balance right after this entry was applied",
                        max_digits=18,
                    ),
                ),
                ("voucher_number", models.CharField(max_length=32)),
                (
                    "voucher_type",
                    models.CharField(
                        choices=[
                            ("JV", "Journal Voucher"),
                            ("PV", "Payment Voucher"),
                            ("RV", "Receipt Voucher"),
                            ("CV", "Contra Voucher"),
                        ],
                        max_length=2,
                    ),
                ),
                ("entry_date", models.DateField()),
                ("fiscal_year", models.CharField(max_length=4)),
                ("fiscal_period", models.CharField(max_length=7)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("narration", models.TextField(blank=True, default="")),
                ("reference_type", models.CharField(blank=True, default="", max_length=20)),
                ("reference_id", models.CharField(blank=True, default="", max_length=64)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("void", "Void"), ("reversal", "Reversal")],
                        default="active",
                        max_length=10,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("voided_at", models.DateTimeField(blank=True, null=True)),
                ("void_reason", models.CharField(blank=True, default="", max_length=500)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.account",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ledger_entries_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "reversal_of",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reversal_entry",
                        to="accounting.ledgerentry",
                    ),
                ),
                (
                    "voided_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ledger_entries_voided",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.voucher",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["entry_date", "created_at", "id"],
                "indexes": [
                    models.Index(fields=["voucher"], name="ledger_voucher_idx"),
                    models.Index(fields=["account", "created_at"], name="ledger_account_created_idx"),
                    models.Index(fields=["organization_id", "account", "entry_date"], name="ledger_org_acct_date_idx"),
                    models.Index(fields=["organization_id", "fiscal_year", "fiscal_period"], name="ledger_org_period_idx"),
                    models.Index(fields=["organization_id", "account", "status"], name="ledger_org_acct_status_idx"),
                    models.Index(fields=["voucher_number"], name="ledger_voucher_number_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", Decimal("0.00"))),
                        name="chk_ledger_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("status", "reversal"), ("reversal_of__isnull", False)),
                            models.Q(
                                models.Q(("status", "reversal"), _negated=True),
                                ("reversal_of__isnull", True),
                            ),
                            _connector="OR",
                        ),
                        name="chk_ledger_reversal_links_original",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoucherSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("organization_id", models.CharField(max_length=64)),
                (
                    "voucher_type",
                    models.CharField(
                        choices=[
                            ("JV", "Journal Voucher"),
                            ("PV", "Payment Voucher"),
                            ("RV", "Receipt Voucher"),
                            ("CV", "Contra Voucher"),
                        ],
                        max_length=2,
                    ),
                ),
                ("fiscal_year", models.CharField(max_length=4)),
                (
                    "last_number",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="The last sequence number handed out in this scope",
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Voucher Sequence",
                "verbose_name_plural": "Voucher Sequences",
                "ordering": ["organization_id", "fiscal_year", "voucher_type"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("organization_id", "voucher_type", "fiscal_year"),
                        name="uniq_voucher_sequence_scope",
                    ),
                ],
            },
        ),
    ]
