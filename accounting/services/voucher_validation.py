# accounting/services/voucher_validation.py

"""
======================================================
PATH: accounting/services/voucher_validation.py
======================================================
VOUCHER VALIDATION (DOUBLE-ENTRY RULES)

Pure checks, no writes:
- compute_totals(lines)          -> VoucherTotals
- validate_double_entry(voucher) -> VoucherValidationResult(is_valid, errors)
- assert_double_entry(voucher)   -> raises the most specific error kind

Rules:
- at least 2 entries, at least one debit and one credit
- each entry has exactly one side > 0 (not both, not neither, never negative)
- each entry targets an existing, active, non-deleted, non-group account
  of the voucher's organization
- the same account may appear only once per side
- |total debit - total credit| must stay below the balance epsilon (0.01)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings

from accounting.models.account import Account
from accounting.models.voucher import EntryType, Voucher
from accounting.services.exceptions import (
    GroupAccountPostingError,
    ImbalancedVoucherError,
    InsufficientEntriesError,
    InvalidEntryError,
)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

# Issue codes (stable, API-visible)
INSUFFICIENT_ENTRIES = "insufficient_entries"
MISSING_DEBIT = "missing_debit"
MISSING_CREDIT = "missing_credit"
IMBALANCED = "imbalanced"
BOTH_SIDES = "both_sides"
NO_SIDE = "no_side"
NEGATIVE_AMOUNT = "negative_amount"
INVALID_AMOUNT = "invalid_amount"
ACCOUNT_NOT_FOUND = "account_not_found"
ACCOUNT_INACTIVE = "account_inactive"
ACCOUNT_DELETED = "account_deleted"
GROUP_ACCOUNT = "group_account"
DUPLICATE_ACCOUNT = "duplicate_account"


def money(value) -> Decimal:
    if value is None or value == "":
        return ZERO

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise InvalidEntryError(f"Invalid money value: {value!r}") from exc

    if not amt.is_finite():
        raise InvalidEntryError(f"Invalid money value: {value!r}")

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def balance_epsilon() -> Decimal:
    return Decimal(str(getattr(settings, "ACCOUNTING_BALANCE_EPSILON", "0.01")))


# ============================================================
# DATA SHAPES
# ============================================================


@dataclass(frozen=True)
class LineDraft:
    """
    One proposed voucher entry in debit/credit column form.

    account is None when the caller referenced an account that does not exist;
    account_ref keeps what the caller sent so the error can point at it.
    """

    account: Account | None
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: str = ""
    account_ref: object = None

    @property
    def entry_type(self) -> str:
        return EntryType.DEBIT if self.debit > 0 else EntryType.CREDIT

    @property
    def amount(self) -> Decimal:
        return self.debit if self.debit > 0 else self.credit


@dataclass(frozen=True)
class VoucherTotals:
    total_debit: Decimal
    total_credit: Decimal

    @property
    def difference(self) -> Decimal:
        return (self.total_debit - self.total_credit).quantize(TWOPLACES)

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) < balance_epsilon()


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    field: str = "entries"
    line: int | None = None

    def as_dict(self) -> dict:
        data = {"code": self.code, "field": self.field, "message": self.message}
        if self.line is not None:
            data["line"] = self.line
        return data


@dataclass
class VoucherValidationResult:
    totals: VoucherTotals
    errors: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.errors]

    def raise_if_invalid(self) -> None:
        if self.is_valid:
            return

        codes = {e.code for e in self.errors}
        summary = "; ".join(self.messages)

        if codes & {BOTH_SIDES, NO_SIDE, NEGATIVE_AMOUNT, INVALID_AMOUNT,
                    ACCOUNT_NOT_FOUND, ACCOUNT_INACTIVE, ACCOUNT_DELETED, DUPLICATE_ACCOUNT}:
            raise InvalidEntryError(summary, errors=self.errors)
        if GROUP_ACCOUNT in codes:
            raise GroupAccountPostingError(summary, errors=self.errors)
        if codes & {INSUFFICIENT_ENTRIES, MISSING_DEBIT, MISSING_CREDIT}:
            raise InsufficientEntriesError(summary, errors=self.errors)
        raise ImbalancedVoucherError(summary, errors=self.errors)


# ============================================================
# PURE COMPUTATION
# ============================================================


def lines_from_voucher(voucher: Voucher) -> list[LineDraft]:
    return [
        LineDraft(
            account=line.account,
            debit=line.debit,
            credit=line.credit,
            description=line.description,
            account_ref=line.account_id,
        )
        for line in voucher.lines.select_related("account").order_by("line_number")
    ]


def compute_totals(lines: Iterable[LineDraft]) -> VoucherTotals:
    total_debit = ZERO
    total_credit = ZERO
    for line in lines:
        total_debit += money(line.debit)
        total_credit += money(line.credit)

    return VoucherTotals(
        total_debit=total_debit.quantize(TWOPLACES, rounding=ROUND_HALF_UP),
        total_credit=total_credit.quantize(TWOPLACES, rounding=ROUND_HALF_UP),
    )


def _line_issues(
    line: LineDraft, *, number: int, organization_id: str | None
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    field_name = f"entries[{number - 1}]"

    debit = money(line.debit)
    credit = money(line.credit)

    if debit < 0 or credit < 0:
        issues.append(
            ValidationIssue(NEGATIVE_AMOUNT, f"Entry {number}: amounts cannot be negative", field_name, number)
        )
    elif debit > 0 and credit > 0:
        issues.append(
            ValidationIssue(BOTH_SIDES, f"Entry {number}: cannot have both debit and credit", field_name, number)
        )
    elif debit == 0 and credit == 0:
        issues.append(
            ValidationIssue(NO_SIDE, f"Entry {number}: must have a debit or a credit amount", field_name, number)
        )

    account = line.account
    if account is None or (organization_id and account.organization_id != organization_id):
        issues.append(
            ValidationIssue(
                ACCOUNT_NOT_FOUND,
                f"Entry {number}: account {line.account_ref or ''} not found".replace("  ", " "),
                f"{field_name}.account",
                number,
            )
        )
        return issues

    if account.is_deleted:
        issues.append(
            ValidationIssue(ACCOUNT_DELETED, f"Entry {number}: account {account.code} is deleted", f"{field_name}.account", number)
        )
    elif not account.is_active:
        issues.append(
            ValidationIssue(ACCOUNT_INACTIVE, f"Entry {number}: account {account.code} is inactive", f"{field_name}.account", number)
        )

    if account.is_group:
        issues.append(
            ValidationIssue(
                GROUP_ACCOUNT,
                f"Entry {number}: account {account.code} is a group account and cannot be posted to",
                f"{field_name}.account",
                number,
            )
        )

    return issues


def validate_double_entry(
    voucher_or_lines: Voucher | Sequence[LineDraft],
    *,
    organization_id: str | None = None,
) -> VoucherValidationResult:
    if isinstance(voucher_or_lines, Voucher):
        organization_id = organization_id or voucher_or_lines.organization_id
        lines = lines_from_voucher(voucher_or_lines)
    else:
        lines = list(voucher_or_lines)

    errors: list[ValidationIssue] = []

    if len(lines) < 2:
        errors.append(
            ValidationIssue(INSUFFICIENT_ENTRIES, "Voucher must have at least 2 entries")
        )

    seen: set[tuple] = set()
    for number, line in enumerate(lines, start=1):
        line_errors = _line_issues(line, number=number, organization_id=organization_id)
        errors.extend(line_errors)

        if line.account is not None and not line_errors:
            key = (line.account.pk, line.entry_type)
            if key in seen:
                errors.append(
                    ValidationIssue(
                        DUPLICATE_ACCOUNT,
                        f"Entry {number}: duplicate account {line.account.code} in {line.entry_type.lower()} entries",
                        f"entries[{number - 1}].account",
                        number,
                    )
                )
            seen.add(key)

    totals = compute_totals(lines)

    if lines:
        if not any(money(line.debit) > 0 for line in lines):
            errors.append(ValidationIssue(MISSING_DEBIT, "Voucher must have at least one debit entry"))
        if not any(money(line.credit) > 0 for line in lines):
            errors.append(ValidationIssue(MISSING_CREDIT, "Voucher must have at least one credit entry"))

    if not totals.is_balanced:
        errors.append(
            ValidationIssue(
                IMBALANCED,
                f"Voucher is not balanced. Debit: {totals.total_debit}, Credit: {totals.total_credit}",
            )
        )

    return VoucherValidationResult(totals=totals, errors=errors)


def assert_double_entry(
    voucher_or_lines: Voucher | Sequence[LineDraft],
    *,
    organization_id: str | None = None,
) -> VoucherTotals:
    result = validate_double_entry(voucher_or_lines, organization_id=organization_id)
    result.raise_if_invalid()
    return result.totals
