# accounting/services/trial_balance_service.py

from __future__ import annotations

import calendar
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db.models import Sum

from accounting.models.account import Account
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import LedgerValidationError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _q2(amount: Decimal) -> Decimal:
    return (amount or ZERO).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def period_bounds(*, fiscal_year=None, fiscal_period=None, start_date=None, end_date=None):
    """
    Resolve the reporting window.

    fiscal_period ("YYYY-MM") wins over fiscal_year ("YYYY"); explicit
    dates are used when neither is given.
    """
    try:
        if fiscal_period:
            year, month = (int(p) for p in str(fiscal_period).split("-"))
            last = calendar.monthrange(year, month)[1]
            return date(year, month, 1), date(year, month, last)
        if fiscal_year:
            year = int(fiscal_year)
            return date(year, 1, 1), date(year, 12, 31)
    except (TypeError, ValueError) as exc:
        raise LedgerValidationError(
            "fiscal_year must be YYYY and fiscal_period must be YYYY-MM",
            errors=[{"field": "fiscal_period", "code": "invalid", "message": "Invalid fiscal window"}],
        ) from exc

    return start_date, end_date


class TrialBalanceService:
    """
    Trial Balance computation service.

    Guarantees:
    - Scopes to ONE organization
    - Scopes to active, non-deleted LEAF accounts (groups only roll up)
    - Counts ACTIVE ledger entries only (voided originals and reversals net to zero)
    - opening_balance + entries before the window form the opening figure
    - Avoids N+1 queries by aggregating in bulk
    - Each account lands in the debit or credit column by the sign of its
      balance under its normal-balance convention
    """

    def __init__(self, account_model=Account, ledger_model=LedgerEntry):
        self.Account = account_model
        self.Ledger = ledger_model

    def _sums(self, qs) -> dict:
        out: dict = {}
        for r in qs.values("account_id", "entry_type").annotate(total=Sum("amount")):
            debit, credit = out.get(r["account_id"], (ZERO, ZERO))
            if r["entry_type"] == self.Ledger.DEBIT:
                debit = _q2(r["total"])
            else:
                credit = _q2(r["total"])
            out[r["account_id"]] = (debit, credit)
        return out

    def generate(self, organization_id: str, *, fiscal_year=None, fiscal_period=None, start_date=None, end_date=None):
        start, end = period_bounds(
            fiscal_year=fiscal_year,
            fiscal_period=fiscal_period,
            start_date=start_date,
            end_date=end_date,
        )

        accounts = list(
            self.Account.active_objects.filter(
                organization_id=organization_id,
                is_active=True,
                is_group=False,
            ).order_by("code")
        )

        base = self.Ledger.objects.filter(
            organization_id=organization_id,
            status=self.Ledger.STATUS_ACTIVE,
            account_id__in=[a.pk for a in accounts],
        )

        in_window = base
        if start:
            in_window = in_window.filter(entry_date__gte=start)
        if end:
            in_window = in_window.filter(entry_date__lte=end)

        movements = self._sums(in_window)
        prior = self._sums(base.filter(entry_date__lt=start)) if start else {}

        rows = []
        total_debit = ZERO
        total_credit = ZERO

        for acc in accounts:
            p_debit, p_credit = prior.get(acc.pk, (ZERO, ZERO))
            m_debit, m_credit = movements.get(acc.pk, (ZERO, ZERO))

            sign = 1 if acc.is_debit_normal else -1
            opening = _q2(acc.opening_balance + sign * (p_debit - p_credit))
            closing = _q2(opening + sign * (m_debit - m_credit))

            if opening == ZERO and closing == ZERO and m_debit == ZERO and m_credit == ZERO:
                continue

            # Convert the normal-balance figure into a debit/credit column.
            natural_debit = closing if acc.is_debit_normal else -closing
            debit = natural_debit if natural_debit > 0 else ZERO
            credit = -natural_debit if natural_debit < 0 else ZERO

            total_debit += debit
            total_credit += credit

            rows.append(
                {
                    "account_id": acc.pk,
                    "account_code": acc.code,
                    "account_name": acc.name,
                    "account_type": acc.account_type,
                    "normal_balance": acc.normal_balance,
                    "opening_balance": str(opening),
                    "period_debit": str(m_debit),
                    "period_credit": str(m_credit),
                    "closing_balance": str(closing),
                    "debit": str(_q2(debit)),
                    "credit": str(_q2(credit)),
                }
            )

        total_debit = _q2(total_debit)
        total_credit = _q2(total_credit)
        difference = _q2(total_debit - total_credit)
        epsilon = Decimal(str(getattr(settings, "ACCOUNTING_BALANCE_EPSILON", "0.01")))

        return {
            "organization_id": organization_id,
            "start_date": start.isoformat() if start else None,
            "end_date": end.isoformat() if end else None,
            "accounts": rows,
            "totals": {
                "debit": str(total_debit),
                "credit": str(total_credit),
                "difference": str(difference),
                "is_balanced": abs(difference) < epsilon,
            },
        }
