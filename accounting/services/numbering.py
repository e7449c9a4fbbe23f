# accounting/services/numbering.py

"""
======================================================
PATH: accounting/services/numbering.py
======================================================
VOUCHER NUMBERING

Format: {TYPE}-{fiscal_year}-{seq:04d}   e.g. JV-2025-0001

Rules:
- One counter per (organization, voucher type, fiscal year)
- The counter row is locked (select_for_update) while incrementing
- A brand-new counter continues from the highest suffix already in use
- Numbers are never reused, not even after a voucher is voided or deleted
- The (organization_id, voucher_number) unique constraint is the final
  guard; allocate_voucher_number() retries on collision
"""

from __future__ import annotations

import logging
import re

from django.conf import settings
from django.db import IntegrityError, transaction

from accounting.models.sequence import VoucherSequence
from accounting.models.voucher import Voucher
from accounting.services.exceptions import DuplicateVoucherNumberError, InvalidEntryError

logger = logging.getLogger(__name__)

_VALID_TYPES = {code for code, _ in Voucher.VOUCHER_TYPES}


def _highest_used_suffix(organization_id: str, voucher_type: str, fiscal_year: str) -> int:
    prefix = f"{voucher_type}-{fiscal_year}-"
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")

    highest = 0
    numbers = Voucher.objects.filter(
        organization_id=organization_id,
        voucher_number__startswith=prefix,
    ).values_list("voucher_number", flat=True)

    for number in numbers:
        match = pattern.match(number)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def _locked_sequence(organization_id: str, voucher_type: str, fiscal_year: str) -> VoucherSequence:
    seq = (
        VoucherSequence.objects.select_for_update()
        .filter(
            organization_id=organization_id,
            voucher_type=voucher_type,
            fiscal_year=fiscal_year,
        )
        .first()
    )
    if seq is not None:
        return seq

    try:
        with transaction.atomic():
            VoucherSequence.objects.create(
                organization_id=organization_id,
                voucher_type=voucher_type,
                fiscal_year=fiscal_year,
                last_number=_highest_used_suffix(organization_id, voucher_type, fiscal_year),
            )
    except IntegrityError:
        # Another transaction created the counter first; lock theirs.
        pass

    return VoucherSequence.objects.select_for_update().get(
        organization_id=organization_id,
        voucher_type=voucher_type,
        fiscal_year=fiscal_year,
    )


@transaction.atomic
def generate_voucher_number(organization_id: str, voucher_type: str, fiscal_year) -> str:
    """Hand out the next number in the scope. Joins the caller's transaction."""
    if voucher_type not in _VALID_TYPES:
        raise InvalidEntryError(f"Unknown voucher type: {voucher_type}")

    fiscal_year = str(fiscal_year)
    seq = _locked_sequence(organization_id, voucher_type, fiscal_year)
    seq.last_number += 1
    seq.save(update_fields=["last_number", "updated_at"])

    return seq.format_number(seq.last_number)


def allocate_voucher_number(voucher: Voucher) -> Voucher:
    """
    Number and insert a new voucher, retrying when the number collides.

    Each attempt runs in its own savepoint, so a collision rolls back only
    that attempt. The caller's transaction stays usable.
    """
    max_retries = int(getattr(settings, "VOUCHER_NUMBER_MAX_RETRIES", 5))
    fiscal_year = Voucher.fiscal_year_for(voucher.voucher_date)

    for attempt in range(1, max_retries + 1):
        voucher.voucher_number = generate_voucher_number(
            voucher.organization_id, voucher.voucher_type, fiscal_year
        )
        taken = Voucher.objects.filter(
            organization_id=voucher.organization_id,
            voucher_number=voucher.voucher_number,
        ).exists()

        if not taken:
            try:
                with transaction.atomic():
                    voucher.save(force_insert=True)
                return voucher
            except IntegrityError:
                pass

        logger.warning(
            "Voucher number collision; retrying",
            extra={
                "organization_id": voucher.organization_id,
                "voucher_number": voucher.voucher_number,
                "attempt": attempt,
            },
        )

    raise DuplicateVoucherNumberError(
        f"Could not allocate a unique {voucher.voucher_type} number after {max_retries} attempts"
    )
