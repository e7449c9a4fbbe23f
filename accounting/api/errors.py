# accounting/api/errors.py

"""
PATH: accounting/api/errors.py

SERVICE ERROR -> HTTP RESPONSE (SINGLE MAPPING)

- LedgerValidationError -> 400 (detail + per-field errors)
- StateConflictError    -> 409
- NotFoundError         -> 404
- LedgerIntegrityError  -> 500, opaque body; full detail goes to the log
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountingServiceError,
    LedgerIntegrityError,
    LedgerValidationError,
    NotFoundError,
    StateConflictError,
)

logger = logging.getLogger(__name__)

STATUS_BY_KIND = (
    (LedgerValidationError, status.HTTP_400_BAD_REQUEST),
    (StateConflictError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
)


def service_error_response(exc: AccountingServiceError) -> Response:
    if isinstance(exc, LedgerIntegrityError) or not isinstance(exc, AccountingServiceError):
        logger.error("Ledger integrity failure", exc_info=exc)
        return Response(
            {"detail": "The operation could not be completed. No changes were saved."},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    for kind, http_status in STATUS_BY_KIND:
        if isinstance(exc, kind):
            return Response(exc.as_dict(), status=http_status)

    return Response(exc.as_dict(), status=status.HTTP_400_BAD_REQUEST)
