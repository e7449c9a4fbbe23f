# accounting/api/tenancy.py

"""
PATH: accounting/api/tenancy.py

ORGANIZATION RESOLUTION

Every accounting query is partitioned by organization_id. The API takes it
from the X-Organization-ID header and falls back to DEFAULT_ORGANIZATION_ID.
"""

from __future__ import annotations

from django.conf import settings


def get_organization_id(request) -> str:
    header = getattr(settings, "ORGANIZATION_HEADER", "HTTP_X_ORGANIZATION_ID")
    value = (request.META.get(header) or "").strip()
    return value[:64] or settings.DEFAULT_ORGANIZATION_ID


class OrganizationScopedMixin:
    """Adds self.organization_id to API views."""

    @property
    def organization_id(self) -> str:
        return get_organization_id(self.request)
