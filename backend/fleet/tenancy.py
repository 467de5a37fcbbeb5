"""
Tenant resolution for API requests.

The calling organization is identified by the X-Organization-Id header.
Authentication is handled upstream; this module only maps the header to an
Organization row and scopes lookups to it.
"""

import logging
import uuid

from rest_framework.response import Response

from .models import Organization

logger = logging.getLogger(__name__)

ORGANIZATION_HEADER = 'HTTP_X_ORGANIZATION_ID'


class OrganizationResolutionError(Exception):
    """Raised when the calling organization cannot be resolved."""

    def __init__(self, message, status_code):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def get_request_organization(request):
    """
    Resolve the organization making the request.

    Raises:
        OrganizationResolutionError: 400 for a missing or malformed header,
            404 for an unknown organization.
    """
    raw_id = request.META.get(ORGANIZATION_HEADER, '').strip()
    if not raw_id:
        raise OrganizationResolutionError('X-Organization-Id header is required', 400)

    try:
        organization_id = uuid.UUID(raw_id)
    except ValueError:
        raise OrganizationResolutionError(f'Invalid organization id: {raw_id}', 400)

    try:
        return Organization.objects.get(id=organization_id)
    except Organization.DoesNotExist:
        logger.warning(f"Request for unknown organization {organization_id}")
        raise OrganizationResolutionError(f'Organization {organization_id} not found', 404)


class OrganizationScopedViewMixin:
    """
    Resolve ``self.organization`` before any DRF handler runs.

    Resolution failures are answered with ``{'error': ...}`` and the
    matching status code.
    """

    organization = None

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.organization = get_request_organization(request)

    def handle_exception(self, exc):
        if isinstance(exc, OrganizationResolutionError):
            return Response({'error': exc.message}, status=exc.status_code)
        return super().handle_exception(exc)


def get_tenant_object(queryset, organization, object_id):
    """
    Fetch an object by id restricted to the given organization.

    Returns None when the id is malformed, unknown, or owned by another
    organization, so callers can answer 404 without leaking existence.
    """
    try:
        object_uuid = uuid.UUID(str(object_id))
    except ValueError:
        return None
    return queryset.filter(id=object_uuid, organization=organization).first()
