"""
Clinic context middleware.

Reads the clinic selected by the client from the ``X-Clinic-ID`` header
(configurable through ``CLINIC_CONTEXT_HEADER``) and makes it available
for the rest of the request. Membership is not checked here; views pass
the clinic id to the authorization resolver, which denies non-members.
"""

import contextvars
import logging
import uuid
from typing import Callable, Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse

logger = logging.getLogger(__name__)

clinic_context: contextvars.ContextVar[Optional[uuid.UUID]] = contextvars.ContextVar(
    "clinic_id", default=None
)


def get_current_clinic_id() -> Optional[uuid.UUID]:
    """
    Get the clinic selected for the current request.

    Returns:
        Clinic ID (UUID) or None if the request carries no clinic context
    """
    return clinic_context.get(None)


class ClinicContextMiddleware:
    """Sets ``request.clinic_id`` and the clinic context variable."""

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response
        self.header = getattr(settings, "CLINIC_CONTEXT_HEADER", "X-Clinic-ID")

    def __call__(self, request: HttpRequest) -> HttpResponse:
        raw = request.headers.get(self.header)
        clinic_id = None
        if raw:
            try:
                clinic_id = uuid.UUID(raw.strip())
            except ValueError:
                logger.warning("Malformed clinic header", extra={"value": raw})
                return JsonResponse(
                    {
                        "error": {
                            "code": "INVALID_CLINIC_ID",
                            "message": f"{self.header} must be a UUID",
                        }
                    },
                    status=400,
                )

        request.clinic_id = clinic_id  # type: ignore
        token = clinic_context.set(clinic_id)
        try:
            return self.get_response(request)
        finally:
            clinic_context.reset(token)
