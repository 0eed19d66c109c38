"""
API exception handlers.

Maps domain failures and DRF errors onto HTTP responses.
Every error body has the shape ``{"error": {"code", "message"}}``.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    AuthorizationDeniedError,
    BusinessRuleViolation,
    CacheUnavailableError,
    DomainException,
    DuplicateLicenseKeyError,
    InvalidInputError,
    KeyCollisionExhaustedError,
    NotFoundError,
    UsageLimitExceededError,
)
from core.domain.results import Failure, UsageLimitExceeded

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins.
_STATUS_BY_EXCEPTION = (
    (AuthorizationDeniedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidInputError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (UsageLimitExceededError, status.HTTP_409_CONFLICT),
    (DuplicateLicenseKeyError, status.HTTP_409_CONFLICT),
    (BusinessRuleViolation, status.HTTP_400_BAD_REQUEST),
    (KeyCollisionExhaustedError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (CacheUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: DomainException) -> int:
    for exception_class, status_code in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exception_class):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def failure_response(failure: Failure) -> Response:
    """Response for a rejected business outcome."""
    body = failure.to_dict()
    exc = failure.to_exception()
    for attribute in ("required_permission", "required_role", "field", "resource_type"):
        value = getattr(failure, attribute, None)
        if value is not None:
            body[attribute] = value
    if getattr(failure, "clinic_id", None) is not None:
        body["clinic_id"] = str(failure.clinic_id)
    if isinstance(failure, UsageLimitExceeded):
        body.update(current=failure.current, limit=failure.limit, requested=failure.requested)
    return Response({"error": body}, status=status_for(exc))


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    request_id = _get_request_id(context)

    if isinstance(exc, DomainException):
        response = _handle_domain_exception(exc, request_id)
        if request_id:
            response["X-Request-ID"] = request_id
        return response

    if isinstance(exc, APIException):
        response = exception_handler(exc, context)
        if response:
            code = (
                exc.default_code.upper().replace("-", "_")
                if hasattr(exc, "default_code")
                else "API_ERROR"
            )
            detail = response.data.get("detail") if isinstance(response.data, dict) else None
            response.data = {"error": {"code": code, "message": detail or exc.default_detail}}
            if request_id:
                response["X-Request-ID"] = request_id
            return response

    if isinstance(exc, Http404):
        response = Response(
            {"error": {"code": "NOT_FOUND", "message": "Resource not found"}},
            status=status.HTTP_404_NOT_FOUND,
        )
        if request_id:
            response["X-Request-ID"] = request_id
        return response

    return _handle_unexpected_exception(exc, context, request_id)


def _get_request_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract request ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "request_id", None)


def _handle_domain_exception(exc: DomainException, request_id: Optional[str]) -> Response:
    """Handle domain-specific exceptions."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(
            "Domain fault: %s - %s", exc.code, exc.message, extra={"request_id": request_id}
        )
        message = "An internal error occurred"
    else:
        logger.warning(
            "Domain exception: %s - %s", exc.code, exc.message, extra={"request_id": request_id}
        )
        message = exc.message
    return Response({"error": {"code": exc.code, "message": message}}, status=status_code)


def _handle_unexpected_exception(
    exc: Exception, context: Dict[str, Any], request_id: Optional[str]
) -> Response:
    """Handle unexpected or untracked exceptions."""
    logger.error("Unexpected error: %s", exc, extra={"request_id": request_id}, exc_info=True)
    response = exception_handler(exc, context)
    if not response:
        response = Response(
            {"error": {"code": "INTERNAL_ERROR", "message": "An internal error occurred"}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    else:
        response.data = {
            "error": {"code": "INTERNAL_ERROR", "message": "An internal error occurred"}
        }
    if request_id:
        response["X-Request-ID"] = request_id
    return response
