"""
Observability middleware.

Request ids and one structured log line per request. The request id is
kept in a context variable so every log record of the request carries it.
"""

import contextvars
import logging
import time
import uuid
from typing import Callable, Optional

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

request_id_context: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


def get_request_id() -> Optional[str]:
    """Request id of the request being served, if any."""
    return request_id_context.get(None)


# Probe endpoints are hit every few seconds and are not logged.
QUIET_PATHS = ("/health/", "/ready/", "/metrics")

# Rejections that are normal business outcomes, not client bugs.
_EXPECTED_REJECTIONS = {401: "unauthenticated", 403: "denied", 409: "limit_reached"}


def request_outcome(status_code: int) -> str:
    if status_code >= 500:
        return "server_error"
    if status_code in _EXPECTED_REJECTIONS:
        return _EXPECTED_REJECTIONS[status_code]
    if status_code >= 400:
        return "client_error"
    return "success"


class ObservabilityMiddleware:
    """
    Assigns a request id (honouring an incoming ``X-Request-ID``), echoes it
    on the response and writes one structured log line per request.

    Authorization denials and usage limit rejections are logged at INFO;
    other 4xx at WARNING and 5xx at ERROR.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.request_id = request_id  # type: ignore
        token = request_id_context.set(request_id)
        started = time.perf_counter()
        try:
            response = self.get_response(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra=self._fields(request, started, error_type=type(e).__name__),
                exc_info=True,
            )
            raise
        finally:
            request_id_context.reset(token)

        response[REQUEST_ID_HEADER] = request_id
        if not request.path.startswith(QUIET_PATHS):
            self._log(request, response, started)
        return response

    @staticmethod
    def _fields(request: HttpRequest, started: float, **extra) -> dict:
        fields = {
            "request_id": getattr(request, "request_id", None),
            "method": request.method,
            "path": request.path,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        }
        clinic_id = getattr(request, "clinic_id", None)
        if clinic_id:
            fields["clinic_id"] = str(clinic_id)
        fields.update(extra)
        return fields

    def _log(self, request: HttpRequest, response: HttpResponse, started: float) -> None:
        outcome = request_outcome(response.status_code)
        fields = self._fields(
            request, started, status_code=response.status_code, request_status=outcome
        )
        if outcome == "server_error":
            logger.error("Request completed with server error", extra=fields)
        elif outcome == "client_error":
            logger.warning("Request completed with client error", extra=fields)
        else:
            logger.info("Request completed (%s)", outcome, extra=fields)
