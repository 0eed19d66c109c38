"""
Structured JSON logging.

Every record carries the request id and, when the client selected one,
the clinic id, so authorization denials and usage rejections can be
traced per clinic.
"""

from pythonjsonlogger import jsonlogger

from core.middleware.clinic_context import get_current_clinic_id
from core.middleware.observability import get_request_id

APP_LOGGERS = ("core", "clinics", "access", "licenses", "api")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding level, logger and request context."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        request_id = get_request_id()
        if request_id and "request_id" not in log_record:
            log_record["request_id"] = request_id
        clinic_id = get_current_clinic_id()
        if clinic_id and "clinic_id" not in log_record:
            log_record["clinic_id"] = str(clinic_id)


def get_logging_config(environment: str = "development") -> dict:
    """
    Args:
        environment: ``development`` logs the service apps at DEBUG,
            anything else at INFO

    Returns:
        A ``dictConfig`` dictionary with a JSON console handler
    """
    level = "DEBUG" if environment == "development" else "INFO"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": CustomJsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "json"},
        },
        "root": {"handlers": ["console"], "level": "INFO"},
        "loggers": {
            "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
            "celery": {"handlers": ["console"], "level": "INFO", "propagate": False},
            **{
                name: {"handlers": ["console"], "level": level, "propagate": False}
                for name in APP_LOGGERS
            },
        },
    }
