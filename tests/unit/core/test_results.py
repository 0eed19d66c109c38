"""
Unit tests for result types.
"""
import uuid

import pytest

from core.domain.exceptions import (
    AuthorizationDeniedError,
    BusinessRuleViolation,
    NotFoundError,
    UsageLimitExceededError,
)
from core.domain.results import (
    AuthorizationFailure,
    BusinessRuleFailure,
    NotFound,
    Ok,
    UsageLimitExceeded,
)


class TestOk:
    def test_ok_is_truthy_and_unwraps(self):
        result = Ok(42)
        assert result.ok
        assert bool(result)
        assert result.unwrap() == 42


class TestFailures:
    """Tests for Failure variants."""

    def test_failures_are_falsy(self):
        """Test failures never pass a truth test."""
        assert not NotFound(message="missing")
        assert NotFound(message="missing").ok is False

    def test_unwrap_raises_matching_exception(self):
        """Test unwrap converts each failure into its domain exception."""
        cases = [
            (AuthorizationFailure(message="no"), AuthorizationDeniedError),
            (NotFound(message="no", code="LICENSE_NOT_FOUND"), NotFoundError),
            (UsageLimitExceeded(message="no"), UsageLimitExceededError),
            (BusinessRuleFailure(message="no", code="LICENSE_EXPIRED"), BusinessRuleViolation),
        ]
        for failure, exception_class in cases:
            with pytest.raises(exception_class) as exc_info:
                failure.unwrap()
            assert exc_info.value.code == failure.code

    def test_authorization_failure_carries_details(self):
        """Test the exception keeps the missing permission and clinic."""
        clinic_id = uuid.uuid4()
        failure = AuthorizationFailure(
            message="Missing permission", required_permission="patients.create", clinic_id=clinic_id
        )

        exc = failure.to_exception()

        assert exc.required_permission == "patients.create"
        assert exc.clinic_id == clinic_id
        assert failure.to_dict() == {"code": "FORBIDDEN", "message": "Missing permission"}

    def test_usage_limit_exceeded_defaults(self):
        failure = UsageLimitExceeded(
            message="full", resource_type="patients", current=2, limit=2, requested=1
        )
        assert failure.code == "USAGE_LIMIT_EXCEEDED"
        assert (failure.current, failure.limit, failure.requested) == (2, 2, 1)
