"""
License key API views.

Key generation, validation, parsing and statistics. Checks are scoped to
the clinic selected through the clinic context header, or made across all
of the principal's clinics when no clinic is selected.
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.authorization import authorize
from api.v1.license_keys.serializers import (
    GeneratedKeySerializer,
    GeneratedKeysSerializer,
    GenerateKeyRequestSerializer,
    GenerateMultipleKeysRequestSerializer,
    KeyStatisticsSerializer,
    KeyValidationSerializer,
    ParsedKeySerializer,
    ParseKeyRequestSerializer,
    ValidateKeyRequestSerializer,
)
from licenses.application.services.licensing import build_key_generator
from licenses.domain.key_generator import STRATEGY_DESCRIPTIONS, LicenseKeyGenerator

_key_generator = build_key_generator()


def _clinic_id(request: Request):
    return getattr(request, "clinic_id", None)


def _invalid(serializer) -> Response:
    return Response(
        {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request",
                "fields": serializer.errors,
            }
        },
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


class GenerateKeyView(APIView):
    """Generate one license key."""

    @extend_schema(
        operation_id="generate_license_key",
        summary="Generate License Key",
        description=(
            "Generate a key that has never been issued. With a plan, the key "
            "prefix reflects the plan tier unless an explicit prefix is given. "
            "Generating does not record the key; it is recorded when a license "
            "is provisioned with it."
        ),
        tags=["License Keys"],
        request=GenerateKeyRequestSerializer,
        responses={
            201: GeneratedKeySerializer,
            403: {"description": "Missing permission licenses.generate_keys"},
            422: {"description": "Invalid strategy or options"},
        },
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_generate)(request)

    async def _handle_generate(self, request: Request) -> Response:
        denied = await authorize(request, "licenses.generate_keys", _clinic_id(request))
        if denied is not None:
            return denied

        serializer = GenerateKeyRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)
        data = serializer.validated_data

        if data.get("plan"):
            key = await _key_generator.generate_with_characteristics(
                data["plan"], data["strategy"], data["options"]
            )
        else:
            key = await _key_generator.generate(data["strategy"], data["options"])
        return Response({"key": key, "strategy": data["strategy"]}, status=status.HTTP_201_CREATED)


class GenerateMultipleKeysView(APIView):
    """Generate a batch of distinct keys."""

    @extend_schema(
        operation_id="generate_license_keys",
        summary="Generate Multiple License Keys",
        tags=["License Keys"],
        request=GenerateMultipleKeysRequestSerializer,
        responses={
            201: GeneratedKeysSerializer,
            403: {"description": "Missing permission licenses.generate_keys"},
            422: {"description": "Invalid count, strategy or options"},
        },
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_generate_multiple)(request)

    async def _handle_generate_multiple(self, request: Request) -> Response:
        denied = await authorize(request, "licenses.generate_keys", _clinic_id(request))
        if denied is not None:
            return denied

        serializer = GenerateMultipleKeysRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)
        data = serializer.validated_data

        keys = await _key_generator.generate_multiple(
            data["count"], data["strategy"], data["options"]
        )
        return Response(
            {"keys": keys, "count": len(keys), "strategy": data["strategy"]},
            status=status.HTTP_201_CREATED,
        )


class ValidateKeyView(APIView):
    """Check a key against a strategy's format."""

    @extend_schema(
        operation_id="validate_license_key",
        summary="Validate License Key Format",
        description=(
            "Structural check of a key. With check_exists the key registry is "
            "also consulted."
        ),
        tags=["License Keys"],
        request=ValidateKeyRequestSerializer,
        responses={200: KeyValidationSerializer},
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_validate)(request)

    async def _handle_validate(self, request: Request) -> Response:
        denied = await authorize(request, "licenses.view", _clinic_id(request))
        if denied is not None:
            return denied

        serializer = ValidateKeyRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)
        data = serializer.validated_data

        body = {
            "key": data["key"],
            "strategy": data["strategy"],
            "valid": LicenseKeyGenerator.validate_format(
                data["key"], data["strategy"], data["options"] or None
            ),
        }
        if data["check_exists"]:
            body["exists"] = await _key_generator.key_exists(data["key"])
        return Response(body)


class ParseKeyView(APIView):
    """Decompose a key into prefix and segments."""

    @extend_schema(
        operation_id="parse_license_key",
        summary="Parse License Key",
        tags=["License Keys"],
        request=ParseKeyRequestSerializer,
        responses={200: ParsedKeySerializer},
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_parse)(request)

    async def _handle_parse(self, request: Request) -> Response:
        denied = await authorize(request, "licenses.view", _clinic_id(request))
        if denied is not None:
            return denied

        serializer = ParseKeyRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)
        parsed = LicenseKeyGenerator.parse_license_key(serializer.validated_data["key"])
        return Response(parsed.to_dict())


class KeyStrategiesView(APIView):
    """List the supported generation strategies."""

    @extend_schema(
        operation_id="list_key_strategies",
        summary="List Key Strategies",
        tags=["License Keys"],
        responses={200: {"type": "object", "additionalProperties": {"type": "string"}}},
    )
    def get(self, request: Request) -> Response:
        return Response(
            {strategy.value: description for strategy, description in STRATEGY_DESCRIPTIONS.items()}
        )


class KeyStatisticsView(APIView):
    """Issued key and license counts."""

    @extend_schema(
        operation_id="license_key_statistics",
        summary="License Key Statistics",
        tags=["License Keys"],
        responses={
            200: KeyStatisticsSerializer,
            403: {"description": "Missing permission system.licenses"},
        },
    )
    def get(self, request: Request) -> Response:
        return async_to_sync(self._handle_statistics)(request)

    async def _handle_statistics(self, request: Request) -> Response:
        denied = await authorize(request, "system.licenses")
        if denied is not None:
            return denied
        stats = await _key_generator.get_statistics()
        return Response(stats.to_dict())
