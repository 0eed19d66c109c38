"""
License API views.

Provisioning, status, usage, features, activation and lifecycle
transitions. Every view authorizes against the clinic that owns the
license it touches.
"""

import uuid
from typing import Optional, Tuple

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.authorization import actor_of, authorize
from api.exceptions import failure_response
from api.v1.licenses.serializers import (
    ActivateLicenseRequestSerializer,
    FeatureStatusSerializer,
    FeatureToggleRequestSerializer,
    KeyRegenerationSerializer,
    LicenseSerializer,
    LicenseStatusSerializer,
    ProvisionLicenseRequestSerializer,
    ProvisionLicenseResponseSerializer,
    RegenerateKeyRequestSerializer,
    RenewLicenseRequestSerializer,
    SuspendLicenseRequestSerializer,
    UsageChangeRequestSerializer,
    UsageReportSerializer,
)
from core.domain.exceptions import LicenseNotFoundError
from core.domain.results import NotFound
from licenses.application.commands.activate_license import ActivateLicenseCommand
from licenses.application.commands.provision_license import ProvisionLicenseCommand
from licenses.application.commands.record_usage import DecrementUsageCommand, IncrementUsageCommand
from licenses.application.commands.regenerate_license_key import RegenerateLicenseKeyCommand
from licenses.application.commands.renew_license import RenewLicenseCommand
from licenses.application.commands.resume_license import ResumeLicenseCommand
from licenses.application.commands.set_license_feature import SetLicenseFeatureCommand
from licenses.application.commands.suspend_license import SuspendLicenseCommand
from licenses.application.dto.license_dto import LicenseDTO
from licenses.application.handlers.get_license_status_handler import GetLicenseStatusHandler
from licenses.application.handlers.license_lifecycle_handlers import (
    ActivateLicenseHandler,
    RenewLicenseHandler,
    ResumeLicenseHandler,
    SetLicenseFeatureHandler,
    SuspendLicenseHandler,
)
from licenses.application.handlers.usage_handlers import (
    DecrementUsageHandler,
    GetLicenseUsageHandler,
    IncrementUsageHandler,
)
from licenses.application.queries.get_license_status import GetLicenseStatusQuery
from licenses.application.queries.get_license_usage import GetLicenseUsageQuery
from licenses.application.services.licensing import (
    build_lifecycle_manager,
    build_provision_handler,
    build_regenerate_handler,
    build_usage_manager,
)
from licenses.domain.license import License
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

# Initialize repositories (in production, use DI container)
_license_repo = DjangoLicenseRepository()


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


async def _license_for(
    request: Request, license_id: uuid.UUID, permission: str
) -> Tuple[Optional[License], Optional[Response]]:
    """
    Load a license and authorize ``permission`` in its clinic.

    An unknown license is reported as not found only to principals that
    hold the permission somewhere.

    Returns:
        (license, None) when granted, otherwise (None, error response)
    """
    license = await _license_repo.find_by_id(license_id)
    if license is None:
        denied = await authorize(request, permission)
        if denied is not None:
            return None, denied
        raise LicenseNotFoundError(f"License {license_id} not found")
    denied = await authorize(request, permission, license.clinic_id)
    if denied is not None:
        return None, denied
    return license, None


class ProvisionLicenseView(APIView):
    """Provision the license of a clinic."""

    @extend_schema(
        operation_id="provision_license",
        summary="Provision License",
        description=(
            "Create the license of a clinic with a freshly generated key, the "
            "plan's default features and limits, and return the activation code "
            "for the key. Requires the system.licenses permission."
        ),
        tags=["Licenses"],
        request=ProvisionLicenseRequestSerializer,
        responses={
            201: ProvisionLicenseResponseSerializer,
            400: {"description": "Clinic already has a license"},
            403: {"description": "Missing permission system.licenses"},
            404: {"description": "Clinic not found"},
            422: {"description": "Invalid request"},
        },
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_provision)(request)

    async def _handle_provision(self, request: Request) -> Response:
        denied = await authorize(request, "system.licenses")
        if denied is not None:
            return denied

        serializer = ProvisionLicenseRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)
        data = serializer.validated_data

        command = ProvisionLicenseCommand(
            clinic_id=data["clinic_id"],
            plan=data["plan"],
            strategy=data["strategy"],
            key_options=data["key_options"],
            expires_at=data.get("expires_at"),
            usage_limits=data["usage_limits"],
            features=data.get("features"),
            actor=actor_of(request),
        )
        result = await build_provision_handler().handle(command)
        return Response(result.to_dict(), status=status.HTTP_201_CREATED)


class LicenseDetailView(APIView):
    @extend_schema(
        operation_id="get_license",
        summary="Get License",
        tags=["Licenses"],
        responses={200: LicenseSerializer, 403: {"description": "Forbidden"}},
    )
    def get(self, request: Request, license_id: uuid.UUID) -> Response:
        return async_to_sync(self._handle_get)(request, license_id)

    async def _handle_get(self, request: Request, license_id: uuid.UUID) -> Response:
        license, denied = await _license_for(request, license_id, "licenses.view")
        if denied is not None:
            return denied
        return Response(LicenseDTO.from_entity(license).to_dict())


class RegenerateLicenseKeyView(APIView):
    """Replace a license's key."""

    @extend_schema(
        operation_id="regenerate_license_key",
        summary="Regenerate License Key",
        description=(
            "Issue a new key for the license. The old key is retired and is "
            "never issued again; the change is recorded in the audit trail."
        ),
        tags=["License Keys"],
        request=RegenerateKeyRequestSerializer,
        responses={
            200: KeyRegenerationSerializer,
            403: {"description": "Missing permission licenses.generate_keys"},
            404: {"description": "License not found"},
        },
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        return async_to_sync(self._handle_regenerate)(request, license_id)

    async def _handle_regenerate(self, request: Request, license_id: uuid.UUID) -> Response:
        license, denied = await _license_for(request, license_id, "licenses.generate_keys")
        if denied is not None:
            return denied

        serializer = RegenerateKeyRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        command = RegenerateLicenseKeyCommand(
            license_id=license.id,
            strategy=serializer.validated_data["strategy"],
            options=serializer.validated_data["options"],
            actor=actor_of(request),
        )
        result = await build_regenerate_handler().handle(command)
        return Response(result.to_dict())


class LicenseStatusView(APIView):
    """Effective validity of a license."""

    @extend_schema(
        operation_id="get_license_status",
        summary="Get License Status",
        tags=["Licenses"],
        responses={
            200: LicenseStatusSerializer,
            403: {"description": "Missing permission licenses.view"},
            404: {"description": "License not found"},
        },
    )
    def get(self, request: Request, license_id: uuid.UUID) -> Response:
        return async_to_sync(self._handle_status)(request, license_id)

    async def _handle_status(self, request: Request, license_id: uuid.UUID) -> Response:
        license, denied = await _license_for(request, license_id, "licenses.view")
        if denied is not None:
            return denied

        result = await GetLicenseStatusHandler(build_usage_manager()).handle(
            GetLicenseStatusQuery(license_id=license.id)
        )
        if not result.ok:
            return failure_response(result)
        return Response(result.value.to_dict())


class LicenseUsageView(APIView):
    """Usage report for every resource type."""

    @extend_schema(
        operation_id="get_license_usage",
        summary="Get License Usage",
        tags=["Licenses"],
        responses={
            200: UsageReportSerializer(many=True),
            403: {"description": "Missing permission licenses.view"},
            404: {"description": "License not found"},
        },
    )
    def get(self, request: Request, license_id: uuid.UUID) -> Response:
        return async_to_sync(self._handle_usage)(request, license_id)

    async def _handle_usage(self, request: Request, license_id: uuid.UUID) -> Response:
        license, denied = await _license_for(request, license_id, "licenses.view")
        if denied is not None:
            return denied

        result = await GetLicenseUsageHandler(build_usage_manager()).handle(
            GetLicenseUsageQuery(license_id=license.id)
        )
        if not result.ok:
            return failure_response(result)
        return Response([report.to_dict() for report in result.value.values()])


class _UsageChangeView(APIView):
    """Shared flow of the increment and decrement endpoints."""

    command_class = None
    handler_class = None

    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        return async_to_sync(self._handle_change)(request, license_id)

    async def _handle_change(self, request: Request, license_id: uuid.UUID) -> Response:
        license, denied = await _license_for(request, license_id, "licenses.manage")
        if denied is not None:
            return denied

        serializer = UsageChangeRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        command = self.command_class(
            license_id=license.id,
            resource_type=serializer.validated_data["resource_type"],
            amount=serializer.validated_data["amount"],
        )
        result = await self.handler_class(build_usage_manager()).handle(command)
        if not result.ok:
            return failure_response(result)
        return Response(result.value.to_dict())


class IncrementUsageView(_UsageChangeView):
    command_class = IncrementUsageCommand
    handler_class = IncrementUsageHandler

    @extend_schema(
        operation_id="increment_license_usage",
        summary="Increment License Usage",
        description="Consume units of a resource type. Rejected without change past the limit.",
        tags=["Licenses"],
        request=UsageChangeRequestSerializer,
        responses={
            200: UsageReportSerializer,
            409: {"description": "Usage limit exceeded"},
        },
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        return super().post(request, license_id)


class DecrementUsageView(_UsageChangeView):
    command_class = DecrementUsageCommand
    handler_class = DecrementUsageHandler

    @extend_schema(
        operation_id="decrement_license_usage",
        summary="Decrement License Usage",
        tags=["Licenses"],
        request=UsageChangeRequestSerializer,
        responses={
            200: UsageReportSerializer,
            400: {"description": "Usage would drop below zero"},
        },
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        return super().post(request, license_id)


class LicenseFeatureView(APIView):
    """Check or toggle a feature flag."""

    @extend_schema(
        operation_id="check_license_feature",
        summary="Check License Feature",
        tags=["Licenses"],
        responses={200: FeatureStatusSerializer},
    )
    def get(self, request: Request, license_id: uuid.UUID, feature: str) -> Response:
        return async_to_sync(self._handle_check)(request, license_id, feature)

    @extend_schema(
        operation_id="set_license_feature",
        summary="Enable or Disable License Feature",
        tags=["Licenses"],
        request=FeatureToggleRequestSerializer,
        responses={200: FeatureStatusSerializer},
    )
    def put(self, request: Request, license_id: uuid.UUID, feature: str) -> Response:
        return async_to_sync(self._handle_set)(request, license_id, feature)

    async def _handle_check(self, request: Request, license_id: uuid.UUID, feature: str):
        license, denied = await _license_for(request, license_id, "licenses.view")
        if denied is not None:
            return denied
        return Response({"feature": feature, "enabled": license.has_feature(feature)})

    async def _handle_set(self, request: Request, license_id: uuid.UUID, feature: str):
        license, denied = await _license_for(request, license_id, "licenses.manage")
        if denied is not None:
            return denied

        serializer = FeatureToggleRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        updated = await SetLicenseFeatureHandler(_license_repo).handle(
            SetLicenseFeatureCommand(
                license_id=license.id,
                feature=feature,
                enabled=serializer.validated_data["enabled"],
                actor=actor_of(request),
            )
        )
        return Response({"feature": feature, "enabled": updated.has_feature(feature)})


class ActivateLicenseView(APIView):
    """Activate a license with its key and activation code."""

    @extend_schema(
        operation_id="activate_license",
        summary="Activate License",
        description=(
            "Activate the license identified by its key. The activation code "
            "must match the code issued for that key."
        ),
        tags=["Licenses"],
        request=ActivateLicenseRequestSerializer,
        responses={
            200: LicenseSerializer,
            400: {"description": "Expired, suspended, already activated or wrong code"},
            403: {"description": "Missing permission licenses.activate"},
            404: {"description": "Unknown license key"},
        },
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_activate)(request)

    async def _handle_activate(self, request: Request) -> Response:
        serializer = ActivateLicenseRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)
        data = serializer.validated_data

        license = await _license_repo.find_by_key(data["license_key"])
        clinic_id = license.clinic_id if license is not None else None
        denied = await authorize(request, "licenses.activate", clinic_id)
        if denied is not None:
            return denied
        if license is None:
            return failure_response(
                NotFound(
                    message="License key not found",
                    code="LICENSE_NOT_FOUND",
                    entity="license",
                )
            )

        result = await ActivateLicenseHandler(build_lifecycle_manager()).handle(
            ActivateLicenseCommand(
                license_key=data["license_key"],
                activation_code=data["activation_code"],
                actor=actor_of(request),
            )
        )
        if not result.ok:
            return failure_response(result)
        return Response(LicenseDTO.from_entity(result.value).to_dict())


class SuspendLicenseView(APIView):
    @extend_schema(
        operation_id="suspend_license",
        summary="Suspend License",
        tags=["Licenses"],
        request=SuspendLicenseRequestSerializer,
        responses={200: LicenseSerializer, 400: {"description": "Already suspended"}},
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        return async_to_sync(self._handle_suspend)(request, license_id)

    async def _handle_suspend(self, request: Request, license_id: uuid.UUID) -> Response:
        license, denied = await _license_for(request, license_id, "licenses.manage")
        if denied is not None:
            return denied

        serializer = SuspendLicenseRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        suspended = await SuspendLicenseHandler(_license_repo).handle(
            SuspendLicenseCommand(
                license_id=license.id,
                reason=serializer.validated_data["reason"],
                actor=actor_of(request),
            )
        )
        return Response(LicenseDTO.from_entity(suspended).to_dict())


class ResumeLicenseView(APIView):
    @extend_schema(
        operation_id="resume_license",
        summary="Resume License",
        tags=["Licenses"],
        request=None,
        responses={200: LicenseSerializer, 400: {"description": "License is not suspended"}},
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        return async_to_sync(self._handle_resume)(request, license_id)

    async def _handle_resume(self, request: Request, license_id: uuid.UUID) -> Response:
        license, denied = await _license_for(request, license_id, "licenses.manage")
        if denied is not None:
            return denied

        resumed = await ResumeLicenseHandler(_license_repo).handle(
            ResumeLicenseCommand(license_id=license.id, actor=actor_of(request))
        )
        return Response(LicenseDTO.from_entity(resumed).to_dict())


class RenewLicenseView(APIView):
    @extend_schema(
        operation_id="renew_license",
        summary="Renew License",
        description="Extend the license expiry by a number of calendar months.",
        tags=["Licenses"],
        request=RenewLicenseRequestSerializer,
        responses={200: LicenseSerializer},
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        return async_to_sync(self._handle_renew)(request, license_id)

    async def _handle_renew(self, request: Request, license_id: uuid.UUID) -> Response:
        license, denied = await _license_for(request, license_id, "licenses.manage")
        if denied is not None:
            return denied

        serializer = RenewLicenseRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        renewed = await RenewLicenseHandler(_license_repo).handle(
            RenewLicenseCommand(
                license_id=license.id,
                months=serializer.validated_data["months"],
                actor=actor_of(request),
            )
        )
        return Response(LicenseDTO.from_entity(renewed).to_dict())
