"""
Authentication for the REST API.

Requests authenticate with HTTP Basic credentials checked against the
access app's principals. The authenticated ``request.user`` is the
``Principal`` domain entity, which the authorization resolver accepts
directly.
"""

import logging

from asgiref.sync import async_to_sync
from django.contrib.auth.hashers import check_password
from rest_framework import exceptions
from rest_framework.authentication import BasicAuthentication

from access.infrastructure.repositories.django_principal_repository import (
    DjangoPrincipalRepository,
)

logger = logging.getLogger(__name__)

_principal_repo = DjangoPrincipalRepository()


class PrincipalBasicAuthentication(BasicAuthentication):
    """HTTP Basic authentication against principals."""

    www_authenticate_realm = "medicore"

    def authenticate_credentials(self, userid, password, request=None):
        principal = async_to_sync(_principal_repo.find_by_email)(userid)
        if principal is None or not check_password(password, principal.password_hash):
            logger.info("Authentication failed", extra={"email": userid})
            raise exceptions.AuthenticationFailed("Invalid email or password.")
        if not principal.is_active:
            raise exceptions.AuthenticationFailed("Principal inactive or deleted.")
        return (principal, None)
