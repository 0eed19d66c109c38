"""
Authorization gate for API views.

Views ask for a permission, optionally scoped to a clinic, and return the
denial response unchanged when the resolver refuses.
"""

from typing import Optional

from rest_framework.request import Request
from rest_framework.response import Response

from access.application.services.authorization import build_authorization_resolver
from api.exceptions import failure_response

_resolver = build_authorization_resolver()


def actor_of(request: Request) -> str:
    """Audit name of the authenticated principal."""
    email = getattr(request.user, "email", None)
    return str(email) if email is not None else "anonymous"


async def authorize(request: Request, permission: str, clinic_id=None) -> Optional[Response]:
    """
    Returns:
        None when granted, otherwise a 403 response naming the permission
    """
    result = await _resolver.require_permission(request.user, permission, clinic_id)
    if result.ok:
        return None
    return failure_response(result)
