"""
HMAC activation codes.

The code for a key is the first 16 hex digits, upper-cased, of
HMAC-SHA256 over the key under the installation secret.
"""
import hashlib
import hmac
from typing import Optional

from django.conf import settings

from licenses.ports.activation_code_policy import ActivationCodePolicy

CODE_LENGTH = 16


class HmacActivationCodePolicy(ActivationCodePolicy):
    """Activation codes derived with HMAC-SHA256."""

    def __init__(self, secret: Optional[str] = None):
        self._secret = secret

    @property
    def secret(self) -> bytes:
        secret = self._secret or getattr(settings, "LICENSE_ACTIVATION_SECRET", None)
        return (secret or settings.SECRET_KEY).encode()

    def code_for(self, license_key: str) -> str:
        digest = hmac.new(self.secret, license_key.encode(), hashlib.sha256).hexdigest()
        return digest[:CODE_LENGTH].upper()

    def verify(self, license_key: str, activation_code: str) -> bool:
        if not activation_code:
            return False
        supplied = activation_code.strip().upper()
        return hmac.compare_digest(self.code_for(license_key), supplied)
