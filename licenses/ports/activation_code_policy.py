"""
Activation code policy port.

Derives the activation code expected for a license key. The derivation is
a product decision; deployments swap the policy without touching the
activation flow.
"""
from abc import ABC, abstractmethod


class ActivationCodePolicy(ABC):
    """Abstract activation code derivation."""

    @abstractmethod
    def code_for(self, license_key: str) -> str:
        """Activation code expected for ``license_key``."""
        pass

    @abstractmethod
    def verify(self, license_key: str, activation_code: str) -> bool:
        """True if ``activation_code`` is the code for ``license_key``."""
        pass
