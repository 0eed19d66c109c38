"""
App configuration for the MediCore service.
"""
import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class MediCoreServiceConfig(AppConfig):
    """App configuration for MediCoreService."""

    name = "MediCoreService"
    verbose_name = "MediCore Service"

    def ready(self):
        """Register event handlers once the app registry is loaded."""
        from core.infrastructure.event_handlers import register_event_handlers

        register_event_handlers()
