"""
Audit app configuration
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class AuditConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'audit'
    verbose_name = 'Auditing'

    def ready(self):
        """Enable automatic audit stamping unless AUDITING['ENABLED'] is off"""
        from audit.conf import auditing_enabled, get_auditing_setting
        from audit.signals import connect_signals

        if not auditing_enabled():
            logger.warning("Auditing is disabled; audit fields will not be stamped")
            return

        connect_signals()
        logger.info(f"Auditing enabled with auditor {get_auditing_setting('AUDITOR')}")
