"""
Persistence hooks that stamp audit metadata.

The ORM calls ``before_insert`` / ``before_update`` synchronously right
before a row is written (see ``audit.signals``). Entities never stamp
themselves.
"""

import logging

from django.utils import timezone

from audit.auditor import get_auditor

logger = logging.getLogger(__name__)


class AuditingInterceptor:
    """
    Stamps anything implementing ``audit.metadata.HasAuditMetadata``.

    Args:
        auditor: object with ``get_current_auditor()``; defaults to the one
            configured in ``AUDITING['AUDITOR']``, looked up on each call
        clock: callable returning an aware datetime
    """

    def __init__(self, auditor=None, clock=timezone.now):
        self._auditor = auditor
        self.clock = clock

    @property
    def auditor(self):
        return self._auditor or get_auditor()

    def before_insert(self, entity):
        """Stamp created_* and updated_* with the same instant and actor"""
        metadata = entity.audit_metadata
        actor_id = self.auditor.get_current_auditor()
        metadata.stamp_creation(self.clock(), actor_id)
        entity.apply_audit_metadata(metadata)
        logger.debug(f"Stamped creation of {entity.__class__.__name__} by {actor_id}")

    def before_update(self, entity):
        """Stamp updated_*; creation fields keep their persisted values"""
        metadata = entity.audit_metadata
        persisted = getattr(entity, 'persisted_audit_metadata', None)

        if persisted is not None and persisted.is_stamped:
            if (metadata.created_at, metadata.created_by) != (persisted.created_at, persisted.created_by):
                logger.warning(
                    f"Ignoring change to write-once creation fields on "
                    f"{entity.__class__.__name__} #{getattr(entity, 'pk', None)}"
                )
                metadata.created_at = persisted.created_at
                metadata.created_by = persisted.created_by

        actor_id = self.auditor.get_current_auditor()
        metadata.stamp_modification(self.clock(), actor_id)
        entity.apply_audit_metadata(metadata)
        logger.debug(f"Stamped modification of {entity.__class__.__name__} #{getattr(entity, 'pk', None)} by {actor_id}")


default_interceptor = AuditingInterceptor()
