"""
Auditable / Soft-deletable base models

Abstract models every CRM entity builds on:
- AuditableModel: created_at / created_by / updated_at / updated_by
- SoftDeletableModel: adds deleted_at / deleted_by and logical deletion

Columns are only carriers: stamping is done by ``audit.interceptors`` when
the row is saved, and the lifecycle rules live in ``audit.metadata``.
"""

import logging

from django.db import models
from django.db.models import Q, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from audit.auditor import get_current_auditor
from audit.conf import auditing_enabled
from audit.interceptors import default_interceptor
from audit.metadata import AuditMetadata, SoftDeleteMetadata
from core.constants import AuditField
from core.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


# ============================================================================
# CUSTOM QUERYSETS AND MANAGERS
# ============================================================================

class AuditedQuerySet(models.QuerySet):
    """QuerySet whose bulk ``update()`` keeps the modification stamp current"""

    def update(self, **kwargs):
        for name in AuditField.CREATION:
            if name in kwargs:
                logger.warning(f"Ignoring bulk update of write-once field {name} on {self.model.__name__}")
                kwargs.pop(name)

        if auditing_enabled():
            if AuditField.UPDATED_AT not in kwargs:
                now = Value(timezone.now(), output_field=models.DateTimeField())
                kwargs[AuditField.UPDATED_AT] = Greatest(AuditField.UPDATED_AT, now)
            if AuditField.UPDATED_BY not in kwargs:
                kwargs[AuditField.UPDATED_BY] = get_current_auditor()

        return super().update(**kwargs)

    update.alters_data = True

    def bulk_create(self, objs, *args, **kwargs):
        """bulk_create skips pre_save, so stamp each object here"""
        objs = list(objs)
        if auditing_enabled():
            for obj in objs:
                default_interceptor.before_insert(obj)
        return super().bulk_create(objs, *args, **kwargs)

    bulk_create.alters_data = True


class SoftDeleteQuerySet(AuditedQuerySet):
    """QuerySet with soft-delete filtering and bulk lifecycle operations"""

    def alive(self):
        """Rows that are not logically deleted"""
        return self.filter(deleted_at__isnull=True)

    def dead(self):
        """Rows that are logically deleted"""
        return self.filter(deleted_at__isnull=False)

    def mark_deleted(self, actor_id):
        """Bulk soft delete; returns number of rows marked"""
        if actor_id is None:
            raise InvalidArgumentError(
                message="User ID cannot be null when marking entity as deleted",
                details={'field': 'actor_id'}
            )
        return self.update(deleted_at=timezone.now(), deleted_by=actor_id)

    mark_deleted.alters_data = True

    def restore(self):
        """Bulk restore; returns number of rows matched"""
        return self.update(deleted_at=None, deleted_by=None)

    restore.alters_data = True

    def delete(self, actor_id=None):
        """
        Soft delete instead of removing rows.

        Uses the current auditor when ``actor_id`` is not given. Returns the
        same ``(count, {label: count})`` shape as ``QuerySet.delete()``.
        """
        if actor_id is None:
            actor_id = get_current_auditor()
        count = self.mark_deleted(actor_id)
        logger.info(f"Soft deleted {count} {self.model.__name__} row(s) by {actor_id}")
        return count, {self.model._meta.label: count}

    delete.alters_data = True
    delete.queryset_only = True


class AuditedManager(models.Manager):
    """Default manager for auditable models"""

    def get_queryset(self):
        return AuditedQuerySet(self.model, using=self._db)


class SoftDeleteManager(models.Manager):
    """
    Default manager for soft-deletable models.

    Hides deleted rows. ``with_deleted()`` / ``only_deleted()`` are the
    explicit overrides.
    """

    def _unfiltered(self):
        return SoftDeleteQuerySet(self.model, using=self._db)

    def get_queryset(self):
        return self._unfiltered().alive()

    def with_deleted(self):
        return self._unfiltered()

    def only_deleted(self):
        return self._unfiltered().dead()

    def mark_deleted(self, actor_id):
        return self.get_queryset().mark_deleted(actor_id)

    def restore(self):
        return self.only_deleted().restore()


# ============================================================================
# BASE MODELS
# ============================================================================

class AuditableModel(models.Model):
    """
    Abstract base for entities with an audit trail.

    created_at / created_by are written once on insert; updated_at /
    updated_by are rewritten on every save. All four are filled in by the
    auditing hooks, never by application code.
    """

    created_at = models.DateTimeField(
        editable=False,
        help_text="When the record was created"
    )
    created_by = models.BigIntegerField(
        null=True,
        blank=True,
        editable=False,
        help_text="ID of the user who created the record"
    )
    updated_at = models.DateTimeField(
        editable=False,
        help_text="When the record was last modified"
    )
    updated_by = models.BigIntegerField(
        null=True,
        blank=True,
        editable=False,
        help_text="ID of the user who last modified the record"
    )

    objects = AuditedManager()

    # Creation stamp as last read from / written to the database
    _persisted_audit_metadata = None

    class Meta:
        abstract = True

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        if not set(AuditField.CREATION) & instance.get_deferred_fields():
            instance._remember_creation_stamp()
        return instance

    def _remember_creation_stamp(self):
        self._persisted_audit_metadata = AuditMetadata(
            created_at=self.created_at,
            created_by=self.created_by,
        )

    @property
    def persisted_audit_metadata(self):
        return self._persisted_audit_metadata

    @property
    def audit_metadata(self):
        return AuditMetadata(
            created_at=self.created_at,
            created_by=self.created_by,
            updated_at=self.updated_at,
            updated_by=self.updated_by,
        )

    def apply_audit_metadata(self, metadata):
        self.created_at = metadata.created_at
        self.created_by = metadata.created_by
        self.updated_at = metadata.updated_at
        self.updated_by = metadata.updated_by

    def _do_update(self, base_qs, using, pk_val, values, update_fields, forced_update):
        # Creation columns are never part of an UPDATE, even for a preset pk
        values = [v for v in values if v[0].attname not in AuditField.CREATION]
        return super()._do_update(base_qs, using, pk_val, values, update_fields, forced_update)

    def save(self, **kwargs):
        """Partial saves always carry the modification stamp along"""
        update_fields = kwargs.get('update_fields')
        if update_fields is None and not self._state.adding:
            deferred = self.get_deferred_fields()
            if deferred:
                # Django would otherwise save only the loaded fields
                update_fields = [
                    f.attname for f in self._meta.concrete_fields
                    if not f.primary_key and f.attname not in deferred
                ]
        if update_fields:
            kwargs['update_fields'] = set(update_fields) | set(AuditField.MODIFICATION)
        super().save(**kwargs)
        self._remember_creation_stamp()


class SoftDeletableModel(AuditableModel):
    """
    Abstract base for entities that are logically deleted, never removed.

    ``objects`` hides deleted rows; ``all_objects`` sees everything.
    Subclasses declaring their own Meta should extend
    ``SoftDeletableModel.Meta`` to keep the deletion-pair constraint.

    Usage:
        customer.mark_deleted(current_user_id)
        customer.save()
    """

    deleted_by = models.BigIntegerField(
        null=True,
        blank=True,
        editable=False,
        help_text="ID of the user who deleted the record"
    )
    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        editable=False,
        db_index=True,
        help_text="When the record was deleted"
    )

    objects = SoftDeleteManager()
    all_objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        abstract = True
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(deleted_at__isnull=True, deleted_by__isnull=True)
                    | Q(deleted_at__isnull=False, deleted_by__isnull=False)
                ),
                name='%(app_label)s_%(class)s_deletion_pair',
            ),
        ]

    @property
    def soft_delete_metadata(self):
        return SoftDeleteMetadata(
            audit=self.audit_metadata,
            deleted_at=self.deleted_at,
            deleted_by=self.deleted_by,
        )

    def _apply_deletion(self, metadata):
        self.deleted_at = metadata.deleted_at
        self.deleted_by = metadata.deleted_by

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    def mark_deleted(self, actor_id):
        """
        Mark this record deleted by ``actor_id``. Does not save.

        Raises:
            InvalidArgumentError: actor_id is None (record left unchanged)
        """
        metadata = self.soft_delete_metadata
        metadata.mark_deleted(actor_id)
        self._apply_deletion(metadata)

    def restore(self):
        """Clear the deletion stamp. Does not save."""
        metadata = self.soft_delete_metadata
        metadata.restore()
        self._apply_deletion(metadata)

    def delete(self, using=None, keep_parents=False, actor_id=None):
        """
        Soft delete and save. The row is never removed.

        Falls back to the current auditor when ``actor_id`` is not given.
        """
        if actor_id is None:
            actor_id = get_current_auditor()
        self.mark_deleted(actor_id)
        self.save(using=using)
        logger.info(f"Soft deleted {self.__class__.__name__} #{self.pk} by {actor_id}")
        return 1, {self._meta.label: 1}

    delete.alters_data = True
