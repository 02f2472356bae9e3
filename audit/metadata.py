"""
Audit metadata value objects and capability interfaces.

The lifecycle rules live here, independent of the ORM:
- AuditMetadata: creation fields are write-once, updated_at never goes back
- SoftDeleteMetadata: deleted_at / deleted_by are set and cleared together

``audit.models`` maps these onto database columns; anything that implements
``HasAuditMetadata`` can be stamped by ``audit.interceptors``.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from django.utils import timezone

from core.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass
class AuditMetadata:
    """Who created / last modified an entity, and when"""
    created_at: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[int] = None

    @property
    def is_stamped(self) -> bool:
        """True once the creation stamp has been applied"""
        return self.created_at is not None

    def stamp_creation(self, now: datetime, actor_id: Optional[int]):
        """First persistence: creation and modification stamps are identical"""
        self.created_at = now
        self.created_by = actor_id
        self.updated_at = now
        self.updated_by = actor_id

    def stamp_modification(self, now: datetime, actor_id: Optional[int]):
        """Subsequent persistence: only the modification stamp moves"""
        if self.updated_at is not None and now < self.updated_at:
            # Clock went backwards (or another node is ahead); keep monotonic
            now = self.updated_at
        self.updated_at = now
        self.updated_by = actor_id


@dataclass
class SoftDeleteMetadata:
    """Audit metadata plus the logical deletion pair"""
    audit: AuditMetadata = field(default_factory=AuditMetadata)
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[int] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self, actor_id: Optional[int], now: Optional[datetime] = None):
        """
        Mark as logically deleted by ``actor_id``.

        Raises InvalidArgumentError (state untouched) when actor_id is None.
        Marking an already-deleted entity re-stamps both fields.
        """
        if actor_id is None:
            raise InvalidArgumentError(
                message="User ID cannot be null when marking entity as deleted",
                details={'field': 'actor_id'}
            )
        if self.is_deleted:
            logger.debug(f"Re-stamping deletion (was {self.deleted_at} by {self.deleted_by})")
        self.deleted_at = now or timezone.now()
        self.deleted_by = actor_id

    def restore(self):
        """Clear the deletion pair; no-op on a live entity"""
        self.deleted_at = None
        self.deleted_by = None


@runtime_checkable
class HasAuditMetadata(Protocol):
    """Capability: carries AuditMetadata the persistence hooks can stamp"""

    @property
    def audit_metadata(self) -> AuditMetadata:
        ...

    def apply_audit_metadata(self, metadata: AuditMetadata) -> None:
        ...


@runtime_checkable
class IsSoftDeletable(HasAuditMetadata, Protocol):
    """Capability: can be logically deleted and restored"""

    @property
    def soft_delete_metadata(self) -> SoftDeleteMetadata:
        ...

    @property
    def is_deleted(self) -> bool:
        ...

    def mark_deleted(self, actor_id: Optional[int]) -> None:
        ...

    def restore(self) -> None:
        ...
