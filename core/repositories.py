"""
Repository pattern implementation.
Abstracts data access and provides a clean interface for domain services.
"""
from typing import Generic, TypeVar, Optional, List
from django.db.models import QuerySet, Model
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=Model)


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.
    Follows Repository pattern for data access abstraction.
    """

    def __init__(self, model: type[T]):
        self.model = model

    def get_queryset(self) -> QuerySet[T]:
        """Get base queryset for custom queries"""
        return self.model._default_manager.all()

    def get_by_id(self, id: int, **filters) -> Optional[T]:
        """Get a single instance by ID"""
        return self.get_queryset().filter(id=id, **filters).first()

    def get_all(self, **filters) -> QuerySet[T]:
        """Get all instances matching filters"""
        return self.get_queryset().filter(**filters)

    def create(self, **kwargs) -> T:
        """Create a new instance"""
        return self.model._default_manager.create(**kwargs)

    def update(self, instance: T, **kwargs) -> T:
        """Update an existing instance"""
        for key, value in kwargs.items():
            setattr(instance, key, value)
        instance.save()
        return instance

    def exists(self, **filters) -> bool:
        """Check if instance exists"""
        return self.get_all(**filters).exists()

    def count(self, **filters) -> int:
        """Count instances matching filters"""
        return self.get_all(**filters).count()

    def bulk_create(self, instances: List[T]) -> List[T]:
        """Bulk create instances; the queryset stamps them before the insert"""
        return self.model._default_manager.bulk_create(instances)


class SoftDeleteRepository(BaseRepository[T]):
    """
    Repository for SoftDeletableModel subclasses.

    Reads hide deleted rows unless ``include_deleted=True`` is passed.
    """

    def get_queryset(self, include_deleted: bool = False) -> QuerySet[T]:
        if include_deleted:
            return self.model.all_objects.all()
        return self.model.objects.all()

    def get_by_id(self, id: int, include_deleted: bool = False, **filters) -> Optional[T]:
        return self.get_queryset(include_deleted).filter(id=id, **filters).first()

    def get_all(self, include_deleted: bool = False, **filters) -> QuerySet[T]:
        return self.get_queryset(include_deleted).filter(**filters)

    def deleted(self, **filters) -> QuerySet[T]:
        """Only logically deleted instances"""
        return self.model.objects.only_deleted().filter(**filters)

    def soft_delete(self, instance: T, actor_id: int) -> T:
        """Mark an instance deleted by actor_id and persist it"""
        instance.mark_deleted(actor_id)
        instance.save()
        logger.info(f"Soft deleted {self.model.__name__} #{instance.pk} by {actor_id}")
        return instance

    def restore(self, instance: T) -> T:
        """Clear the deletion stamp and persist it"""
        was_deleted = instance.is_deleted
        instance.restore()
        instance.save()
        if was_deleted:
            logger.info(f"Restored {self.model.__name__} #{instance.pk}")
        return instance
