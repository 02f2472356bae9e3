"""
Admin base classes for auditable models

Audit fields are shown but never editable. Soft-deletable models list
deleted rows too, with actions to delete / restore them logically.
"""

import logging

from django.contrib import admin, messages

from audit.auditor import resolve_current_actor
from audit.context import RequestSecurityContext
from core.constants import AuditField

logger = logging.getLogger(__name__)


class AuditableModelAdmin(admin.ModelAdmin):
    """ModelAdmin showing the audit trail read-only"""

    audit_readonly_fields = AuditField.ALL

    def get_readonly_fields(self, request, obj=None):
        readonly = list(super().get_readonly_fields(request, obj))
        return readonly + [f for f in self.audit_readonly_fields if f not in readonly]


class DeletedListFilter(admin.SimpleListFilter):
    title = 'deleted'
    parameter_name = 'deleted'

    def lookups(self, request, model_admin):
        return (
            ('no', 'Live'),
            ('yes', 'Deleted'),
        )

    def queryset(self, request, queryset):
        if self.value() == 'yes':
            return queryset.dead()
        if self.value() == 'no':
            return queryset.alive()
        return queryset


class SoftDeletableModelAdmin(AuditableModelAdmin):
    """
    ModelAdmin for soft-deletable models.

    - Shows deleted rows (filterable)
    - Delete is a soft delete attributed to the admin user
    - Bulk mark-deleted / restore actions
    """

    audit_readonly_fields = AuditField.ALL_WITH_DELETION
    actions = ['mark_selected_deleted', 'restore_selected']

    def get_queryset(self, request):
        queryset = self.model.all_objects.all()
        ordering = self.get_ordering(request)
        if ordering:
            queryset = queryset.order_by(*ordering)
        return queryset

    def get_list_filter(self, request):
        return list(super().get_list_filter(request)) + [DeletedListFilter]

    def get_actions(self, request):
        """Hard delete is never offered"""
        actions = super().get_actions(request)
        if 'delete_selected' in actions:
            del actions['delete_selected']
        return actions

    def _actor_id(self, request):
        return resolve_current_actor(RequestSecurityContext(request))

    def delete_model(self, request, obj):
        obj.delete(actor_id=self._actor_id(request))

    def delete_queryset(self, request, queryset):
        queryset.delete(actor_id=self._actor_id(request))

    @admin.action(description='Mark selected as deleted')
    def mark_selected_deleted(self, request, queryset):
        actor_id = self._actor_id(request)
        if actor_id is None:
            self.message_user(request, "Cannot delete: your account has no numeric user ID.", messages.ERROR)
            return
        count = queryset.alive().mark_deleted(actor_id)
        logger.info(f"Admin {actor_id} soft deleted {count} {self.model.__name__} row(s)")
        self.message_user(request, f"{count} record(s) marked as deleted.", messages.SUCCESS)

    @admin.action(description='Restore selected')
    def restore_selected(self, request, queryset):
        count = queryset.dead().restore()
        logger.info(f"Admin restored {count} {self.model.__name__} row(s)")
        self.message_user(request, f"{count} record(s) restored.", messages.SUCCESS)
