"""
Audit Field Serializers

Mixins for ModelSerializers of auditable models. Audit fields are always
read-only: clients cannot set who created or deleted a record.
"""

from rest_framework import serializers

from core.constants import AuditField


class AuditFieldsMixin(serializers.ModelSerializer):
    """
    Exposes created_* / updated_* as read-only fields.

    Usage:
        class CustomerSerializer(AuditFieldsMixin):
            class Meta(AuditFieldsMixin.Meta):
                model = Customer
                fields = ['id', 'name'] + AuditFieldsMixin.Meta.fields
    """

    audit_fields = AuditField.ALL

    class Meta:
        fields = list(AuditField.ALL)

    def get_fields(self):
        fields = super().get_fields()
        for name in self.audit_fields:
            if name in fields:
                fields[name].read_only = True
        return fields


class SoftDeleteFieldsMixin(AuditFieldsMixin):
    """Adds deleted_* and is_deleted, all read-only"""

    audit_fields = AuditField.ALL_WITH_DELETION

    is_deleted = serializers.BooleanField(read_only=True)

    class Meta:
        fields = list(AuditField.ALL_WITH_DELETION) + ['is_deleted']
