"""
Soft-Delete API Views

ViewSet base for soft-deletable resources:
- DELETE marks the record deleted by the requesting user (never removes it)
- POST {id}/restore/ brings a deleted record back
- ?include_deleted=true lists / retrieves deleted records too
"""

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from audit.auditor import resolve_current_actor
from audit.context import RequestSecurityContext
from core.constants import INCLUDE_DELETED_PARAM, TRUTHY_VALUES
from core.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


class SoftDeleteModelViewSet(viewsets.ModelViewSet):
    """
    ModelViewSet whose destroy is a soft delete.

    Subclasses set ``queryset`` from the model's ``all_objects`` manager or
    override ``get_base_queryset``; the default filter is applied here.
    """

    def get_base_queryset(self):
        return self.queryset.all()

    def include_deleted(self):
        value = self.request.query_params.get(INCLUDE_DELETED_PARAM, '')
        return value.lower() in TRUTHY_VALUES

    def get_queryset(self):
        queryset = self.get_base_queryset()
        if self.action == 'restore' or self.include_deleted():
            return queryset
        return queryset.alive()

    def get_actor_id(self):
        return resolve_current_actor(RequestSecurityContext(self.request))

    def perform_destroy(self, instance):
        instance.delete(actor_id=self.get_actor_id())

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            self.perform_destroy(instance)
        except InvalidArgumentError as e:
            logger.warning(
                f"Refused soft delete of {instance.__class__.__name__} #{instance.pk}: "
                f"no actor ID for {request.user}"
            )
            return Response(
                {
                    'detail': 'Access denied: a user ID is required to delete this resource.',
                    'error_code': e.code,
                },
                status=status.HTTP_403_FORBIDDEN
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def restore(self, request, *args, **kwargs):
        """
        Restore a soft-deleted record.

        Example: POST /api/customers/12/restore/
        """
        instance = self.get_object()
        if instance.is_deleted:
            instance.restore()
            instance.save()
            logger.info(f"Restored {instance.__class__.__name__} #{instance.pk} via API")

        serializer = self.get_serializer(instance)
        return Response(serializer.data)
