"""
Auditing Signals

Connects the ORM's ``pre_save`` to the auditing interceptor so every
AuditableModel is stamped right before its row is written.
"""

import logging

from django.db.models.signals import pre_save

from audit.interceptors import default_interceptor
from audit.models import AuditableModel

logger = logging.getLogger(__name__)

DISPATCH_UID = 'audit.stamp_audit_metadata'


def stamp_audit_metadata(sender, instance, raw=False, **kwargs):
    """Route inserts and updates to the interceptor"""
    if raw:
        # Fixture loading: keep the stamps stored in the fixture
        return

    if not isinstance(instance, AuditableModel):
        return

    if instance._state.adding:
        default_interceptor.before_insert(instance)
    else:
        default_interceptor.before_update(instance)


def connect_signals():
    pre_save.connect(stamp_audit_metadata, dispatch_uid=DISPATCH_UID)


def disconnect_signals():
    pre_save.disconnect(dispatch_uid=DISPATCH_UID)
