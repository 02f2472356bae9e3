"""
Auditing configuration

Reads the ``AUDITING`` settings dict, falling back to the defaults in
``core.constants.AuditingDefaults`` for missing keys.
"""

from django.conf import settings

from core.constants import AuditingDefaults


def get_auditing_setting(name):
    """Get a single ``AUDITING`` setting by key (e.g. 'ENABLED')"""
    overrides = getattr(settings, 'AUDITING', None) or {}
    if name in overrides:
        return overrides[name]
    return getattr(AuditingDefaults, name)


def auditing_enabled():
    return bool(get_auditing_setting('ENABLED'))


def anonymous_principal():
    return get_auditing_setting('ANONYMOUS_PRINCIPAL')
