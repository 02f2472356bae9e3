"""
Application-wide constants.
Centralized constants following DRY principle.
"""


# Audit columns
class AuditField:
    CREATED_AT = 'created_at'
    CREATED_BY = 'created_by'
    UPDATED_AT = 'updated_at'
    UPDATED_BY = 'updated_by'
    DELETED_AT = 'deleted_at'
    DELETED_BY = 'deleted_by'

    CREATION = (CREATED_AT, CREATED_BY)
    MODIFICATION = (UPDATED_AT, UPDATED_BY)
    DELETION = (DELETED_AT, DELETED_BY)
    ALL = CREATION + MODIFICATION
    ALL_WITH_DELETION = ALL + DELETION


# Security
class Security:
    # Principal value the security layer uses for unauthenticated visitors
    ANONYMOUS_PRINCIPAL = 'anonymousUser'

    # Actor IDs are stored in BIGINT columns
    ACTOR_ID_MIN = -(2 ** 63)
    ACTOR_ID_MAX = 2 ** 63 - 1


# Auditing settings defaults
class AuditingDefaults:
    ENABLED = True
    AUDITOR = 'audit.auditor.SecurityContextAuditor'
    ANONYMOUS_PRINCIPAL = Security.ANONYMOUS_PRINCIPAL


# Query parameter that disables the soft-delete filter on list endpoints
INCLUDE_DELETED_PARAM = 'include_deleted'

TRUTHY_VALUES = ('1', 'true', 'yes', 'on')
