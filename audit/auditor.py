"""
Auditor resolution

Turns a security context into the integer actor ID written to the
``created_by`` / ``updated_by`` / ``deleted_by`` columns.

Resolution never fails: a missing, anonymous, or non-numeric caller simply
yields ``None`` and the save goes through unattributed.
"""

import logging
import re
from functools import lru_cache
from typing import Optional

from django.utils.module_loading import import_string

from audit.conf import anonymous_principal, get_auditing_setting
from audit.context import get_security_context
from core.constants import Security

logger = logging.getLogger(__name__)

_ACTOR_ID_PATTERN = re.compile(r'[+-]?[0-9]+')


def parse_actor_id(value) -> Optional[int]:
    """
    Parse a textual actor ID into a 64-bit integer.

    Accepts an optional sign followed by ASCII digits, nothing else. Returns
    None for anything that does not parse or does not fit in a BIGINT.
    """
    if not isinstance(value, str) or not _ACTOR_ID_PATTERN.fullmatch(value):
        return None

    actor_id = int(value)
    if not Security.ACTOR_ID_MIN <= actor_id <= Security.ACTOR_ID_MAX:
        return None
    return actor_id


def resolve_current_actor(context) -> Optional[int]:
    """
    Resolve the actor ID for a security context.

    Returns None if:
    - there is no context or no authentication in it
    - the authentication is not authenticated
    - the principal is the anonymous sentinel
    - neither the principal (when it is a string) nor the name parses as an ID

    Candidate order: the principal itself if it is a string, otherwise the
    authentication's name.
    """
    if context is None:
        return None

    authentication = context.authentication
    if authentication is None or not authentication.is_authenticated:
        return None

    principal = authentication.principal
    if principal == anonymous_principal():
        return None

    if isinstance(principal, str):
        candidate = principal
    elif authentication.name:
        candidate = authentication.name
    else:
        return None

    return parse_actor_id(candidate)


class SecurityContextAuditor:
    """
    Supplies the current auditor to the persistence hooks.

    Reads whatever context is bound to the current execution context and
    hands it to ``resolve_current_actor``.
    """

    def get_current_auditor(self) -> Optional[int]:
        context = get_security_context()
        actor_id = resolve_current_actor(context)
        if actor_id is None and context is not None:
            authentication = context.authentication
            if authentication is not None and authentication.is_authenticated \
                    and authentication.principal != anonymous_principal():
                logger.warning(
                    f"Authenticated principal {authentication.name!r} has no numeric actor ID; "
                    f"change will be unattributed"
                )
        return actor_id


@lru_cache(maxsize=None)
def _load_auditor_class(path):
    return import_string(path)


def get_auditor():
    """Instantiate the auditor configured in ``AUDITING['AUDITOR']``"""
    return _load_auditor_class(get_auditing_setting('AUDITOR'))()


def get_current_auditor() -> Optional[int]:
    return get_auditor().get_current_auditor()
