"""
Security context used to attribute audited changes.

The resolver in ``audit.auditor`` never looks at global state: it receives a
``SecurityContext`` explicitly. Hooks that cannot receive one as an argument
(model signals, for instance) read the context bound to the current execution
context, which is held in a ``ContextVar`` and therefore isolated per thread
and per asyncio task.

Binding happens in two places:
- ``audit.middleware.CurrentActorMiddleware`` binds the request's context
- ``security_context()`` / ``acting_as()`` bind one explicitly (management
  commands, background jobs, tests)
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Optional

from audit.conf import anonymous_principal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authentication:
    """
    What the security layer knows about the caller.

    ``principal`` is whatever the authentication backend identifies the
    caller with: a user ID string for token-based auth, a user object for
    session auth, or the anonymous sentinel. ``name`` is the principal's
    display name.
    """
    principal: Any
    name: Optional[str] = None
    is_authenticated: bool = True

    @classmethod
    def for_actor(cls, actor_id):
        """Authentication for a known actor ID (system jobs, commands)"""
        return cls(principal=str(actor_id), name=str(actor_id))

    @classmethod
    def anonymous(cls):
        principal = anonymous_principal()
        return cls(principal=principal, name=principal, is_authenticated=False)

    @classmethod
    def from_request(cls, request):
        """
        Build an Authentication from a Django request.

        Returns None when no authentication ran for the request at all.
        """
        user = getattr(request, 'user', None)
        if user is None:
            return None

        if not user.is_authenticated:
            return cls.anonymous()

        name = str(user.pk) if user.pk is not None else None

        token_user_id = _token_user_id(getattr(request, 'auth', None))
        if token_user_id is not None:
            return cls(principal=str(token_user_id), name=name)

        return cls(principal=user, name=name)


def _token_user_id(token):
    """Extract the user ID claim from a simplejwt token, if that is what we have"""
    if token is None:
        return None

    from rest_framework_simplejwt.settings import api_settings
    from rest_framework_simplejwt.tokens import Token

    if not isinstance(token, Token):
        return None
    return token.get(api_settings.USER_ID_CLAIM)


class SecurityContext:
    """Holder for the current Authentication (may be empty)"""

    def __init__(self, authentication: Optional[Authentication] = None):
        self._authentication = authentication

    @property
    def authentication(self) -> Optional[Authentication]:
        return self._authentication

    def __repr__(self):
        return f"{self.__class__.__name__}({self.authentication!r})"


class RequestSecurityContext(SecurityContext):
    """
    Security context backed by a live request.

    Authentication is read on access, not at construction, so that
    authentication performed after middleware (DRF / JWT views) is seen.
    """

    def __init__(self, request):
        super().__init__()
        self._request = request

    @property
    def authentication(self) -> Optional[Authentication]:
        return Authentication.from_request(self._request)


_current_context: ContextVar[Optional[SecurityContext]] = ContextVar(
    'audit_security_context', default=None
)


def get_security_context() -> Optional[SecurityContext]:
    """Get the security context bound to the current execution context"""
    return _current_context.get()


def bind_security_context(context: Optional[SecurityContext]):
    """Bind a context; returns a token for ``reset_security_context``"""
    return _current_context.set(context)


def reset_security_context(token):
    _current_context.reset(token)


@contextmanager
def security_context(context):
    """
    Bind ``context`` for the duration of the block.

    Accepts a SecurityContext, a bare Authentication, or None (explicitly
    no authentication).

    Example:
        with security_context(Authentication.for_actor(7)):
            customer.save()
    """
    if context is None or isinstance(context, Authentication):
        context = SecurityContext(context)

    token = bind_security_context(context)
    try:
        yield context
    finally:
        reset_security_context(token)


def acting_as(actor_id):
    """Shortcut: ``security_context`` for a known actor ID"""
    return security_context(Authentication.for_actor(actor_id))
