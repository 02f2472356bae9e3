"""
Binds each request's security context for audit attribution.

Must come after ``AuthenticationMiddleware``. DRF authentication (JWT)
happens later, inside the view; the bound context reads ``request.user``
lazily, so it still sees the JWT user.
"""

from audit.context import (
    RequestSecurityContext,
    bind_security_context,
    reset_security_context,
)


class CurrentActorMiddleware:
    """Makes the requesting user the auditor for everything saved during the request"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        token = bind_security_context(RequestSecurityContext(request))
        try:
            return self.get_response(request)
        finally:
            reset_security_context(token)
