"""
Logging configuration with request ID and actor support
"""
import logging
import threading
import uuid

from audit.auditor import resolve_current_actor
from audit.context import get_security_context

_thread_local = threading.local()


def get_current_request_id():
    return getattr(_thread_local, 'request_id', None)


class RequestIDFilter(logging.Filter):
    """
    Logging filter to add request ID and acting user to log records
    """
    def filter(self, record):
        request_id = getattr(record, 'request_id', None) or get_current_request_id()
        record.request_id = request_id or 'N/A'

        if not hasattr(record, 'actor_id'):
            actor_id = resolve_current_actor(get_security_context())
            record.actor_id = actor_id if actor_id is not None else '-'
        return True


class RequestIDMiddleware:
    """
    Middleware to generate and attach unique request ID to each request.
    Request ID is available in request.request_id and in all log messages.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Short 8-character ID
        request_id = str(uuid.uuid4())[:8]
        request.request_id = request_id
        _thread_local.request_id = request_id

        try:
            response = self.get_response(request)
        finally:
            try:
                delattr(_thread_local, 'request_id')
            except AttributeError:
                pass

        response['X-Request-ID'] = request_id
        return response

    def process_exception(self, request, exception):
        """Log exceptions with request ID"""
        request_id = getattr(request, 'request_id', 'N/A')
        logger = logging.getLogger('django.request')
        logger.error(
            f"[{request_id}] Exception: {type(exception).__name__}: {str(exception)}",
            exc_info=True,
            extra={'request_id': request_id}
        )
