import logging
import time

logger = logging.getLogger(__name__)


class RequestLogMiddleware:
    """Log method, path, status and duration of every request at DEBUG."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.monotonic()
        response = self.get_response(request)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug('%s %s -> %s (%.1f ms)', request.method, request.path, response.status_code,
                         (time.monotonic() - started) * 1000)
        return response
