"""
Request id + access log middleware.
"""
import logging
import time
import uuid

from infrastructure.logging import bind_request_id, reset_request_id

logger = logging.getLogger('api.access')

REQUEST_ID_HEADER = 'X-Request-Id'


class RequestIdMiddleware:
    """
    Reuse the caller's X-Request-Id (if sane) or mint one, expose it on the
    request and response, and log one line per completed request.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        incoming = request.headers.get(REQUEST_ID_HEADER, '').strip()
        request_id = incoming if 0 < len(incoming) <= 128 else uuid.uuid4().hex
        request.request_id = request_id

        token = bind_request_id(request_id)
        started = time.monotonic()
        try:
            response = self.get_response(request)
            response[REQUEST_ID_HEADER] = request_id
            logger.info(
                "request.completed",
                extra={
                    'method': request.method,
                    'path': request.path,
                    'status': response.status_code,
                    'duration_ms': round((time.monotonic() - started) * 1000, 1),
                }
            )
            return response
        finally:
            reset_request_id(token)
