"""
DRF exception handler.

Every error leaves the API as ErrorResponse. Infrastructure failures become
503 INTERNAL; anything unexpected becomes 500 INTERNAL without details.
"""
import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from config.api.contracts import ErrorResponse
from infrastructure.errors import InfrastructureError

logger = logging.getLogger(__name__)

_CODES = {
    status.HTTP_400_BAD_REQUEST: 'BAD_REQUEST',
    status.HTTP_401_UNAUTHORIZED: 'UNAUTHORIZED',
    status.HTTP_403_FORBIDDEN: 'FORBIDDEN',
    status.HTTP_404_NOT_FOUND: 'NOT_FOUND',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'METHOD_NOT_ALLOWED',
    status.HTTP_429_TOO_MANY_REQUESTS: 'RATE_LIMITED',
}


def _message(detail) -> str:
    if isinstance(detail, (list, dict)):
        return 'Invalid input'
    return str(detail)


def exception_handler(exc, context):
    if isinstance(exc, InfrastructureError):
        logger.error(f"Dependency failure: {exc}", extra={'error_type': type(exc).__name__})
        return Response(
            ErrorResponse(error='Service temporarily unavailable', code='INTERNAL').model_dump(),
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = drf_exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled error", exc_info=exc)
        return Response(
            ErrorResponse(error='Internal server error', code='INTERNAL').model_dump(),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.APIException):
        response.data = ErrorResponse(
            error=_message(exc.detail),
            code=_CODES.get(response.status_code, 'ERROR'),
            details=exc.detail if isinstance(exc.detail, dict) else None,
        ).model_dump()

    return response
