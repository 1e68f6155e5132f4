"""
Base ViewSet for all API endpoints.
"""
from rest_framework import viewsets, status
from rest_framework.response import Response
from pydantic import BaseModel, ValidationError
from typing import Any, Mapping, Type, TypeVar, Optional, Tuple
from uuid import UUID

from infrastructure.bootstrap import get_container
from config.api.authentication import IsCoach
from config.api.contracts import ErrorResponse

T = TypeVar('T')
M = TypeVar('M', bound=BaseModel)


class BaseViewSet(viewsets.ViewSet):
    """
    Base ViewSet with common functionality.

    Provides:
    - DI container access
    - Command/Query execution
    - Pydantic validation
    - Standard error responses
    """

    permission_classes = [IsCoach]

    def get_container(self):
        """Get the DI container."""
        return get_container()

    def get_command(self, command_class: Type[T]) -> T:
        """Get a Command instance from the container."""
        return self.get_container().get(command_class)

    def get_query(self, query_class: Type[T]) -> T:
        """Get a Query instance from the container."""
        return self.get_container().get(query_class)

    def validate_request(
        self,
        request_model: Type[M],
        data: Mapping[str, Any]
    ) -> Tuple[Optional[M], Optional[Response]]:
        """
        Validate request data with Pydantic model.

        Returns:
            Tuple of (validated_model, None) on success
            Tuple of (None, error_response) on failure
        """
        if not isinstance(data, Mapping):
            return None, self.error("Request body must be a JSON object", "VALIDATION_ERROR")
        try:
            return request_model.model_validate(dict(data)), None
        except ValidationError as e:
            return None, self.validation_error(e)

    def validate_query(self, request_model: Type[M], request) -> Tuple[Optional[M], Optional[Response]]:
        """Validate query string parameters (last value wins for repeated keys)."""
        return self.validate_request(request_model, request.query_params.dict())

    def validation_error(self, error: ValidationError) -> Response:
        """Create validation error response."""
        return Response(
            ErrorResponse(
                error="Validation Error",
                code="VALIDATION_ERROR",
                details={'errors': error.errors(include_url=False, include_context=False)}
            ).model_dump(),
            status=status.HTTP_400_BAD_REQUEST
        )

    def check_client_id(self, client_id) -> Optional[Response]:
        """400 unless the path segment is a UUID."""
        try:
            UUID(str(client_id))
        except ValueError:
            return self.error(
                "Invalid clientId (UUID expected)",
                "VALIDATION_ERROR",
                details={'clientId': client_id},
            )
        return None

    def success(self, data, status_code: int = status.HTTP_200_OK) -> Response:
        """Create success response."""
        return Response(data, status=status_code)

    def error(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict = None
    ) -> Response:
        """Create error response."""
        return Response(
            ErrorResponse(
                error=message,
                code=code,
                details=details
            ).model_dump(),
            status=status_code
        )

    def not_found(self, message: str = "Not found") -> Response:
        """Create 404 response."""
        return self.error(message, "NOT_FOUND", status.HTTP_404_NOT_FOUND)
