"""
Clients ViewSet - a coach's client roster.

- POST /clients
- GET /clients
- GET /clients/{clientId}
"""
from rest_framework import status

from .base import BaseViewSet
from config.api.contracts import CreateClientRequest, ListClientsParams
from config.api.decorators import idempotent
from services.commands import CreateClientCommand
from services.queries import ListClientsQuery, GetClientQuery


class ClientsViewSet(BaseViewSet):

    @idempotent('clients.create')
    def create(self, request):
        """
        Create a client linked to the calling coach.
        POST /clients
        """
        data, error_response = self.validate_request(CreateClientRequest, request.data)
        if error_response:
            return error_response

        command = self.get_command(CreateClientCommand)
        result = command.execute(
            coach_user_id=request.user.id,
            name=data.name,
            email=data.email,
        )

        if not result.success:
            return self.error(result.error, result.error_code)

        return self.success({'clientId': str(result.client_id)}, status_code=status.HTTP_201_CREATED)

    def list(self, request):
        """
        GET /clients?limit&cursor&includeArchived
        """
        params, error_response = self.validate_query(ListClientsParams, request)
        if error_response:
            return error_response

        result = self.get_query(ListClientsQuery).execute(
            coach_user_id=request.user.id,
            limit=params.limit,
            cursor=params.cursor,
            include_archived=params.include_archived,
        )

        return self.success({
            'clients': result.clients,
            'nextCursor': result.next_cursor,
        })

    def retrieve(self, request, client_id=None):
        """
        GET /clients/{clientId}
        """
        invalid = self.check_client_id(client_id)
        if invalid:
            return invalid

        result = self.get_query(GetClientQuery).execute(
            coach_user_id=request.user.id,
            client_id=client_id,
        )

        if not result.found:
            return self.not_found(result.error)

        return self.success({'client': result.client})
