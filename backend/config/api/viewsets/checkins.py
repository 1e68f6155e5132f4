"""
Check-ins ViewSet - daily client check-ins.

- POST /clients/{clientId}/checkins
- GET /clients/{clientId}/checkins?from&to&limit&cursor
"""
from rest_framework import status

from .base import BaseViewSet
from config.api.contracts import UpsertCheckinRequest, ListCheckinsParams
from config.api.decorators import idempotent
from services.commands import UpsertCheckinCommand
from services.queries import ListCheckinsQuery


class CheckinsViewSet(BaseViewSet):

    @idempotent('checkins.upsert')
    def create(self, request, client_id=None):
        """
        Create the check-in for a date, or merge metrics into the existing one.
        201 on create, 200 on update.
        """
        invalid = self.check_client_id(client_id)
        if invalid:
            return invalid

        data, error_response = self.validate_request(UpsertCheckinRequest, request.data)
        if error_response:
            return error_response

        result = self.get_command(UpsertCheckinCommand).execute(
            coach_user_id=request.user.id,
            client_id=client_id,
            checkin_date=data.checkin_date,
            metrics=data.metrics,
            notes=data.notes,
        )

        if not result.success:
            if result.error_code == 'CLIENT_NOT_FOUND':
                return self.not_found(result.error)
            return self.error(result.error, result.error_code)

        return self.success(
            {'checkinId': result.checkin_id},
            status_code=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        )

    def list(self, request, client_id=None):
        invalid = self.check_client_id(client_id)
        if invalid:
            return invalid

        params, error_response = self.validate_query(ListCheckinsParams, request)
        if error_response:
            return error_response

        result = self.get_query(ListCheckinsQuery).execute(
            coach_user_id=request.user.id,
            client_id=client_id,
            range_start=params.range_start,
            range_end=params.range_end,
            limit=params.limit,
            cursor=params.cursor,
        )

        if not result.found:
            return self.not_found(result.error)

        return self.success(result.to_payload())
