"""
Insights ViewSet - asynchronous insight computation.

- POST /clients/{clientId}/insights  (202, computed by the insight worker)
- GET /clients/{clientId}/insights?from&to
"""
from rest_framework import status

from .base import BaseViewSet
from config.api.contracts import DateRangeParams
from config.api.decorators import rate_limited
from services.caches import insights_rate_limiter
from services.commands import EnqueueInsightCommand
from services.queries import GetInsightQuery


class InsightsViewSet(BaseViewSet):

    @rate_limited(insights_rate_limiter)
    def create(self, request, client_id=None):
        """
        Enqueue computation for the range in the body.
        Repeating the request for the same range returns the same job id.
        """
        invalid = self.check_client_id(client_id)
        if invalid:
            return invalid

        data, error_response = self.validate_request(DateRangeParams, request.data)
        if error_response:
            return error_response

        result = self.get_command(EnqueueInsightCommand).execute(
            coach_user_id=request.user.id,
            client_id=client_id,
            range_start=data.range_start,
            range_end=data.range_end,
        )

        if not result.success:
            return self.not_found(result.error)

        return self.success({'jobId': result.job_id}, status_code=status.HTTP_202_ACCEPTED)

    def list(self, request, client_id=None):
        invalid = self.check_client_id(client_id)
        if invalid:
            return invalid

        params, error_response = self.validate_query(DateRangeParams, request)
        if error_response:
            return error_response

        result = self.get_query(GetInsightQuery).execute(
            coach_user_id=request.user.id,
            client_id=client_id,
            range_start=params.range_start,
            range_end=params.range_end,
        )

        if not result.found:
            return self.not_found(result.error)

        return self.success({'insight': result.insight})
