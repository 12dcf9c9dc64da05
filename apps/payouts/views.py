"""
Payouts API Views

Provides payout endpoints:
- GET /api/payouts/all - Every agent's payouts (admin)
- GET /api/payouts/my-payouts - Caller's payouts
- GET /api/payouts/statistics - Trailing window of payout rows
- PUT /api/payouts/{id}/paid - Mark a payout paid (admin)
"""
import logging
from uuid import UUID

from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.authentication import get_user_context
from apps.core.exceptions import ValidationError
from apps.core.models import PayoutStatus
from apps.core.permissions import HasOperationRole
from apps.core.serializers import PayoutSerializer

from .selectors import list_payouts, list_payouts_for_agent, payout_statistics
from .services import mark_payout_paid

logger = logging.getLogger(__name__)


def parse_uuid_param(value: str | None) -> UUID | None:
    """Parse a UUID query param, raising ValidationError if malformed."""
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        raise ValidationError(f'Invalid id: {value}', details={'value': value}) from None


class AllPayoutsView(APIView):
    """
    GET /api/payouts/all

    Query params:
        agent_id: Only this agent's rows
        status: pending | paid
    """
    permission_classes = [HasOperationRole]
    operation = 'list_all_payouts'

    def get(self, request):
        agent_id = parse_uuid_param(request.query_params.get('agent_id'))
        payout_status = request.query_params.get('status')
        if payout_status and payout_status not in PayoutStatus.values:
            raise ValidationError(
                f'Invalid status: {payout_status}',
                details={'field': 'status', 'allowed': PayoutStatus.values},
            )

        payouts = list_payouts(agent_id=agent_id, status=payout_status)
        return Response(PayoutSerializer(payouts, many=True).data)


class MyPayoutsView(APIView):
    """
    GET /api/payouts/my-payouts
    """
    permission_classes = [HasOperationRole]
    operation = 'list_my_payouts'

    def get(self, request):
        user = get_user_context(request)
        return Response(PayoutSerializer(list_payouts_for_agent(user.id), many=True).data)


class PayoutStatisticsView(APIView):
    """
    GET /api/payouts/statistics

    Query params:
        months: Window size in months (default 12)

    Admins see every agent's rows; agents only their own.
    """
    permission_classes = [HasOperationRole]
    operation = 'payout_statistics'

    def get(self, request):
        user = get_user_context(request)

        months = request.query_params.get('months')
        months_back = None
        if months:
            if not months.isdigit() or int(months) < 1:
                raise ValidationError('months must be a positive integer', details={'field': 'months'})
            months_back = int(months)

        rows = payout_statistics(user, months_back=months_back)
        return Response(PayoutSerializer(rows, many=True).data)


class MarkPayoutPaidView(APIView):
    """
    PUT /api/payouts/{id}/paid
    """
    permission_classes = [HasOperationRole]
    operation = 'mark_payout_paid'

    def put(self, request, payout_id: UUID):
        user = get_user_context(request)
        payout = mark_payout_paid(payout_id, user)
        return Response(PayoutSerializer(payout).data)
