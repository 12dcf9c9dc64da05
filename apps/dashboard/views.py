"""
Dashboard API Views

- GET /api/dashboard/summary -> get_dashboard_summary
"""
import logging
from datetime import date, datetime

from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.authentication import get_user_context
from apps.core.exceptions import ValidationError
from apps.core.permissions import HasOperationRole
from apps.core.serializers import DashboardSummarySerializer

from .services import get_dashboard_summary

logger = logging.getLogger(__name__)


def parse_date(date_str: str | None) -> date | None:
    """Parse date string in YYYY-MM-DD format."""
    if not date_str:
        return None
    try:
        return datetime.strptime(date_str, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError('as_of_date must be YYYY-MM-DD', details={'field': 'as_of_date'}) from None


class DashboardSummaryView(APIView):
    """
    GET /api/dashboard/summary

    Query params:
        as_of_date: Optional date (YYYY-MM-DD) for calculations (default: now)

    Response (200):
        {
            "stats": {
                "total_aum": "50000.00", "pending_aum": "0.00",
                "active_clients": 1, "pending_clients": 0,
                "total_leads": 1, "approved_leads": 1, "pending_leads": 0,
                "monthly_commission": "0.00", "sip_book": "50000.00"
            },
            "aum_growth": [ { "month": "3/2025", "amount": "50000.00" } ],
            "portfolio_distribution": [ { "type": "SIP", "amount": "50000.00" } ],
            "recent_leads": [ ... ],
            "pending_leads_list": [ ... ],
            "goal_progress": [
                { "key": "aum", "title": "AUM Target", "current": "50000.00",
                  "target": "10000000.00", "progress": "0.50" }
            ]
        }
    """
    permission_classes = [HasOperationRole]
    operation = 'dashboard_summary'

    def get(self, request):
        user = get_user_context(request)
        as_of = parse_date(request.query_params.get('as_of_date'))

        summary = get_dashboard_summary(user.id, as_of=as_of)
        return Response(DashboardSummarySerializer(summary).data)
