"""
Leads API Views

Provides lead endpoints:
- POST /api/leads - Submit a lead (agent, sub-agent)
- GET /api/leads/my-leads - Caller's leads
- GET /api/leads/filter - Filtered listing (admin)
- GET /api/leads/{id} - Lead detail (admin)
- PUT /api/leads/{id}/status - Approve or reject (admin)
"""
import logging
from uuid import UUID

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.authentication import get_user_context
from apps.core.permissions import HasOperationRole
from apps.core.serializers import (
    LeadCreateSerializer,
    LeadDecisionSerializer,
    LeadFilterSerializer,
    LeadSerializer,
)

from .selectors import get_lead, list_all_leads, list_leads_for_agent
from .services import LeadCreateInput, create_lead, decide_lead

logger = logging.getLogger(__name__)


class LeadCreateView(APIView):
    """
    POST /api/leads

    Request body:
        {
            "customer_name": "...", "customer_phone": "...",
            "customer_email": "...", "customer_address": "...",
            "investment_type": "mutual_funds" | "SIP" | "Lumpsum" | "Both",
            "investment_amount": "50000",
            "notes": "..."
        }

    Response (201): the lead, status pending
    """
    permission_classes = [HasOperationRole]
    operation = 'create_lead'

    def post(self, request):
        user = get_user_context(request)
        serializer = LeadCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lead = create_lead(LeadCreateInput.from_data(serializer.validated_data), user)
        return Response(LeadSerializer(lead).data, status=status.HTTP_201_CREATED)


class MyLeadsView(APIView):
    """
    GET /api/leads/my-leads

    Leads credited to or submitted by the caller, newest first.
    """
    permission_classes = [HasOperationRole]
    operation = 'list_leads_for_agent'

    def get(self, request):
        user = get_user_context(request)
        leads = list_leads_for_agent(user.id)
        return Response(LeadSerializer(leads, many=True).data)


class LeadFilterView(APIView):
    """
    GET /api/leads/filter

    Query params:
        status: pending | approved | rejected
        agent_id: Credited or submitting agent
        date_from: YYYY-MM-DD (inclusive)
        date_to: YYYY-MM-DD (inclusive, whole day)
    """
    permission_classes = [HasOperationRole]
    operation = 'list_all_leads'

    def get(self, request):
        params = LeadFilterSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        leads = list_all_leads(**params.validated_data)
        return Response(LeadSerializer(leads, many=True).data)


class LeadDetailView(APIView):
    """
    GET /api/leads/{id}
    """
    permission_classes = [HasOperationRole]
    operation = 'get_lead'

    def get(self, request, lead_id: UUID):
        return Response(LeadSerializer(get_lead(lead_id)).data)


class LeadStatusView(APIView):
    """
    PUT /api/leads/{id}/status

    Approving a lead adds it to the agent's payout for the lead's month.

    Request body:
        { "status": "approved" | "rejected" }
    """
    permission_classes = [HasOperationRole]
    operation = 'decide_lead'

    def put(self, request, lead_id: UUID):
        user = get_user_context(request)
        serializer = LeadDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lead = decide_lead(lead_id, serializer.validated_data['status'], user)
        lead = get_lead(lead.id)
        return Response(LeadSerializer(lead).data)
