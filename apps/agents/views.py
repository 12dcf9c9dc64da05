"""
Agents API Views

Provides principal and hierarchy endpoints:
- POST /api/auth/register - Public registration
- GET /api/users/agents - Public list of approved agents
- GET /api/users/by-agent-code/{code} - Public agent lookup
- GET /api/agents/pending - Agents awaiting approval (admin)
- PUT /api/agents/{id}/approve - Approve or reject (admin)
- PUT /api/agents/{id}/commission - Set commission rate
- PATCH /api/agents/{id}/status - Enable or disable
- GET/POST /api/agents/sub-agents - List or create own sub-agents
- GET /api/agents/stats - Own sub-agent counts
"""
import logging
from uuid import UUID

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.authentication import get_user_context
from apps.core.permissions import HasOperationRole, IsAuthenticated, require_operation
from apps.core.serializers import (
    ActiveStatusSerializer,
    ApprovalSerializer,
    CommissionRateSerializer,
    PrincipalSerializer,
    PublicAgentSerializer,
    RegistrationSerializer,
    SubAgentCreateSerializer,
)

from .selectors import (
    get_agent_stats,
    list_approved_agents,
    list_pending_agents,
    list_sub_agents,
    lookup_by_agent_code,
)
from .services import (
    PrincipalCreateInput,
    approve_principal,
    create_sub_agent,
    register_principal,
    set_commission_rate,
    set_principal_active,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Public Endpoints
# =============================================================================

class RegisterView(APIView):
    """
    POST /api/auth/register

    Register an agent, sub-agent (with parent_agent_code) or user. Creating
    an admin requires an admin token.

    Request body:
        {
            "name": "...", "email": "...", "phone": "...", "address": "...",
            "role": "agent" | "sub-agent" | "user" | "admin",
            "parent_agent_code": "AG0001"  // sub-agents only
        }

    Response (201): the created principal
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        principal = register_principal(
            PrincipalCreateInput.from_data(serializer.validated_data),
            caller=get_user_context(request),
        )
        return Response(PrincipalSerializer(principal).data, status=status.HTTP_201_CREATED)


class ApprovedAgentsView(APIView):
    """
    GET /api/users/agents

    Approved agents, for the public "find an agent" page.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        agents = list_approved_agents()
        return Response(PublicAgentSerializer(agents, many=True).data)


class AgentByCodeView(APIView):
    """
    GET /api/users/by-agent-code/{code}

    Resolve an approved agent from a referral code (case-insensitive).
    """
    permission_classes = [AllowAny]

    def get(self, request, code: str):
        agent = lookup_by_agent_code(code)
        return Response(PublicAgentSerializer(agent).data)


# =============================================================================
# Admin Endpoints
# =============================================================================

class PendingAgentsView(APIView):
    """
    GET /api/agents/pending
    """
    permission_classes = [HasOperationRole]
    operation = 'list_pending_agents'

    def get(self, request):
        return Response(PrincipalSerializer(list_pending_agents(), many=True).data)


class ApproveAgentView(APIView):
    """
    PUT /api/agents/{id}/approve

    Request body:
        { "approved": true }
    """
    permission_classes = [HasOperationRole]
    operation = 'approve_principal'

    def put(self, request, principal_id: UUID):
        user = get_user_context(request)
        serializer = ApprovalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        principal = approve_principal(principal_id, serializer.validated_data['approved'], user)
        return Response(PrincipalSerializer(principal).data)


# =============================================================================
# Admin or Parent Agent Endpoints
# =============================================================================

class CommissionRateView(APIView):
    """
    PUT /api/agents/{id}/commission

    Set a commission rate in percent. Setting an agent's rate also resets
    its sub-agents to half of it.

    Request body:
        { "commission_rate": "7.5" }
    """
    permission_classes = [HasOperationRole]
    operation = 'set_commission_rate'

    def put(self, request, principal_id: UUID):
        user = get_user_context(request)
        serializer = CommissionRateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        principal = set_commission_rate(principal_id, serializer.validated_data['commission_rate'], user)
        return Response(PrincipalSerializer(principal).data)


class AgentStatusView(APIView):
    """
    PATCH /api/agents/{id}/status

    Request body:
        { "is_active": false }
    """
    permission_classes = [HasOperationRole]
    operation = 'set_principal_active'

    def patch(self, request, principal_id: UUID):
        user = get_user_context(request)
        serializer = ActiveStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        principal = set_principal_active(principal_id, serializer.validated_data['is_active'], user)
        return Response(PrincipalSerializer(principal).data)


# =============================================================================
# Agent Endpoints
# =============================================================================

class SubAgentsView(APIView):
    """
    GET /api/agents/sub-agents - The calling agent's sub-agents
    POST /api/agents/sub-agents - Create a sub-agent under the calling agent
    """
    permission_classes = [HasOperationRole]
    operation = {'GET': 'list_sub_agents', 'POST': 'create_sub_agent'}

    def get(self, request):
        user = get_user_context(request)
        require_operation('list_sub_agents', user)
        return Response(PrincipalSerializer(list_sub_agents(user.id), many=True).data)

    def post(self, request):
        user = get_user_context(request)
        serializer = SubAgentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sub_agent = create_sub_agent(PrincipalCreateInput.from_data(serializer.validated_data), user)
        return Response(PrincipalSerializer(sub_agent).data, status=status.HTTP_201_CREATED)


class AgentStatsView(APIView):
    """
    GET /api/agents/stats

    Response (200):
        { "total_sub_agents": 3, "active_sub_agents": 2 }
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = get_user_context(request)
        require_operation('agent_stats', user)
        return Response(get_agent_stats(user.id))
