"""
Permission Classes for the Referral Backend

Role checks for every core operation come from a single capability table.
Services call require_operation() themselves, so the rules hold no matter
which surface invokes them; the DRF classes below only reject early.
"""
import logging

from rest_framework import permissions

from .authentication import AuthenticatedUser
from .exceptions import AuthenticationError, ForbiddenError
from .models import Role

logger = logging.getLogger(__name__)


# =============================================================================
# Capability Table
# =============================================================================

_AGENTS = frozenset({Role.AGENT, Role.SUB_AGENT})

OPERATION_ROLES: dict[str, frozenset[str]] = {
    # Identity & hierarchy
    'register_admin': frozenset({Role.ADMIN}),
    'create_sub_agent': frozenset({Role.AGENT}),
    'approve_principal': frozenset({Role.ADMIN}),
    'set_principal_active': frozenset({Role.ADMIN, Role.AGENT}),
    'set_commission_rate': frozenset({Role.ADMIN, Role.AGENT}),
    'list_agents': frozenset({Role.ADMIN}),
    'list_pending_agents': frozenset({Role.ADMIN}),
    'list_sub_agents': frozenset({Role.AGENT}),
    'agent_stats': frozenset({Role.AGENT}),
    # Leads
    'create_lead': _AGENTS,
    'decide_lead': frozenset({Role.ADMIN}),
    'list_leads_for_agent': _AGENTS,
    'list_all_leads': frozenset({Role.ADMIN}),
    'get_lead': frozenset({Role.ADMIN}),
    # Payouts
    'mark_payout_paid': frozenset({Role.ADMIN}),
    'list_all_payouts': frozenset({Role.ADMIN}),
    'list_my_payouts': _AGENTS,
    'payout_statistics': frozenset({Role.ADMIN}) | _AGENTS,
    # Dashboard
    'dashboard_summary': _AGENTS,
}


def is_allowed(operation: str, role: str | None) -> bool:
    """Return True if the role may perform the operation."""
    allowed = OPERATION_ROLES.get(operation)
    if allowed is None:
        raise KeyError(f'Unknown operation: {operation}')
    return role in allowed


def require_operation(operation: str, caller) -> None:
    """
    Raise unless the caller's role may perform the operation.

    Args:
        operation: Key in OPERATION_ROLES
        caller: Anything with a ``role`` attribute (AuthenticatedUser, Principal)

    Raises:
        AuthenticationError: If there is no caller
        ForbiddenError: If the caller's role is not allowed
    """
    if caller is None:
        raise AuthenticationError()

    role = getattr(caller, 'role', None)
    if not is_allowed(operation, role):
        logger.info(f'Denied {operation} for {getattr(caller, "id", None)} with role {role}')
        raise ForbiddenError(
            f'Role {role!r} may not perform {operation}',
            details={'operation': operation, 'role': role},
        )


# =============================================================================
# DRF Permission Classes
# =============================================================================

class IsAuthenticated(permissions.BasePermission):
    """
    Allows access only to requests carrying an authenticated principal.
    """
    message = 'Authentication required'

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        return isinstance(user, AuthenticatedUser)


class HasOperationRole(permissions.BasePermission):
    """
    Checks the view's ``operation`` against the capability table.

    Configure on the view:
        class MyView(APIView):
            permission_classes = [HasOperationRole]
            operation = 'decide_lead'

    or per HTTP method:
            operation = {'GET': 'list_sub_agents', 'POST': 'create_sub_agent'}
    """
    message = 'Your role does not allow this operation'

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        if not isinstance(user, AuthenticatedUser):
            return False

        operation = getattr(view, 'operation', None)
        if isinstance(operation, dict):
            operation = operation.get(request.method)
        if operation is None:
            return True

        return is_allowed(operation, user.role)
