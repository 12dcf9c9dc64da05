"""
Agent Selectors

Read-only projections over the principals table.
"""
import logging
from uuid import UUID

from django.db.models import Count, Q, QuerySet

from apps.core.exceptions import NotFoundError
from apps.core.models import AGENT_ROLES, Principal, Role

logger = logging.getLogger(__name__)


def get_principal(principal_id: UUID) -> Principal:
    """
    Fetch a principal by id.

    Raises:
        NotFoundError: If no such principal exists
    """
    principal = Principal.objects.select_related('parent').filter(id=principal_id).first()
    if principal is None:
        raise NotFoundError(f'No principal found with id {principal_id}')
    return principal


def list_sub_agents(agent_id: UUID) -> QuerySet:
    """Sub-agents whose parent is exactly this agent, sorted by name."""
    return Principal.objects.filter(parent_id=agent_id, role=Role.SUB_AGENT).order_by('name')


def list_approved_agents() -> QuerySet:
    """Approved top-level agents, sorted by name."""
    return Principal.objects.filter(role=Role.AGENT, is_approved=True).order_by('name')


def list_agents() -> QuerySet:
    """All top-level agents regardless of approval, sorted by name."""
    return Principal.objects.filter(role=Role.AGENT).order_by('name')


def list_pending_agents() -> QuerySet:
    """Agents and sub-agents awaiting approval, oldest first."""
    return Principal.objects.filter(
        role__in=AGENT_ROLES, is_approved=False
    ).select_related('parent').order_by('created_at')


def lookup_by_agent_code(code: str) -> Principal:
    """
    Find an approved agent by code (case-insensitive).

    Raises:
        NotFoundError: If no approved agent carries the code
    """
    normalized = (code or '').strip().upper()
    agent = Principal.objects.filter(
        agent_code=normalized, role=Role.AGENT, is_approved=True
    ).first()
    if agent is None:
        raise NotFoundError(
            'No approved agent found with this code',
            details={'agent_code': normalized},
        )
    return agent


def get_agent_stats(agent_id: UUID) -> dict:
    """
    Count an agent's sub-agents.

    Returns:
        {'total_sub_agents': int, 'active_sub_agents': int}
    """
    counts = Principal.objects.filter(parent_id=agent_id, role=Role.SUB_AGENT).aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(is_approved=True, is_active=True)),
    )
    return {
        'total_sub_agents': counts['total'],
        'active_sub_agents': counts['active'],
    }
