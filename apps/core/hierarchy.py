"""
Hierarchy Utilities for the Referral Backend.

The tree is exactly two levels deep: agents at the top, sub-agents below.
These helpers resolve it with explicit id lookups instead of recursive
traversal.
"""
from uuid import UUID

from .models import Principal, Role


def get_top_level_agent(principal: Principal) -> Principal | None:
    """
    Return the agent at the top of the principal's branch.

    An agent is its own top level; a sub-agent's is its parent. Admins and
    users are outside the tree and return None.
    """
    if principal.role == Role.AGENT:
        return principal
    if principal.role == Role.SUB_AGENT:
        return principal.parent
    return None


def get_team_ids(agent_id: UUID) -> list[UUID]:
    """The agent's own id followed by its direct sub-agents' ids."""
    sub_agent_ids = Principal.objects.filter(
        parent_id=agent_id, role=Role.SUB_AGENT
    ).values_list('id', flat=True)
    return [agent_id, *sub_agent_ids]


def find_hierarchy_violations() -> list[UUID]:
    """
    Return ids of principals that break the two-level tree rules.

    A sub-agent must have a parent whose role is agent; everyone else must
    have no parent.
    """
    bad_sub_agents = Principal.objects.filter(role=Role.SUB_AGENT).exclude(
        parent__role=Role.AGENT
    )
    parented_others = Principal.objects.exclude(role=Role.SUB_AGENT).filter(
        parent__isnull=False
    )
    return [
        *bad_sub_agents.values_list('id', flat=True),
        *parented_others.values_list('id', flat=True),
    ]
