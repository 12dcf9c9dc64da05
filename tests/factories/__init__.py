"""
Factory Boy Factories for the Referral Backend Models

Import all factories here for easy access in tests.
"""
from tests.factories.core import (
    AdminFactory,
    AgentFactory,
    LeadFactory,
    PayoutFactory,
    PrincipalFactory,
    SubAgentFactory,
    caller_for,
)

__all__ = [
    'PrincipalFactory',
    'AdminFactory',
    'AgentFactory',
    'SubAgentFactory',
    'LeadFactory',
    'PayoutFactory',
    'caller_for',
]
