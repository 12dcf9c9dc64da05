"""
Pytest Configuration for the Referral Backend Tests

Key Features:
- Tables are created from the models by pytest-django (no migrations)
- Provides fixtures for principals, callers and API clients
- Sets up factory_boy for model factories
"""
from decimal import Decimal

import jwt
import pytest
from django.conf import settings
from rest_framework.test import APIClient

from tests.factories import AdminFactory, AgentFactory, SubAgentFactory, caller_for


# =============================================================================
# Principal Fixtures
# =============================================================================

@pytest.fixture
def admin(db):
    """An administrator."""
    return AdminFactory(name='Admin User')


@pytest.fixture
def agent(db):
    """An approved agent at 10%."""
    return AgentFactory(name='Agent A', commission_rate=Decimal('10.00'))


@pytest.fixture
def sub_agent(agent):
    """A sub-agent under `agent` at 5%."""
    return SubAgentFactory(name='Sub Agent B', parent=agent)


@pytest.fixture
def admin_caller(admin):
    return caller_for(admin)


@pytest.fixture
def agent_caller(agent):
    return caller_for(agent)


@pytest.fixture
def sub_agent_caller(sub_agent):
    return caller_for(sub_agent)


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Basic API client without authentication."""
    return APIClient()


def _client_for(principal) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=caller_for(principal))
    return client


@pytest.fixture
def admin_client(admin):
    """API client authenticated as the admin."""
    return _client_for(admin)


@pytest.fixture
def agent_client(agent):
    """API client authenticated as the agent."""
    return _client_for(agent)


@pytest.fixture
def sub_agent_client(sub_agent):
    """API client authenticated as the sub-agent."""
    return _client_for(sub_agent)


@pytest.fixture
def make_token():
    """Build a signed bearer token for a principal."""
    def _make(principal, **claims):
        payload = {'sub': str(principal.id), **claims}
        return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm='HS256')
    return _make
