"""
Integration Tests for Agent Services

Covers registration, agent-code assignment, approval, activity toggles and
commission-rate cascades against a real database.

Critical Test Cases:
1. Sub-agents inherit half their parent's rate
2. Agent codes follow the highest issued code and retry collisions
3. Rate changes cascade to the agent's own sub-agents only
4. Randomized registration never breaks the two-level tree
"""
import random
from decimal import Decimal

import pytest
from faker import Faker

from apps.agents.selectors import (
    get_agent_stats,
    list_approved_agents,
    list_pending_agents,
    list_sub_agents,
    lookup_by_agent_code,
)
from apps.agents.services import (
    PrincipalCreateInput,
    approve_principal,
    create_sub_agent,
    generate_agent_code,
    register_principal,
    set_commission_rate,
    set_principal_active,
)
from apps.core.exceptions import (
    APIException,
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    OutOfRangeError,
    ValidationError,
)
from apps.core.hierarchy import find_hierarchy_violations
from apps.core.models import Principal, Role
from tests.factories import AgentFactory, PayoutFactory, PrincipalFactory, SubAgentFactory, caller_for

fake = Faker()


def registration(role, **overrides) -> PrincipalCreateInput:
    data = {
        'name': fake.name(),
        'email': fake.unique.email(),
        'phone': '9876543210',
        'address': fake.address(),
        'role': role,
    }
    data.update(overrides)
    return PrincipalCreateInput.from_data(data)


# =============================================================================
# Registration
# =============================================================================

@pytest.mark.django_db
class TestRegisterPrincipal:

    def test_agent_registers_pending_with_default_rate(self):
        principal = register_principal(registration(Role.AGENT, email='New.Agent@Example.com'))

        assert principal.role == Role.AGENT
        assert principal.is_approved is False
        assert principal.commission_rate == Decimal('2.00')
        assert principal.email == 'new.agent@example.com'
        assert principal.agent_code == 'AG0001'
        assert principal.parent_id is None

    def test_user_registers_approved_without_code(self):
        principal = register_principal(registration(Role.USER))

        assert principal.is_approved is True
        assert principal.agent_code is None

    def test_sub_agent_by_parent_code_inherits_half_rate(self, agent):
        principal = register_principal(
            registration(Role.SUB_AGENT, parent_agent_code=agent.agent_code.lower())
        )

        assert principal.parent_id == agent.id
        assert principal.commission_rate == Decimal('5.00')
        assert principal.is_approved is True
        assert principal.agent_code.startswith('AG')

    def test_sub_agent_with_unknown_code_is_not_found(self):
        with pytest.raises(NotFoundError):
            register_principal(registration(Role.SUB_AGENT, parent_agent_code='AG9999'))

    def test_sub_agent_with_unapproved_parent_is_not_found(self):
        parent = AgentFactory(is_approved=False)

        with pytest.raises(NotFoundError):
            register_principal(registration(Role.SUB_AGENT, parent_agent_code=parent.agent_code))

    def test_sub_agent_without_code_is_invalid(self):
        with pytest.raises(ValidationError) as exc_info:
            register_principal(registration(Role.SUB_AGENT))

        assert exc_info.value.details['field'] == 'parent_agent_code'

    def test_duplicate_email_conflicts(self):
        register_principal(registration(Role.AGENT, email='dup@example.com'))

        with pytest.raises(ConflictError):
            register_principal(registration(Role.USER, email='DUP@example.com'))

        assert Principal.objects.filter(email='dup@example.com').count() == 1

    def test_missing_fields_are_listed(self):
        data = PrincipalCreateInput.from_data({'name': 'Only Name', 'role': Role.AGENT})

        with pytest.raises(ValidationError) as exc_info:
            register_principal(data)

        assert set(exc_info.value.details['missing']) == {'email', 'phone', 'address'}

    @pytest.mark.parametrize('email', ['plainaddress', 'no@tld', 'spaces in@x.com'])
    def test_malformed_email_is_rejected(self, email):
        with pytest.raises(ValidationError):
            register_principal(registration(Role.AGENT, email=email))

    def test_unknown_role_is_rejected(self):
        with pytest.raises(ValidationError):
            register_principal(registration('superuser'))

    def test_admin_creation_requires_admin_caller(self, agent_caller, admin_caller):
        with pytest.raises(AuthenticationError):
            register_principal(registration(Role.ADMIN))
        with pytest.raises(ForbiddenError):
            register_principal(registration(Role.ADMIN), caller=agent_caller)

        created = register_principal(registration(Role.ADMIN), caller=admin_caller)
        assert created.role == Role.ADMIN

    def test_agent_creates_sub_agent_under_itself(self, agent, agent_caller):
        sub = create_sub_agent(registration(Role.USER), agent_caller)

        assert sub.role == Role.SUB_AGENT
        assert sub.parent_id == agent.id
        assert sub.commission_rate == Decimal('5.00')

    def test_sub_agent_cannot_create_sub_agents(self, sub_agent_caller):
        with pytest.raises(ForbiddenError):
            create_sub_agent(registration(Role.USER), sub_agent_caller)


# =============================================================================
# Agent Codes
# =============================================================================

@pytest.mark.django_db
class TestAgentCodes:

    def test_first_code(self):
        assert generate_agent_code() == 'AG0001'

    def test_next_code_follows_highest_not_count(self):
        AgentFactory(agent_code='AG0001')
        AgentFactory(agent_code='AG0005')

        assert generate_agent_code() == 'AG0006'

    def test_code_widens_past_9999(self):
        AgentFactory(agent_code='AG9999')

        assert generate_agent_code() == 'AG10000'

    def test_collision_is_retried(self, mocker):
        AgentFactory(agent_code='AG0001')
        mocker.patch(
            'apps.agents.services.generate_agent_code',
            side_effect=['AG0001', 'AG0002'],
        )

        principal = register_principal(registration(Role.AGENT))

        assert principal.agent_code == 'AG0002'

    def test_exhausted_retries_conflict(self, mocker, settings):
        settings.AGENT_CODE_MAX_ATTEMPTS = 3
        AgentFactory(agent_code='AG0001')
        patched = mocker.patch('apps.agents.services.generate_agent_code', return_value='AG0001')

        with pytest.raises(ConflictError) as exc_info:
            register_principal(registration(Role.AGENT))

        assert patched.call_count == 3
        assert exc_info.value.details['attempts'] == 3


# =============================================================================
# Approval & Activity
# =============================================================================

@pytest.mark.django_db
class TestApprovalAndActivity:

    def test_admin_approves_agent(self, admin_caller):
        pending = AgentFactory(is_approved=False)

        result = approve_principal(pending.id, True, admin_caller)

        assert result.is_approved is True
        pending.refresh_from_db()
        assert pending.is_approved is True

    def test_non_admin_cannot_approve(self, agent_caller):
        pending = AgentFactory(is_approved=False)

        with pytest.raises(ForbiddenError):
            approve_principal(pending.id, True, agent_caller)

    def test_approve_unknown_principal(self, admin_caller):
        with pytest.raises(NotFoundError):
            approve_principal(PrincipalFactory.build().id, True, admin_caller)

    def test_approve_non_agent_is_invalid_state(self, admin_caller):
        user = PrincipalFactory(role=Role.USER)

        with pytest.raises(InvalidStateError):
            approve_principal(user.id, True, admin_caller)

    def test_agent_disables_own_sub_agent(self, sub_agent, agent_caller):
        result = set_principal_active(sub_agent.id, False, agent_caller)

        assert result.is_active is False

    def test_agent_cannot_touch_other_agents_sub_agent(self, agent_caller):
        other = SubAgentFactory()

        with pytest.raises(NotFoundError):
            set_principal_active(other.id, False, agent_caller)

        other.refresh_from_db()
        assert other.is_active is True

    def test_admin_disables_agent(self, agent, admin_caller):
        result = set_principal_active(agent.id, False, admin_caller)

        assert result.is_active is False


# =============================================================================
# Commission Rates
# =============================================================================

@pytest.mark.django_db
class TestCommissionRates:

    def test_cascade_to_own_sub_agents_only(self, agent, admin_caller):
        mine = [SubAgentFactory(parent=agent) for _ in range(3)]
        other = SubAgentFactory(parent=AgentFactory(commission_rate=Decimal('8.00')))
        payout = PayoutFactory(agent=agent, commission_rate=Decimal('10.00'))

        set_commission_rate(agent.id, '20', admin_caller)

        agent.refresh_from_db()
        assert agent.commission_rate == Decimal('20.00')
        for sub in mine:
            sub.refresh_from_db()
            assert sub.commission_rate == Decimal('10.00')
        other.refresh_from_db()
        assert other.commission_rate == Decimal('4.00')
        payout.refresh_from_db()
        assert payout.commission_rate == Decimal('10.00')

    def test_sub_agent_override_survives_until_next_cascade(self, agent, sub_agent, agent_caller, admin_caller):
        set_commission_rate(sub_agent.id, Decimal('7.25'), agent_caller)
        sub_agent.refresh_from_db()
        assert sub_agent.commission_rate == Decimal('7.25')

        set_commission_rate(agent.id, Decimal('12'), admin_caller)
        sub_agent.refresh_from_db()
        assert sub_agent.commission_rate == Decimal('6.00')

    def test_half_rate_rounds_to_cents(self, agent, sub_agent, admin_caller):
        set_commission_rate(agent.id, '7.25', admin_caller)

        sub_agent.refresh_from_db()
        assert sub_agent.commission_rate == Decimal('3.63')

    @pytest.mark.parametrize('rate', ['-0.01', '100.01', 250])
    def test_out_of_range(self, agent, admin_caller, rate):
        with pytest.raises(OutOfRangeError) as exc_info:
            set_commission_rate(agent.id, rate, admin_caller)

        assert exc_info.value.status_code == 400
        assert exc_info.value.details['field'] == 'commission_rate'

    @pytest.mark.parametrize('rate', ['abc', None, '', 'NaN', 'Infinity'])
    def test_non_numeric_rate(self, agent, admin_caller, rate):
        with pytest.raises(ValidationError):
            set_commission_rate(agent.id, rate, admin_caller)

    def test_boundaries_are_accepted(self, agent, admin_caller):
        assert set_commission_rate(agent.id, 0, admin_caller).commission_rate == Decimal('0.00')
        assert set_commission_rate(agent.id, 100, admin_caller).commission_rate == Decimal('100.00')

    def test_agent_cannot_set_own_rate(self, agent, agent_caller):
        with pytest.raises(NotFoundError):
            set_commission_rate(agent.id, '50', agent_caller)

    def test_sub_agent_cannot_set_rates(self, sub_agent, sub_agent_caller):
        with pytest.raises(ForbiddenError):
            set_commission_rate(sub_agent.id, '50', sub_agent_caller)


# =============================================================================
# Selectors
# =============================================================================

@pytest.mark.django_db
class TestAgentSelectors:

    def test_list_sub_agents_sorted_by_name(self, agent):
        SubAgentFactory(parent=agent, name='Zed')
        SubAgentFactory(parent=agent, name='Amy')
        SubAgentFactory(name='Not Mine')

        names = [p.name for p in list_sub_agents(agent.id)]

        assert names == ['Amy', 'Zed']

    def test_list_approved_agents_excludes_pending(self, agent):
        AgentFactory(is_approved=False)

        assert list(list_approved_agents()) == [agent]

    def test_list_pending_agents(self):
        pending = AgentFactory(is_approved=False)
        AgentFactory()

        assert list(list_pending_agents()) == [pending]

    def test_lookup_by_agent_code_is_case_insensitive(self, agent):
        assert lookup_by_agent_code(f' {agent.agent_code.lower()} ') == agent

    def test_lookup_of_unapproved_agent_is_not_found(self):
        pending = AgentFactory(is_approved=False)

        with pytest.raises(NotFoundError):
            lookup_by_agent_code(pending.agent_code)

    def test_agent_stats(self, agent):
        SubAgentFactory(parent=agent)
        SubAgentFactory(parent=agent, is_active=False)

        assert get_agent_stats(agent.id) == {'total_sub_agents': 2, 'active_sub_agents': 1}


# =============================================================================
# Hierarchy Invariant
# =============================================================================

@pytest.mark.django_db
class TestHierarchyInvariant:

    @pytest.mark.parametrize('seed', [1, 7, 42])
    def test_random_operations_keep_two_level_tree(self, seed, admin_caller):
        rng = random.Random(seed)
        roles = [Role.AGENT, Role.SUB_AGENT, Role.USER]

        for _ in range(40):
            role = rng.choice(roles)
            agents = list(Principal.objects.filter(role=Role.AGENT))
            try:
                if role == Role.SUB_AGENT:
                    code = rng.choice(agents).agent_code if agents else 'AG0000'
                    if agents and rng.random() < 0.5:
                        create_sub_agent(registration(Role.USER), caller_for(rng.choice(agents)))
                    else:
                        register_principal(registration(Role.SUB_AGENT, parent_agent_code=code))
                else:
                    created = register_principal(registration(role))
                    if role == Role.AGENT and rng.random() < 0.7:
                        approve_principal(created.id, True, admin_caller)
            except APIException:
                # Rejections are expected (unapproved parents, missing codes)
                pass

        assert find_hierarchy_violations() == []
        for principal in Principal.objects.all():
            if principal.role == Role.SUB_AGENT:
                assert principal.parent.role == Role.AGENT
            else:
                assert principal.parent_id is None
