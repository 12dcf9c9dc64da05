"""
Integration Tests for the Dashboard Summary

The dashboard is a pure read over leads and payouts for one principal.
"""
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.core.models import InvestmentType, Lead, LeadStatus, PayoutStatus
from apps.dashboard.services import get_dashboard_summary
from tests.factories import AgentFactory, LeadFactory, PayoutFactory


def set_created(lead, when: datetime):
    Lead.objects.filter(pk=lead.pk).update(created_at=when)


@pytest.mark.django_db
class TestDashboardZeroState:

    def test_everything_is_zero_or_empty(self, agent):
        summary = get_dashboard_summary(agent.id)

        assert summary['stats'] == {
            'total_aum': Decimal('0.00'),
            'pending_aum': Decimal('0.00'),
            'active_clients': 0,
            'pending_clients': 0,
            'total_leads': 0,
            'approved_leads': 0,
            'pending_leads': 0,
            'monthly_commission': Decimal('0.00'),
            'sip_book': Decimal('0.00'),
        }
        assert summary['aum_growth'] == []
        assert summary['portfolio_distribution'] == []
        assert summary['recent_leads'] == []
        assert summary['pending_leads_list'] == []
        assert [goal['progress'] for goal in summary['goal_progress']] == [Decimal('0.00'), Decimal('0.00')]


@pytest.mark.django_db
class TestDashboardStats:

    def test_lead_rollups(self, agent):
        LeadFactory(agent=agent, customer_name='Asha', status=LeadStatus.APPROVED,
                    investment_type=InvestmentType.SIP, investment_amount=Decimal('50000'))
        LeadFactory(agent=agent, customer_name='Asha', status=LeadStatus.APPROVED,
                    investment_type=InvestmentType.LUMPSUM, investment_amount=Decimal('25000'))
        LeadFactory(agent=agent, customer_name='Ravi', status=LeadStatus.PENDING,
                    investment_amount=Decimal('10000'))
        LeadFactory(agent=agent, customer_name='Meera', status=LeadStatus.REJECTED,
                    investment_amount=Decimal('99999'))
        LeadFactory(status=LeadStatus.APPROVED, investment_amount=Decimal('1000000'))

        stats = get_dashboard_summary(agent.id)['stats']

        assert stats['total_aum'] == Decimal('75000.00')
        assert stats['pending_aum'] == Decimal('10000.00')
        assert stats['sip_book'] == Decimal('50000.00')
        assert stats['active_clients'] == 1
        assert stats['pending_clients'] == 1
        assert stats['total_leads'] == 4
        assert stats['approved_leads'] == 2
        assert stats['pending_leads'] == 1

    def test_sub_agent_sees_its_submissions(self, agent, sub_agent):
        LeadFactory(agent=agent, sub_agent=sub_agent, status=LeadStatus.APPROVED,
                    investment_amount=Decimal('5000'))
        LeadFactory(agent=agent, status=LeadStatus.APPROVED, investment_amount=Decimal('7000'))

        assert get_dashboard_summary(sub_agent.id)['stats']['total_aum'] == Decimal('5000.00')
        assert get_dashboard_summary(agent.id)['stats']['total_aum'] == Decimal('12000.00')

    def test_monthly_commission_counts_recently_paid_rows_only(self, agent):
        now = timezone.now()
        PayoutFactory(agent=agent, month=date(2024, 1, 1), total_amount=Decimal('1200.00'),
                      status=PayoutStatus.PAID, paid_at=now - timedelta(days=3))
        PayoutFactory(agent=agent, month=date(2023, 1, 1), total_amount=Decimal('999.00'),
                      status=PayoutStatus.PAID, paid_at=now - timedelta(days=45))
        PayoutFactory(agent=agent, month=date(2024, 2, 1), total_amount=Decimal('500.00'),
                      status=PayoutStatus.PENDING)

        summary = get_dashboard_summary(agent.id)

        assert summary['stats']['monthly_commission'] == Decimal('1200.00')
        commission_goal = next(g for g in summary['goal_progress'] if g['key'] == 'monthly_commission')
        assert commission_goal['progress'] == Decimal('1.20')


@pytest.mark.django_db
class TestDashboardSeries:

    def test_aum_growth_buckets_trailing_months_oldest_first(self, agent):
        as_of = date(2024, 6, 15)
        for when, amount in [
            (datetime(2024, 6, 2, 10), '1000'),
            (datetime(2024, 6, 9, 10), '500'),
            (datetime(2024, 3, 20, 10), '2000'),
            (datetime(2023, 12, 31, 23), '4000'),
        ]:
            lead = LeadFactory(agent=agent, status=LeadStatus.APPROVED, investment_amount=Decimal(amount))
            set_created(lead, timezone.make_aware(when))
        pending = LeadFactory(agent=agent, investment_amount=Decimal('777'))
        set_created(pending, timezone.make_aware(datetime(2024, 5, 5)))

        growth = get_dashboard_summary(agent.id, as_of=as_of)['aum_growth']

        assert growth == [
            {'month': '3/2024', 'amount': Decimal('2000.00')},
            {'month': '6/2024', 'amount': Decimal('1500.00')},
        ]

    def test_totals_cover_all_time_while_growth_is_windowed(self, agent):
        old = LeadFactory(agent=agent, status=LeadStatus.APPROVED,
                          investment_type=InvestmentType.SIP, investment_amount=Decimal('4000'))
        set_created(old, timezone.make_aware(datetime(2022, 1, 10, 10)))
        recent = LeadFactory(agent=agent, status=LeadStatus.APPROVED, investment_amount=Decimal('1000'))
        set_created(recent, timezone.make_aware(datetime(2024, 6, 2, 10)))

        summary = get_dashboard_summary(agent.id, as_of=date(2024, 6, 15))

        assert summary['stats']['total_aum'] == Decimal('5000.00')
        assert summary['stats']['sip_book'] == Decimal('5000.00')
        assert summary['stats']['approved_leads'] == 2
        assert summary['aum_growth'] == [{'month': '6/2024', 'amount': Decimal('1000.00')}]

    def test_portfolio_distribution_by_type(self, agent):
        for kind, amount in [
            (InvestmentType.SIP, '100'),
            (InvestmentType.SIP, '50'),
            (InvestmentType.MUTUAL_FUNDS, '300'),
        ]:
            LeadFactory(agent=agent, status=LeadStatus.APPROVED,
                        investment_type=kind, investment_amount=Decimal(amount))

        distribution = get_dashboard_summary(agent.id)['portfolio_distribution']

        assert {row['type']: row['amount'] for row in distribution} == {
            'SIP': Decimal('150.00'),
            'mutual_funds': Decimal('300.00'),
        }

    def test_recent_and_pending_lists(self, agent):
        leads = LeadFactory.create_batch(7, agent=agent)
        base = timezone.now() - timedelta(days=10)
        for offset, lead in enumerate(leads):
            set_created(lead, base + timedelta(hours=offset))
        Lead.objects.filter(pk=leads[0].pk).update(status=LeadStatus.APPROVED)

        summary = get_dashboard_summary(agent.id)

        assert [lead.id for lead in summary['recent_leads']] == [lead.id for lead in reversed(leads[2:])]
        assert len(summary['pending_leads_list']) == 6
        assert leads[0].id not in {lead.id for lead in summary['pending_leads_list']}

    def test_goal_progress_is_capped(self, agent):
        LeadFactory(agent=agent, status=LeadStatus.APPROVED, investment_amount=Decimal('20000000'))

        goals = {g['key']: g for g in get_dashboard_summary(agent.id)['goal_progress']}

        assert goals['aum']['progress'] == Decimal('100.00')
        assert goals['aum']['target'] == Decimal('10000000.00')

    def test_other_agents_are_isolated(self, agent):
        other = AgentFactory()
        LeadFactory(agent=other, status=LeadStatus.APPROVED)

        assert get_dashboard_summary(agent.id)['stats']['total_leads'] == 0
