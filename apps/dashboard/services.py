"""
Dashboard Services

Read-side rollups for the agent dashboard. Everything is derived from the
leads and payouts tables on each request; nothing here writes.
"""
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from uuid import UUID

from django.conf import settings
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce, TruncMonth
from django.utils import timezone

from apps.core.constants import DASHBOARD_RECENT_LEADS
from apps.core.models import InvestmentType, Lead, LeadStatus, Payout, PayoutStatus
from apps.core.utils import add_months, month_start, quantize_money

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
_MONEY = DecimalField(max_digits=15, decimal_places=2)

GOAL_TITLES = {
    'monthly_commission': 'Monthly Target',
    'aum': 'AUM Target',
}


def _money_sum(field: str, **filters):
    return Coalesce(Sum(field, filter=Q(**filters)), Value(ZERO), output_field=_MONEY)


def _reference_time(as_of: date | None) -> datetime:
    """End of the as_of day, or now."""
    if as_of is None:
        return timezone.now()
    return timezone.make_aware(datetime.combine(as_of + timedelta(days=1), time.min))


# =============================================================================
# Sections
# =============================================================================

def _lead_stats(leads) -> dict:
    totals = leads.aggregate(
        total_leads=Count('id'),
        approved_leads=Count('id', filter=Q(status=LeadStatus.APPROVED)),
        pending_leads=Count('id', filter=Q(status=LeadStatus.PENDING)),
        total_aum=_money_sum('investment_amount', status=LeadStatus.APPROVED),
        pending_aum=_money_sum('investment_amount', status=LeadStatus.PENDING),
        sip_book=_money_sum(
            'investment_amount', status=LeadStatus.APPROVED, investment_type=InvestmentType.SIP
        ),
        active_clients=Count('customer_name', filter=Q(status=LeadStatus.APPROVED), distinct=True),
        pending_clients=Count('customer_name', filter=Q(status=LeadStatus.PENDING), distinct=True),
    )
    for key in ('total_aum', 'pending_aum', 'sip_book'):
        totals[key] = quantize_money(Decimal(totals[key]))
    return totals


def _monthly_commission(principal_id: UUID, reference: datetime) -> Decimal:
    """Paid payout totals for the principal in the trailing commission window."""
    window_start = reference - timedelta(days=settings.DASHBOARD_COMMISSION_DAYS)
    total = Payout.objects.filter(
        agent_id=principal_id,
        status=PayoutStatus.PAID,
        paid_at__gte=window_start,
        paid_at__lte=reference,
    ).aggregate(total=Coalesce(Sum('total_amount'), Value(ZERO), output_field=_MONEY))['total']
    return quantize_money(Decimal(total))


def _aum_growth(leads, reference: datetime) -> list[dict]:
    """
    Approved amount per calendar month over the trailing window, oldest
    first. Months without approved leads are omitted.
    """
    window_start = add_months(month_start(reference), -(settings.DASHBOARD_WINDOW_MONTHS - 1))
    rows = (
        leads.filter(
            status=LeadStatus.APPROVED,
            created_at__gte=timezone.make_aware(datetime.combine(window_start, time.min)),
        )
        .annotate(bucket=TruncMonth('created_at'))
        .values('bucket')
        .annotate(amount=Sum('investment_amount'))
        .order_by('bucket')
    )
    growth = []
    for row in rows:
        bucket = month_start(row['bucket'])
        growth.append({
            'month': f'{bucket.month}/{bucket.year}',
            'amount': quantize_money(Decimal(row['amount'])),
        })
    return growth


def _portfolio_distribution(leads) -> list[dict]:
    rows = (
        leads.filter(status=LeadStatus.APPROVED)
        .values('investment_type')
        .annotate(amount=Sum('investment_amount'))
        .order_by('investment_type')
    )
    return [
        {'type': row['investment_type'], 'amount': quantize_money(Decimal(row['amount']))}
        for row in rows
    ]


def _goal_progress(current_values: dict) -> list[dict]:
    progress = []
    for key, target in settings.DASHBOARD_GOALS.items():
        current = current_values[key]
        percent = (current / target * 100) if target else Decimal('0')
        progress.append({
            'key': key,
            'title': GOAL_TITLES.get(key, key),
            'current': current,
            'target': quantize_money(Decimal(target)),
            'progress': quantize_money(min(Decimal('100'), percent)),
        })
    return progress


# =============================================================================
# Summary
# =============================================================================

def get_dashboard_summary(principal_id: UUID, as_of: date | None = None) -> dict:
    """
    Build the dashboard for an agent or sub-agent.

    A lead counts for the principal when it is credited to them or was
    submitted by them.

    Windows differ per figure. The stats counts, total_aum, pending_aum,
    sip_book and portfolio_distribution cover every lead up to as_of (all
    time when as_of is None); only aum_growth is limited to the trailing
    DASHBOARD_WINDOW_MONTHS, and monthly_commission to payouts paid in the
    trailing DASHBOARD_COMMISSION_DAYS.

    Args:
        principal_id: The agent or sub-agent
        as_of: Reference date (default now)

    Returns:
        {
            'stats': { total_aum, pending_aum, active_clients, pending_clients,
                       total_leads, approved_leads, pending_leads,
                       monthly_commission, sip_book },
            'aum_growth': [ { month: 'M/YYYY', amount } ],
            'portfolio_distribution': [ { type, amount } ],
            'recent_leads': [Lead, ...],
            'pending_leads_list': [Lead, ...],
            'goal_progress': [ { key, title, current, target, progress } ],
        }
    """
    reference = _reference_time(as_of)
    leads = Lead.objects.filter(Q(agent_id=principal_id) | Q(sub_agent_id=principal_id))
    if as_of is not None:
        leads = leads.filter(created_at__lt=reference)

    stats = _lead_stats(leads)
    stats['monthly_commission'] = _monthly_commission(principal_id, reference)

    recent_leads = list(leads.order_by('-created_at')[:DASHBOARD_RECENT_LEADS])
    pending_leads_list = list(leads.filter(status=LeadStatus.PENDING).order_by('-created_at'))

    summary = {
        'stats': stats,
        'aum_growth': _aum_growth(leads, reference),
        'portfolio_distribution': _portfolio_distribution(leads),
        'recent_leads': recent_leads,
        'pending_leads_list': pending_leads_list,
        'goal_progress': _goal_progress({
            'monthly_commission': stats['monthly_commission'],
            'aum': stats['total_aum'],
        }),
    }

    logger.debug(
        f'Dashboard for {principal_id}: {stats["total_leads"]} leads, '
        f'aum={stats["total_aum"]}, commission={stats["monthly_commission"]}'
    )
    return summary
