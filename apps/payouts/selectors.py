"""
Payout Selectors

Read-only queries over monthly payout rows.
"""
import logging
from datetime import date
from uuid import UUID

from django.conf import settings
from django.db.models import QuerySet
from django.utils import timezone

from apps.core.models import Payout, Role
from apps.core.permissions import require_operation
from apps.core.utils import add_months, month_start

logger = logging.getLogger(__name__)


def list_payouts(agent_id: UUID | None = None, status: str | None = None) -> QuerySet:
    """
    All payout rows, optionally for one agent and/or status, newest month first.
    """
    qs = Payout.objects.select_related('agent')
    if agent_id:
        qs = qs.filter(agent_id=agent_id)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by('-month', 'agent__name')


def list_payouts_for_agent(agent_id: UUID) -> QuerySet:
    """The agent's own payout rows, newest month first."""
    return Payout.objects.filter(agent_id=agent_id).order_by('-month')


def payout_statistics(
    caller,
    months_back: int | None = None,
    as_of: date | None = None,
) -> list[Payout]:
    """
    Payout rows within a trailing window, ordered by month.

    Admins see every agent's rows; anyone else only their own.

    Args:
        caller: The authenticated caller
        months_back: Window size in months (default PAYOUT_STATISTICS_MONTHS)
        as_of: Reference date (default today)

    Returns:
        Payout rows with month >= start of window, ascending by month
    """
    require_operation('payout_statistics', caller)

    months_back = months_back or settings.PAYOUT_STATISTICS_MONTHS
    reference = month_start(as_of or timezone.localdate())
    window_start = add_months(reference, -months_back)

    qs = Payout.objects.select_related('agent').filter(month__gte=window_start)
    if caller.role != Role.ADMIN:
        qs = qs.filter(agent_id=caller.id)

    return list(qs.order_by('month', 'agent__name'))
