"""
Lead Selectors

Read-only queries over leads.
"""
from datetime import date, datetime, time, timedelta
from uuid import UUID

from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.core.exceptions import NotFoundError
from apps.core.models import Lead


def _base_queryset() -> QuerySet:
    return Lead.objects.select_related('agent', 'sub_agent', 'decided_by')


def list_leads_for_agent(agent_id: UUID) -> QuerySet:
    """Leads the principal is credited with or submitted, newest first."""
    return _base_queryset().filter(
        Q(agent_id=agent_id) | Q(sub_agent_id=agent_id)
    ).order_by('-created_at')


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value if timezone.is_aware(value) else timezone.make_aware(value)
    return timezone.make_aware(datetime.combine(value, time.min))


def list_all_leads(
    status: str | None = None,
    agent_id: UUID | None = None,
    date_from: date | datetime | None = None,
    date_to: date | datetime | None = None,
) -> QuerySet:
    """
    Admin listing with optional filters, newest first.

    Date bounds are inclusive. A plain date for date_to covers that whole day.
    """
    qs = _base_queryset()

    if status:
        qs = qs.filter(status=status)
    if agent_id:
        qs = qs.filter(Q(agent_id=agent_id) | Q(sub_agent_id=agent_id))
    if date_from:
        qs = qs.filter(created_at__gte=_as_datetime(date_from))
    if date_to:
        if isinstance(date_to, datetime):
            qs = qs.filter(created_at__lte=_as_datetime(date_to))
        else:
            qs = qs.filter(created_at__lt=_as_datetime(date_to + timedelta(days=1)))

    return qs.order_by('-created_at')


def get_lead(lead_id: UUID) -> Lead:
    """
    Fetch a single lead.

    Raises:
        NotFoundError: If no such lead exists
    """
    lead = _base_queryset().filter(id=lead_id).first()
    if lead is None:
        raise NotFoundError('Lead not found', details={'lead_id': str(lead_id)})
    return lead
