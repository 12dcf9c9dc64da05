"""
Payout Services

Monthly commission accrual and payment. This module is the only writer of
the payouts table.

Commission for one approved lead:
    investment_amount * commission_rate / 100, rounded half-up to cents

The rate is the one stored on the (agent, month) payout row, which is the
agent's rate at the moment the row was created.
"""
import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from apps.core.exceptions import InvalidStateError, NotFoundError
from apps.core.models import Payout, PayoutStatus, Principal
from apps.core.permissions import require_operation
from apps.core.utils import month_start, quantize_money, storage_guard

logger = logging.getLogger(__name__)


def calculate_commission(amount: Decimal, rate: Decimal) -> Decimal:
    """
    Commission on an amount at a percentage rate.

    Example: calculate_commission(Decimal('10000'), Decimal('2')) == Decimal('200.00')
    """
    return quantize_money(amount * rate / Decimal('100'))


def _find_or_create_payout(agent_id: UUID, month: date) -> tuple[Payout, bool]:
    """
    Return the unique payout row for (agent, month), creating it if needed.

    The insert runs under a savepoint; if a concurrent request created the
    row first, the unique constraint rejects ours and the existing row is
    fetched instead.
    """
    existing = Payout.objects.filter(agent_id=agent_id, month=month).first()
    if existing is not None:
        return existing, False

    agent = Principal.objects.filter(id=agent_id).first()
    if agent is None:
        raise NotFoundError(f'No principal found with id {agent_id}')

    try:
        with transaction.atomic():
            payout = Payout.objects.create(
                agent_id=agent_id,
                month=month,
                commission_rate=agent.commission_rate,
            )
            return payout, True
    except IntegrityError:
        logger.info(f'Payout for {agent_id} {month:%Y-%m} created concurrently, reusing it')
        return Payout.objects.get(agent_id=agent_id, month=month), False


@storage_guard
@transaction.atomic
def accrue_payout(agent_id: UUID, month: date, investment_amount: Decimal) -> Payout:
    """
    Add one approved lead to the agent's payout row for the month.

    Only decide_lead calls this, at most once per lead moving to approved.
    The counters and total are incremented with a single UPDATE using F()
    expressions, so concurrent accruals never overwrite each other. The
    UPDATE only matches a pending row: a month that has already been paid
    out is closed, and its total must keep matching what was paid.

    Args:
        agent_id: The credited agent
        month: Any date in the month (normalized to the first)
        investment_amount: The lead's investment amount

    Returns:
        The refreshed Payout row

    Raises:
        InvalidStateError: If the month's payout has already been paid
    """
    month = month_start(month)
    payout, created = _find_or_create_payout(agent_id, month)
    contribution = calculate_commission(investment_amount, payout.commission_rate)

    updated = Payout.objects.filter(pk=payout.pk, status=PayoutStatus.PENDING).update(
        total_leads=F('total_leads') + 1,
        approved_leads=F('approved_leads') + 1,
        total_amount=F('total_amount') + contribution,
        updated_at=timezone.now(),
    )
    if not updated:
        logger.warning(f'Refused accrual into paid payout {payout.id} ({agent_id} {month:%Y-%m})')
        raise InvalidStateError(
            'Payout for this month has already been paid',
            details={'payout_id': str(payout.id), 'month': f'{month:%Y-%m}'},
        )
    payout.refresh_from_db()

    logger.info(
        f'Accrued {contribution} at {payout.commission_rate}% to payout {payout.id} '
        f'({agent_id} {month:%Y-%m}, new={created}, approved={payout.approved_leads})'
    )
    return payout


@storage_guard
@transaction.atomic
def mark_payout_paid(payout_id: UUID, caller) -> Payout:
    """
    Move a payout from pending to paid.

    Raises:
        ForbiddenError: If caller is not an admin
        NotFoundError: If the payout does not exist
        InvalidStateError: If the payout is already paid
    """
    require_operation('mark_payout_paid', caller)

    payout = Payout.objects.select_for_update().filter(id=payout_id).first()
    if payout is None:
        raise NotFoundError('Payout not found', details={'payout_id': str(payout_id)})

    if payout.status == PayoutStatus.PAID:
        raise InvalidStateError(
            'Payout is already paid',
            details={'payout_id': str(payout_id), 'paid_at': payout.paid_at.isoformat() if payout.paid_at else None},
        )

    payout.status = PayoutStatus.PAID
    payout.paid_at = timezone.now()
    payout.save(update_fields=['status', 'paid_at', 'updated_at'])

    logger.info(f'Payout {payout.id} marked paid ({payout.total_amount}) by {caller.id}')
    return payout
