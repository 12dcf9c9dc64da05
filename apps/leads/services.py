"""
Lead Services

Business logic for submitting leads and for the admin approval decision.
This module is the only writer of the leads table.

State machine:
    pending -> approved | rejected
approved and rejected are terminal.
"""
import logging
from dataclasses import dataclass, fields
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.constants import EMAIL_PATTERN, LEAD_REQUIRED_FIELDS, MAX_AMOUNT
from apps.core.exceptions import (
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from apps.core.hierarchy import get_top_level_agent
from apps.core.models import InvestmentType, Lead, LeadStatus, Principal, Role
from apps.core.permissions import require_operation
from apps.core.utils import parse_decimal, quantize_money, storage_guard
from apps.payouts.services import accrue_payout

logger = logging.getLogger(__name__)


LEAD_TRANSITIONS: dict[str, frozenset[str]] = {
    LeadStatus.PENDING: frozenset({LeadStatus.APPROVED, LeadStatus.REJECTED}),
    LeadStatus.APPROVED: frozenset(),
    LeadStatus.REJECTED: frozenset(),
}

# Values accepted for SUB_AGENT_LEAD_CREDIT
CREDIT_PARENT = 'parent'
CREDIT_SELF = 'self'


@dataclass
class LeadCreateInput:
    """Input data for submitting a lead."""
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_email: str | None = None
    customer_address: str | None = None
    investment_type: str | None = None
    investment_amount: object = None
    notes: str | None = None

    @classmethod
    def from_data(cls, data) -> 'LeadCreateInput':
        """Build from a request payload, ignoring unknown keys."""
        return cls(**{f.name: data.get(f.name) for f in fields(cls)})


def can_transition(current: str, requested: str) -> bool:
    """Check whether a lead may move from current to requested."""
    return requested in LEAD_TRANSITIONS.get(current, frozenset())


# =============================================================================
# Submission
# =============================================================================

def _validate_lead(data: LeadCreateInput):
    missing = [
        name for name in LEAD_REQUIRED_FIELDS
        if getattr(data, name) is None or str(getattr(data, name)).strip() == ''
    ]
    if missing:
        raise ValidationError(
            f'Missing required fields: {", ".join(missing)}',
            details={'missing': missing},
        )

    if not EMAIL_PATTERN.match(str(data.customer_email).strip()):
        raise ValidationError('Please enter a valid email', details={'field': 'customer_email'})

    if data.investment_type not in InvestmentType.values:
        raise ValidationError(
            f'Invalid investment type: {data.investment_type}',
            details={'field': 'investment_type', 'allowed': InvestmentType.values},
        )

    amount = parse_decimal(data.investment_amount, 'investment_amount')
    if amount <= 0:
        raise ValidationError(
            'investment_amount must be greater than zero',
            details={'field': 'investment_amount'},
        )
    amount = quantize_money(amount)
    if amount > MAX_AMOUNT:
        raise ValidationError(
            'investment_amount is too large',
            details={'field': 'investment_amount', 'maximum': str(MAX_AMOUNT)},
        )
    return amount


def _resolve_credited_agent(submitter: Principal) -> tuple[Principal, Principal | None]:
    """
    Decide which agent a lead is credited to.

    Returns:
        (agent, sub_agent) where sub_agent is the submitting sub-agent when
        credit goes to its parent, else None
    """
    if submitter.role == Role.SUB_AGENT and settings.SUB_AGENT_LEAD_CREDIT == CREDIT_PARENT:
        parent = get_top_level_agent(submitter)
        if parent is None or not parent.is_operational:
            raise InvalidStateError(
                'Parent agent is not approved or inactive',
                details={'parent_id': str(submitter.parent_id) if submitter.parent_id else None},
            )
        return parent, submitter
    return submitter, None


@storage_guard
@transaction.atomic
def create_lead(data: LeadCreateInput, submitter) -> Lead:
    """
    Submit a new lead as pending.

    Args:
        data: Lead input
        submitter: The authenticated agent or sub-agent

    Returns:
        The created Lead

    Raises:
        ForbiddenError: If the submitter is not an approved, active agent or sub-agent
        ValidationError: On missing or malformed fields
        InvalidStateError: If the credited parent agent is not operational
    """
    require_operation('create_lead', submitter)

    principal = Principal.objects.select_related('parent').filter(id=submitter.id).first()
    if principal is None or not principal.is_operational:
        raise ForbiddenError('Only approved, active agents may submit leads')

    amount = _validate_lead(data)
    agent, sub_agent = _resolve_credited_agent(principal)

    lead = Lead.objects.create(
        customer_name=str(data.customer_name).strip(),
        customer_phone=str(data.customer_phone).strip(),
        customer_email=str(data.customer_email).strip().lower(),
        customer_address=(data.customer_address or '').strip() or None,
        investment_type=data.investment_type,
        investment_amount=amount,
        notes=(data.notes or '').strip() or None,
        status=LeadStatus.PENDING,
        agent=agent,
        sub_agent=sub_agent,
    )

    logger.info(
        f'Lead {lead.id} submitted by {principal.id} for agent {agent.id} '
        f'({lead.investment_type} {lead.investment_amount})'
    )
    return lead


# =============================================================================
# Decision
# =============================================================================

@storage_guard
@transaction.atomic
def decide_lead(lead_id: UUID, new_status: str, caller) -> Lead:
    """
    Approve or reject a pending lead.

    The lead row is locked for the rest of the transaction. Approval adds the
    lead to its agent's payout for the month the lead was created; if that
    fails the whole decision rolls back.

    Raises:
        ForbiddenError: If caller is not an admin
        ValidationError: If new_status is not approved or rejected
        NotFoundError: If the lead does not exist
        InvalidTransitionError: If the lead is no longer pending
    """
    require_operation('decide_lead', caller)

    if new_status not in (LeadStatus.APPROVED, LeadStatus.REJECTED):
        raise ValidationError(
            f'Invalid status: {new_status}',
            details={'field': 'status', 'allowed': [LeadStatus.APPROVED, LeadStatus.REJECTED]},
        )

    lead = Lead.objects.select_for_update().filter(id=lead_id).first()
    if lead is None:
        raise NotFoundError('Lead not found', details={'lead_id': str(lead_id)})

    if not can_transition(lead.status, new_status):
        raise InvalidTransitionError('lead', lead.status, new_status)

    if new_status == LeadStatus.APPROVED:
        accrue_payout(lead.agent_id, lead.created_at, lead.investment_amount)

    lead.status = new_status
    lead.decided_by_id = caller.id
    lead.decided_at = timezone.now()
    lead.save(update_fields=['status', 'decided_by', 'decided_at', 'updated_at'])

    logger.info(f'Lead {lead.id} {new_status} by {caller.id}')
    return lead
