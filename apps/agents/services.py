"""
Agent Services

Business logic for principal registration, approval, activity toggles and
commission rates. This module is the only writer of the principals table.
"""
import logging
from dataclasses import dataclass, fields
from decimal import Decimal
from uuid import UUID

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import IntegerField, Max
from django.db.models.functions import Cast, Substr
from django.utils import timezone

from apps.core.constants import EMAIL_PATTERN, PRINCIPAL_REQUIRED_FIELDS, RATE_MAX, RATE_MIN
from apps.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    OutOfRangeError,
    ValidationError,
)
from apps.core.models import AGENT_ROLES, Principal, Role
from apps.core.permissions import require_operation
from apps.core.utils import parse_decimal, quantize_money, storage_guard

logger = logging.getLogger(__name__)


@dataclass
class PrincipalCreateInput:
    """Input data for registering a principal."""
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    role: str | None = None
    parent_agent_code: str | None = None

    @classmethod
    def from_data(cls, data) -> 'PrincipalCreateInput':
        """Build from a request payload, ignoring unknown keys."""
        names = {f.name for f in fields(cls)}
        values = {name: data.get(name) for name in names}
        return cls(**{name: str(value) if value is not None else None for name, value in values.items()})


# =============================================================================
# Agent Codes
# =============================================================================

def generate_agent_code() -> str:
    """
    Derive the next agent code from the highest sequence already issued.

    Uses the numeric maximum rather than a row count so gaps never lead to
    a code being handed out twice.
    """
    prefix = settings.AGENT_CODE_PREFIX
    result = Principal.objects.filter(agent_code__startswith=prefix).aggregate(
        highest=Max(Cast(Substr('agent_code', len(prefix) + 1), IntegerField()))
    )
    sequence = (result['highest'] or 0) + 1
    return f'{prefix}{sequence:0{settings.AGENT_CODE_WIDTH}d}'


def _insert_principal(values: dict, assign_code: bool) -> Principal:
    """
    Insert a principal, retrying agent-code collisions a bounded number of times.

    Raises:
        ConflictError: On duplicate email, or when no free code was found
    """
    attempts = settings.AGENT_CODE_MAX_ATTEMPTS if assign_code else 1

    for attempt in range(1, attempts + 1):
        if assign_code:
            values['agent_code'] = generate_agent_code()
        try:
            with transaction.atomic():
                return Principal.objects.create(**values)
        except IntegrityError as e:
            if Principal.objects.filter(email=values['email']).exists():
                raise ConflictError(
                    'A principal with this email already exists',
                    details={'field': 'email'},
                ) from e
            if not assign_code or not Principal.objects.filter(agent_code=values['agent_code']).exists():
                raise
            logger.warning(
                f'Agent code {values["agent_code"]} taken concurrently '
                f'(attempt {attempt}/{attempts}), retrying'
            )

    raise ConflictError(
        'Could not assign a unique agent code, please retry',
        details={'field': 'agent_code', 'attempts': attempts},
    )


# =============================================================================
# Registration
# =============================================================================

def _validate_registration(data: PrincipalCreateInput) -> None:
    missing = [name for name in PRINCIPAL_REQUIRED_FIELDS if not (getattr(data, name) or '').strip()]
    if missing:
        raise ValidationError(
            f'Missing required fields: {", ".join(missing)}',
            details={'missing': missing},
        )

    if not EMAIL_PATTERN.match(data.email.strip()):
        raise ValidationError('Please enter a valid email', details={'field': 'email'})

    if data.role not in Role.values:
        raise ValidationError(
            f'Invalid role: {data.role}',
            details={'field': 'role', 'allowed': Role.values},
        )


def _resolve_sub_agent_parent(data: PrincipalCreateInput, caller) -> Principal:
    """
    Find the agent a new sub-agent will sit under.

    An agent creating a sub-agent is the parent; otherwise the registration
    must name the parent by agent code.
    """
    if caller is not None and caller.role == Role.AGENT:
        parent = Principal.objects.filter(id=caller.id).first()
        if parent is None or not parent.is_operational:
            raise ForbiddenError('Unauthorized to create sub-agents')
        return parent

    code = (data.parent_agent_code or '').strip().upper()
    if not code:
        raise ValidationError(
            'parent_agent_code is required for sub-agents',
            details={'field': 'parent_agent_code'},
        )

    parent = Principal.objects.filter(
        agent_code=code, role=Role.AGENT, is_approved=True, is_active=True
    ).first()
    if parent is None:
        raise NotFoundError(
            'No approved agent found with this code',
            details={'parent_agent_code': code},
        )
    return parent


@storage_guard
@transaction.atomic
def register_principal(data: PrincipalCreateInput, caller=None) -> Principal:
    """
    Register a new principal.

    - sub-agent: parent resolved from the calling agent or parent_agent_code;
      rate defaults to half the parent's; auto-approved
    - agent: pending admin approval, default commission rate
    - user: auto-approved
    - admin: only an admin may create one

    Args:
        data: Registration input
        caller: The authenticated caller, or None for public registration

    Returns:
        The created Principal

    Raises:
        ValidationError, NotFoundError, ConflictError, ForbiddenError
    """
    _validate_registration(data)

    role = data.role
    email = data.email.strip().lower()

    if role == Role.ADMIN:
        require_operation('register_admin', caller)

    if Principal.objects.filter(email=email).exists():
        raise ConflictError('A principal with this email already exists', details={'field': 'email'})

    values = {
        'name': data.name.strip(),
        'email': email,
        'phone': data.phone.strip(),
        'address': data.address.strip(),
        'role': role,
        'commission_rate': Decimal('0.00'),
        'is_approved': role in (Role.USER, Role.ADMIN),
    }

    if role == Role.SUB_AGENT:
        parent = _resolve_sub_agent_parent(data, caller)
        values['parent'] = parent
        values['commission_rate'] = quantize_money(parent.commission_rate * settings.SUB_AGENT_RATE_FACTOR)
        values['is_approved'] = True
    elif role == Role.AGENT:
        values['commission_rate'] = settings.DEFAULT_AGENT_COMMISSION_RATE

    principal = _insert_principal(values, assign_code=role in AGENT_ROLES)

    logger.info(
        f'Registered {principal.role} {principal.id} code={principal.agent_code} '
        f'parent={principal.parent_id} rate={principal.commission_rate}'
    )
    return principal


def create_sub_agent(data: PrincipalCreateInput, caller) -> Principal:
    """Register a sub-agent under the calling agent."""
    require_operation('create_sub_agent', caller)
    data.role = Role.SUB_AGENT
    data.parent_agent_code = None
    return register_principal(data, caller=caller)


# =============================================================================
# Approval & Activity
# =============================================================================

def _get_agent_like_for_update(principal_id: UUID) -> Principal:
    principal = Principal.objects.select_for_update().filter(id=principal_id).first()
    if principal is None:
        raise NotFoundError(f'No principal found with id {principal_id}')
    if principal.role not in AGENT_ROLES:
        raise InvalidStateError(
            'Principal is not an agent',
            details={'principal_id': str(principal_id), 'role': principal.role},
        )
    return principal


@storage_guard
@transaction.atomic
def approve_principal(principal_id: UUID, approved: bool, caller) -> Principal:
    """
    Approve or reject an agent or sub-agent.

    Raises:
        ForbiddenError: If caller is not an admin
        NotFoundError: If the principal does not exist
        InvalidStateError: If the principal is not an agent or sub-agent
    """
    require_operation('approve_principal', caller)

    principal = _get_agent_like_for_update(principal_id)
    principal.is_approved = bool(approved)
    principal.save(update_fields=['is_approved', 'updated_at'])

    logger.info(f'Principal {principal.id} approval set to {principal.is_approved} by {caller.id}')
    return principal


@storage_guard
@transaction.atomic
def set_principal_active(principal_id: UUID, active: bool, caller) -> Principal:
    """
    Soft enable or disable an agent or sub-agent.

    Admins may toggle anyone; an agent only its own sub-agents.
    """
    require_operation('set_principal_active', caller)

    principal = _get_agent_like_for_update(principal_id)
    _check_manages(caller, principal)

    principal.is_active = bool(active)
    principal.save(update_fields=['is_active', 'updated_at'])

    logger.info(f'Principal {principal.id} active set to {principal.is_active} by {caller.id}')
    return principal


def _check_manages(caller, principal: Principal) -> None:
    """
    Agents manage only their own sub-agents. Anything else is reported as
    not found so other agents' teams are not disclosed.
    """
    if caller.role == Role.ADMIN:
        return
    if principal.role != Role.SUB_AGENT or principal.parent_id != caller.id:
        raise NotFoundError('Sub-agent not found')


# =============================================================================
# Commission Rates
# =============================================================================

@storage_guard
@transaction.atomic
def set_commission_rate(principal_id: UUID, new_rate, caller) -> Principal:
    """
    Set a principal's commission rate (percent).

    Setting an agent's rate overwrites every current sub-agent's rate with
    half the new value. Existing payout rows keep the rate they were created
    with.

    Raises:
        ForbiddenError: If the caller's role may not edit rates
        OutOfRangeError: If new_rate is outside [0, 100]
        NotFoundError: If the principal does not exist or is not managed by the caller
        InvalidStateError: If the principal is not an agent or sub-agent
    """
    require_operation('set_commission_rate', caller)

    rate = parse_decimal(new_rate, 'commission_rate')
    if rate < RATE_MIN or rate > RATE_MAX:
        raise OutOfRangeError('commission_rate', rate, RATE_MIN, RATE_MAX)
    rate = quantize_money(rate)

    principal = _get_agent_like_for_update(principal_id)
    _check_manages(caller, principal)

    principal.commission_rate = rate
    principal.save(update_fields=['commission_rate', 'updated_at'])

    if principal.role == Role.AGENT:
        sub_rate = quantize_money(rate * settings.SUB_AGENT_RATE_FACTOR)
        cascaded = Principal.objects.filter(parent_id=principal.id, role=Role.SUB_AGENT).update(
            commission_rate=sub_rate,
            updated_at=timezone.now(),
        )
        logger.info(f'Cascaded rate {sub_rate} to {cascaded} sub-agents of {principal.id}')

    logger.info(f'Commission rate of {principal.id} set to {rate} by {caller.id}')
    return principal
