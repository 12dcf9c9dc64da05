"""
Core Models for the Referral Backend

Principal, Lead and Payout. Each table is written by exactly one app:
Principal by apps.agents, Lead by apps.leads, Payout by apps.payouts.
Cross-references are plain foreign keys, so editing a Principal never
rewrites historical leads or payouts.
"""
import uuid
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q


class Role(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    AGENT = 'agent', 'Agent'
    SUB_AGENT = 'sub-agent', 'Sub-agent'
    USER = 'user', 'User'


AGENT_ROLES = (Role.AGENT, Role.SUB_AGENT)


class Principal(models.Model):
    """
    Any registered actor: admin, agent, sub-agent or user.
    Maps to: principals

    The hierarchy is two levels deep. A sub-agent always has an agent as
    parent; nobody else has a parent.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4)
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=255, unique=True)
    phone = models.CharField(max_length=50)
    address = models.TextField()
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER)
    parent = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='sub_agents'
    )
    is_approved = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
    )
    agent_code = models.CharField(max_length=20, unique=True, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'principals'
        ordering = ['name']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(role=Role.SUB_AGENT, parent__isnull=False)
                    | (~Q(role=Role.SUB_AGENT) & Q(parent__isnull=True))
                ),
                name='principal_parent_only_for_sub_agents',
            ),
            models.CheckConstraint(
                condition=Q(commission_rate__gte=0) & Q(commission_rate__lte=100),
                name='principal_commission_rate_range',
            ),
        ]

    def __str__(self):
        code = f' [{self.agent_code}]' if self.agent_code else ''
        return f'{self.name} ({self.role}){code}'

    @property
    def is_agent(self) -> bool:
        return self.role == Role.AGENT

    @property
    def is_sub_agent(self) -> bool:
        return self.role == Role.SUB_AGENT

    @property
    def is_agent_like(self) -> bool:
        return self.role in AGENT_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_operational(self) -> bool:
        """Approved and not soft-disabled."""
        return self.is_approved and self.is_active


class InvestmentType(models.TextChoices):
    MUTUAL_FUNDS = 'mutual_funds', 'Mutual funds'
    SIP = 'SIP', 'SIP'
    LUMPSUM = 'Lumpsum', 'Lumpsum'
    BOTH = 'Both', 'Both'


class LeadStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class Lead(models.Model):
    """
    A customer investment submission awaiting an administrator's decision.
    Maps to: leads
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4)
    customer_name = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=50)
    customer_email = models.EmailField(max_length=255)
    customer_address = models.TextField(null=True, blank=True)
    investment_type = models.CharField(max_length=20, choices=InvestmentType.choices)
    investment_amount = models.DecimalField(max_digits=15, decimal_places=2)
    notes = models.TextField(null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=LeadStatus.choices, default=LeadStatus.PENDING
    )
    agent = models.ForeignKey(
        Principal,
        on_delete=models.PROTECT,
        related_name='leads'
    )
    sub_agent = models.ForeignKey(
        Principal,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='submitted_leads'
    )
    decided_by = models.ForeignKey(
        Principal,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='decided_leads'
    )
    decided_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'leads'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['agent', 'status'], name='leads_agent_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(investment_amount__gt=0),
                name='lead_investment_amount_positive',
            ),
        ]

    def __str__(self):
        return f'{self.customer_name} - {self.investment_type} {self.investment_amount} ({self.status})'


class PayoutStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'


class Payout(models.Model):
    """
    Monthly, per-agent accumulator of approved-lead commission.
    Maps to: payouts

    commission_rate is captured when the row is created and every accrual
    in that month uses it.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4)
    agent = models.ForeignKey(
        Principal,
        on_delete=models.PROTECT,
        related_name='payouts'
    )
    month = models.DateField()
    total_leads = models.PositiveIntegerField(default=0)
    approved_leads = models.PositiveIntegerField(default=0)
    total_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'))
    commission_rate = models.DecimalField(max_digits=5, decimal_places=2)
    status = models.CharField(
        max_length=20, choices=PayoutStatus.choices, default=PayoutStatus.PENDING
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payouts'
        ordering = ['month']
        constraints = [
            models.UniqueConstraint(fields=['agent', 'month'], name='payout_unique_agent_month'),
            models.CheckConstraint(
                condition=Q(approved_leads__lte=models.F('total_leads')),
                name='payout_approved_within_total',
            ),
        ]

    def __str__(self):
        return f'{self.agent_id} {self.month:%Y-%m}: {self.total_amount} ({self.status})'
