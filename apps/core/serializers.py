"""
Core Serializers for the Referral Backend

DRF serializers for the core models:
- Explicit field definitions (no fields = '__all__')
- Minimal serializers for nested representations
- Money and rates rendered as strings (COERCE_DECIMAL_TO_STRING)
"""
from rest_framework import serializers

from .models import InvestmentType, Lead, LeadStatus, Payout, Principal


# Principal Serializers

class PrincipalMinimalSerializer(serializers.ModelSerializer):
    """Minimal Principal serializer for nested representations."""

    class Meta:
        model = Principal
        fields = ['id', 'name', 'email', 'agent_code']


class PrincipalSerializer(serializers.ModelSerializer):
    """Read serializer for Principal."""
    parent = PrincipalMinimalSerializer(read_only=True)

    class Meta:
        model = Principal
        fields = [
            'id',
            'name',
            'email',
            'phone',
            'address',
            'role',
            'agent_code',
            'parent',
            'is_approved',
            'is_active',
            'commission_rate',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PublicAgentSerializer(serializers.ModelSerializer):
    """Agent details safe to show on public pages."""

    class Meta:
        model = Principal
        fields = ['id', 'name', 'email', 'phone', 'agent_code']


class RegistrationSerializer(serializers.Serializer):
    """Shape check for registration payloads; business rules live in the service."""
    name = serializers.CharField(max_length=255)
    email = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=50)
    address = serializers.CharField()
    role = serializers.CharField(max_length=20)
    parent_agent_code = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True)


class SubAgentCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=50)
    address = serializers.CharField()


class ApprovalSerializer(serializers.Serializer):
    approved = serializers.BooleanField()


class ActiveStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class CommissionRateSerializer(serializers.Serializer):
    # Kept as a raw value; range checks happen in the service
    commission_rate = serializers.JSONField()


# Lead Serializers

class LeadSerializer(serializers.ModelSerializer):
    """Read serializer for Lead."""
    agent = PrincipalMinimalSerializer(read_only=True)
    sub_agent = PrincipalMinimalSerializer(read_only=True, allow_null=True)
    decided_by = PrincipalMinimalSerializer(read_only=True, allow_null=True)

    class Meta:
        model = Lead
        fields = [
            'id',
            'customer_name',
            'customer_phone',
            'customer_email',
            'customer_address',
            'investment_type',
            'investment_amount',
            'notes',
            'status',
            'agent',
            'sub_agent',
            'decided_by',
            'decided_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class LeadSummarySerializer(serializers.ModelSerializer):
    """Compact lead row used on the dashboard."""

    class Meta:
        model = Lead
        fields = [
            'id',
            'customer_name',
            'investment_type',
            'investment_amount',
            'status',
            'created_at',
        ]


class LeadCreateSerializer(serializers.Serializer):
    """Shape check for lead submissions."""
    customer_name = serializers.CharField(max_length=255)
    customer_phone = serializers.CharField(max_length=50)
    customer_email = serializers.CharField(max_length=255)
    customer_address = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    investment_type = serializers.ChoiceField(choices=InvestmentType.choices)
    investment_amount = serializers.JSONField()
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class LeadDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[LeadStatus.APPROVED, LeadStatus.REJECTED])


class LeadFilterSerializer(serializers.Serializer):
    """Query params for the admin lead listing."""
    status = serializers.ChoiceField(choices=LeadStatus.choices, required=False)
    agent_id = serializers.UUIDField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        date_from, date_to = attrs.get('date_from'), attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({'date_from': 'date_from must not be after date_to'})
        return attrs


# Payout Serializers

class PayoutSerializer(serializers.ModelSerializer):
    """Read serializer for Payout."""
    agent = PrincipalMinimalSerializer(read_only=True)
    month = serializers.DateField(format='%Y-%m', read_only=True)

    class Meta:
        model = Payout
        fields = [
            'id',
            'agent',
            'month',
            'total_leads',
            'approved_leads',
            'total_amount',
            'commission_rate',
            'status',
            'paid_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


# Dashboard Serializers

class DashboardStatsSerializer(serializers.Serializer):
    total_aum = serializers.DecimalField(max_digits=15, decimal_places=2)
    pending_aum = serializers.DecimalField(max_digits=15, decimal_places=2)
    active_clients = serializers.IntegerField()
    pending_clients = serializers.IntegerField()
    total_leads = serializers.IntegerField()
    approved_leads = serializers.IntegerField()
    pending_leads = serializers.IntegerField()
    monthly_commission = serializers.DecimalField(max_digits=15, decimal_places=2)
    sip_book = serializers.DecimalField(max_digits=15, decimal_places=2)


class MonthAmountSerializer(serializers.Serializer):
    month = serializers.CharField()
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)


class TypeAmountSerializer(serializers.Serializer):
    type = serializers.CharField()
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)


class GoalProgressSerializer(serializers.Serializer):
    key = serializers.CharField()
    title = serializers.CharField()
    current = serializers.DecimalField(max_digits=15, decimal_places=2)
    target = serializers.DecimalField(max_digits=15, decimal_places=2)
    progress = serializers.DecimalField(max_digits=5, decimal_places=2)


class DashboardSummarySerializer(serializers.Serializer):
    """Output shape of get_dashboard_summary."""
    stats = DashboardStatsSerializer()
    aum_growth = MonthAmountSerializer(many=True)
    portfolio_distribution = TypeAmountSerializer(many=True)
    recent_leads = LeadSummarySerializer(many=True)
    pending_leads_list = LeadSummarySerializer(many=True)
    goal_progress = GoalProgressSerializer(many=True)
