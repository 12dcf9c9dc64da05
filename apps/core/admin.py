"""
Django Admin Configuration for the Referral Backend

Provides an admin interface for viewing data. Status, rate and payout
changes go through the services, so those fields are read-only here.
"""
from django.contrib import admin

from .models import Lead, Payout, Principal


@admin.register(Principal)
class PrincipalAdmin(admin.ModelAdmin):
    """Admin interface for principals."""
    list_display = ['email', 'name', 'role', 'agent_code', 'parent', 'is_approved', 'is_active', 'commission_rate']
    list_filter = ['role', 'is_approved', 'is_active']
    search_fields = ['email', 'name', 'agent_code']
    readonly_fields = ['id', 'agent_code', 'commission_rate', 'created_at', 'updated_at']
    ordering = ['-created_at']

    fieldsets = (
        ('Identity', {
            'fields': ('id', 'name', 'email', 'phone', 'address')
        }),
        ('Hierarchy', {
            'fields': ('role', 'parent', 'agent_code', 'commission_rate')
        }),
        ('Status', {
            'fields': ('is_approved', 'is_active')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    """Admin interface for leads."""
    list_display = ['customer_name', 'investment_type', 'investment_amount', 'status', 'agent', 'sub_agent', 'created_at']
    list_filter = ['status', 'investment_type']
    search_fields = ['customer_name', 'customer_email', 'agent__agent_code']
    readonly_fields = ['id', 'status', 'decided_by', 'decided_at', 'created_at', 'updated_at']
    raw_id_fields = ['agent', 'sub_agent']
    ordering = ['-created_at']


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    """Admin interface for monthly payouts."""
    list_display = ['agent', 'month', 'total_leads', 'approved_leads', 'total_amount', 'commission_rate', 'status']
    list_filter = ['status', 'month']
    search_fields = ['agent__name', 'agent__agent_code']
    readonly_fields = [
        'id', 'agent', 'month', 'total_leads', 'approved_leads', 'total_amount',
        'commission_rate', 'status', 'paid_at', 'created_at', 'updated_at',
    ]
    ordering = ['-month']
