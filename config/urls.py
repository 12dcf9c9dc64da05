"""
URL Configuration for the Referral Backend API

All routes are prefixed with /api/.
"""
from django.contrib import admin
from django.urls import include, path

from apps.agents.urls import auth_urlpatterns, user_urlpatterns
from apps.core.views import health_check
from apps.leads.views import LeadCreateView

urlpatterns = [
    # Django Admin
    path('admin/', admin.site.urls),

    # Health check endpoint (public)
    path('api/health', health_check, name='health_check'),

    # Registration and public agent lookup
    path('api/auth/', include(auth_urlpatterns)),
    path('api/users/', include(user_urlpatterns)),

    # Agents and sub-agents
    path('api/agents/', include('apps.agents.urls')),

    # Leads
    path('api/leads', LeadCreateView.as_view(), name='lead_create'),
    path('api/leads/', include('apps.leads.urls')),

    # Monthly payouts
    path('api/payouts/', include('apps.payouts.urls')),

    # Dashboard
    path('api/dashboard/', include('apps.dashboard.urls')),
]
