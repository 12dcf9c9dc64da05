"""
Agents API URLs

urlpatterns are relative to /api/agents/; auth_urlpatterns to /api/auth/;
user_urlpatterns to /api/users/
"""
from django.urls import path

from . import views

urlpatterns = [
    path('pending', views.PendingAgentsView.as_view(), name='agents_pending'),
    path('sub-agents', views.SubAgentsView.as_view(), name='agents_sub_agents'),
    path('stats', views.AgentStatsView.as_view(), name='agents_stats'),
    path('<uuid:principal_id>/approve', views.ApproveAgentView.as_view(), name='agent_approve'),
    path('<uuid:principal_id>/commission', views.CommissionRateView.as_view(), name='agent_commission'),
    path('<uuid:principal_id>/status', views.AgentStatusView.as_view(), name='agent_status'),
]

auth_urlpatterns = [
    path('register', views.RegisterView.as_view(), name='auth_register'),
]

user_urlpatterns = [
    path('agents', views.ApprovedAgentsView.as_view(), name='users_agents'),
    path('by-agent-code/<str:code>', views.AgentByCodeView.as_view(), name='users_by_agent_code'),
]
