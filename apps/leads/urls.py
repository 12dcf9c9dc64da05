"""
Leads API URLs

All routes are relative to /api/leads/ (POST /api/leads is mounted in config.urls)
"""
from django.urls import path

from . import views

urlpatterns = [
    path('my-leads', views.MyLeadsView.as_view(), name='leads_mine'),
    path('filter', views.LeadFilterView.as_view(), name='leads_filter'),
    path('<uuid:lead_id>', views.LeadDetailView.as_view(), name='lead_detail'),
    path('<uuid:lead_id>/status', views.LeadStatusView.as_view(), name='lead_status'),
]
