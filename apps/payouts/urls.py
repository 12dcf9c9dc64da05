"""
Payouts URL Configuration

All routes are relative to /api/payouts/
"""
from django.urls import path

from .views import AllPayoutsView, MarkPayoutPaidView, MyPayoutsView, PayoutStatisticsView

urlpatterns = [
    path('all', AllPayoutsView.as_view(), name='payouts_all'),
    path('my-payouts', MyPayoutsView.as_view(), name='payouts_mine'),
    path('statistics', PayoutStatisticsView.as_view(), name='payouts_statistics'),
    path('<uuid:payout_id>/paid', MarkPayoutPaidView.as_view(), name='payout_mark_paid'),
]
