# analytics/urls.py
from django.urls import path
from .views import DashboardSummaryView, DailyRevenueView, DeliveryStatusView

urlpatterns = [
    path("dashboard/summary", DashboardSummaryView.as_view(), name="dashboard-summary"),
    path("dashboard/daily-revenue", DailyRevenueView.as_view(), name="dashboard-daily-revenue"),
    path("dashboard/delivery-status", DeliveryStatusView.as_view(), name="dashboard-delivery-status"),
]
