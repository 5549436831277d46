# orders/urls.py
from django.urls import path
from .views import (
    OrderListView, OrderStatusOptionsView, OrderDetailView, OrderHistoryView, OrderExportView,
)


app_name = "orders"

urlpatterns = [
    path("", OrderListView.as_view(), name="order-list"),
    path("status-options", OrderStatusOptionsView.as_view(), name="status-options"),
    path("export", OrderExportView.as_view(), name="order-export"),
    path("<int:pk>", OrderDetailView.as_view(), name="order-detail"),
    path("<int:pk>/history", OrderHistoryView.as_view(), name="order-history"),
]
