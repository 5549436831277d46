# staff/urls.py
from django.urls import path
from .api import MeView, AdminUsersView, AdminUserDetailView

urlpatterns = [
    path("me", MeView.as_view(), name="staff-me"),
    path("users", AdminUsersView.as_view(), name="staff-users"),
    path("users/<int:pk>", AdminUserDetailView.as_view(), name="staff-user-detail"),
]
