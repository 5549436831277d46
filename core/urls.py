# core/urls.py
"""
URL configuration for the WEAR admin console backend.
"""

from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from common.auth_views import StaffTokenObtainPairView
from rest_framework_simplejwt.views import TokenBlacklistView, TokenRefreshView, TokenVerifyView


urlpatterns = [
    path("", RedirectView.as_view(url="/admin/", permanent=False)),
    path("admin/", admin.site.urls),

    # Auth
    path("api/v1/auth/token/", StaffTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/v1/auth/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/v1/auth/verify/", TokenVerifyView.as_view(), name="token_verify"),
    path("api/v1/auth/logout/", TokenBlacklistView.as_view(), name="token_blacklist"),
    path("api/v1/auth/", include("accounts.urls")),

    # API & docs
    path("api/v1/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/v1/docs/", SpectacularSwaggerView.as_view(url_name="schema")),
    path("api/v1/staff/", include("staff.urls")),
    path("api/v1/orders/", include("orders.urls", namespace="orders")),
    path("api/v1/analytics/", include("analytics.urls")),
]
