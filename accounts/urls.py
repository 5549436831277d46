# accounts/urls.py
from django.urls import path
from .views import ForgotPasswordView, ResetPasswordView

urlpatterns = [
    path("password/forgot/", ForgotPasswordView.as_view(), name="password-forgot"),
    path("password/reset/", ResetPasswordView.as_view(), name="password-reset"),
]
