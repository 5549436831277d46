# accounts/views.py
import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import ForgotPasswordSerializer, ResetPasswordSerializer
from .services import (
    PasswordResetRateLimited,
    request_password_reset,
    reset_password,
    resolve_reset_user,
)

logger = logging.getLogger(__name__)

FORGOT_OK = "Success! Check your email for the password reset link."
RESET_OK = "Password updated successfully! Please sign in again."
RESET_INVALID = "Invalid or expired reset link. Please try the 'Forgot Password' flow again."


class ForgotPasswordView(APIView):
    """
    POST /api/v1/auth/password/forgot/
    Always answers with the same message so account existence is not revealed.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        ser = ForgotPasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            request_password_reset(ser.validated_data["email"], ip=request.META.get("REMOTE_ADDR"))
        except PasswordResetRateLimited as e:
            return Response({"ok": False, "detail": str(e)}, status=status.HTTP_429_TOO_MANY_REQUESTS)
        return Response({"ok": True, "detail": FORGOT_OK})


class ResetPasswordView(APIView):
    """
    POST /api/v1/auth/password/reset/
    Body: uid, token (from the emailed link), password, password_confirm.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        ser = ResetPasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        user = resolve_reset_user(data["uid"], data["token"])
        if user is None:
            logger.info("Rejected password reset with an invalid or expired link")
            return Response({"ok": False, "detail": RESET_INVALID}, status=status.HTTP_400_BAD_REQUEST)

        reset_password(user, data["password"])
        return Response({"ok": True, "detail": RESET_OK})
