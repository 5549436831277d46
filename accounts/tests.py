from urllib.parse import parse_qs, urlparse

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIRequestFactory
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.services import build_reset_link
from accounts.views import ForgotPasswordView, ResetPasswordView
from common.roles import StaffRole
from staff.models import StaffProfile

User = get_user_model()


@override_settings(
    EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend",
    CONSOLE_FRONTEND_URL="https://console.wear.test",
)
class PasswordRecoveryTests(TestCase):
    def setUp(self):
        cache.clear()
        self.factory = APIRequestFactory()
        self.user = User.objects.create_user(
            username="staff@wear.test", email="staff@wear.test", password="oldpass1",
        )
        StaffProfile.objects.create(user=self.user, full_name="Sam Staff", role=StaffRole.STAFF)

    def _post(self, view, data, ip="10.0.0.1"):
        request = self.factory.post("/api/v1/auth/password/", data, format="json", REMOTE_ADDR=ip)
        return view.as_view()(request)

    def _link_params(self):
        params = parse_qs(urlparse(build_reset_link(self.user)).query)
        return params["uid"][0], params["token"][0]

    def test_forgot_sends_reset_link(self):
        response = self._post(ForgotPasswordView, {"email": "Staff@Wear.test"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["ok"])
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, ["staff@wear.test"])
        self.assertIn("https://console.wear.test/update-password?uid=", message.body)
        self.assertIn("&token=", message.body)
        self.assertIn("Hello Sam Staff", message.body)

    def test_unknown_email_gets_same_answer(self):
        response = self._post(ForgotPasswordView, {"email": "nobody@wear.test"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["detail"], "Success! Check your email for the password reset link.")
        self.assertEqual(len(mail.outbox), 0)

    def test_forgot_requires_valid_email(self):
        response = self._post(ForgotPasswordView, {"email": "not-an-email"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_forgot_is_rate_limited(self):
        for _ in range(3):
            self.assertEqual(self._post(ForgotPasswordView, {"email": "staff@wear.test"}).status_code, 200)

        response = self._post(ForgotPasswordView, {"email": "staff@wear.test"})
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertFalse(response.data["ok"])
        self.assertEqual(len(mail.outbox), 3)

    def test_reset_password(self):
        refresh = RefreshToken.for_user(self.user)
        uid, token = self._link_params()

        response = self._post(ResetPasswordView, {
            "uid": uid, "token": token, "password": "newpass1", "password_confirm": "newpass1",
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["detail"], "Password updated successfully! Please sign in again.")
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("newpass1"))
        self.assertTrue(BlacklistedToken.objects.filter(token__jti=refresh["jti"]).exists())

    def test_reset_link_is_single_use(self):
        uid, token = self._link_params()
        body = {"uid": uid, "token": token, "password": "newpass1", "password_confirm": "newpass1"}
        self.assertEqual(self._post(ResetPasswordView, body).status_code, 200)

        response = self._post(ResetPasswordView, {**body, "password": "again123", "password_confirm": "again123"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["ok"])

    def test_reset_mismatch(self):
        uid, token = self._link_params()
        response = self._post(ResetPasswordView, {
            "uid": uid, "token": token, "password": "newpass1", "password_confirm": "newpass2",
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["password"], ["Passwords do not match."])

    def test_reset_short_password(self):
        uid, token = self._link_params()
        response = self._post(ResetPasswordView, {
            "uid": uid, "token": token, "password": "abc", "password_confirm": "abc",
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["password"], ["Password must be at least 6 characters."])

    def test_reset_invalid_token(self):
        uid, _ = self._link_params()
        response = self._post(ResetPasswordView, {
            "uid": uid, "token": "bogus-token", "password": "newpass1", "password_confirm": "newpass1",
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data["detail"],
            "Invalid or expired reset link. Please try the 'Forgot Password' flow again.",
        )
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("oldpass1"))
