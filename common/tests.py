from datetime import datetime, timezone as dt_timezone

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.test import APIRequestFactory
from rest_framework_simplejwt.tokens import AccessToken

from common.auth_views import StaffTokenObtainPairView
from common.dates import parse_date_range, to_aware_dt
from common.roles import StaffRole
from staff.models import StaffProfile

User = get_user_model()


class StaffTokenTests(TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.user = User.objects.create_user(username="ada@wear.test", email="ada@wear.test", password="secret123")
        self.profile = StaffProfile.objects.create(user=self.user, full_name="Ada Admin", role=StaffRole.ADMIN)

    def _login(self, data):
        request = self.factory.post("/api/v1/auth/token/", data, format="json")
        return StaffTokenObtainPairView.as_view()(request)

    def test_login_by_email_embeds_claims(self):
        response = self._login({"email": "ADA@wear.test", "password": "secret123"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("refresh", response.data)
        access = AccessToken(response.data["access"])
        self.assertEqual(access["role"], StaffRole.ADMIN)
        self.assertEqual(access["full_name"], "Ada Admin")
        self.assertEqual(
            response.data["user"],
            {"id": self.user.id, "email": "ada@wear.test", "full_name": "Ada Admin", "role": StaffRole.ADMIN},
        )

    def test_wrong_password(self):
        response = self._login({"email": "ada@wear.test", "password": "nope"})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_missing_email(self):
        response = self._login({"password": "secret123"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inactive_profile_is_rejected(self):
        self.profile.is_active = False
        self.profile.save()

        response = self._login({"email": "ada@wear.test", "password": "secret123"})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_account_without_profile_is_rejected(self):
        User.objects.create_user(username="shopper@wear.test", email="shopper@wear.test", password="secret123")

        response = self._login({"email": "shopper@wear.test", "password": "secret123"})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class DateRangeTests(SimpleTestCase):
    def test_bare_dates_cover_whole_days(self):
        df, dt_, error = parse_date_range("2024-01-01", "2024-01-31")

        self.assertIsNone(error)
        self.assertEqual(df, datetime(2024, 1, 1, tzinfo=dt_timezone.utc))
        self.assertEqual((dt_.date(), dt_.hour, dt_.minute), (datetime(2024, 1, 31).date(), 23, 59))

    def test_iso_datetime_keeps_offset(self):
        dt = to_aware_dt("2024-01-01T10:00:00+08:00", end_of_day=False)
        self.assertEqual(dt, datetime(2024, 1, 1, 2, tzinfo=dt_timezone.utc))

    def test_empty_values(self):
        self.assertEqual(parse_date_range(None, ""), (None, None, None))

    def test_errors(self):
        self.assertEqual(parse_date_range("garbage", None)[2], "Invalid date_from")
        self.assertEqual(parse_date_range(None, "2024-13-45")[2], "Invalid date_to")
        self.assertEqual(
            parse_date_range("2024-02-02", "2024-02-01")[2],
            "date_from must be before or equal to date_to",
        )
        self.assertEqual(parse_date_range("2023-01-01", "2024-12-31")[2], "Date range cannot exceed 366 days")
        self.assertEqual(
            parse_date_range("2024-01-01", None, require_both=True)[2],
            "Both date_from and date_to must be provided together, or neither",
        )
