from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIRequestFactory, force_authenticate

from common.roles import StaffRole
from staff.api import AdminUserDetailView, AdminUsersView, MeView
from staff.models import StaffProfile

User = get_user_model()


class StaffApiTests(TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.admin = User.objects.create_user(username="admin@wear.test", email="admin@wear.test", password="secret123")
        self.admin_profile = StaffProfile.objects.create(user=self.admin, full_name="Ada Admin", role=StaffRole.ADMIN)
        self.staff = User.objects.create_user(username="staff@wear.test", email="staff@wear.test", password="secret123")
        self.staff_profile = StaffProfile.objects.create(
            user=self.staff, full_name="Sam Staff", phone="0917", role=StaffRole.STAFF,
        )

    def _call(self, method, view, data=None, user=None, **kwargs):
        if method == "get":
            request = self.factory.get("/api/v1/staff/", data or {})
        else:
            request = getattr(self.factory, method)("/api/v1/staff/", data or {}, format="json")
        force_authenticate(request, user=user or self.admin)
        return view.as_view()(request, **kwargs)

    def test_me(self):
        response = self._call("get", MeView, user=self.staff)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["email"], "staff@wear.test")
        self.assertEqual(response.data["greeting_name"], "Sam Staff")
        self.assertEqual(response.data["role_label"], "Staff")

    def test_me_superuser_without_profile(self):
        root = User.objects.create_superuser(username="root", email="root@wear.test", password="secret123")
        response = self._call("get", MeView, user=root)

        self.assertEqual(response.data["role"], StaffRole.ADMIN)
        self.assertEqual(response.data["greeting_name"], "User")

    def test_list_and_search(self):
        response = self._call("get", AdminUsersView)
        self.assertEqual([r["full_name"] for r in response.data], ["Ada Admin", "Sam Staff"])

        response = self._call("get", AdminUsersView, {"q": "0917"})
        self.assertEqual([r["full_name"] for r in response.data], ["Sam Staff"])

    def test_staff_role_cannot_manage_accounts(self):
        response = self._call("get", AdminUsersView, user=self.staff)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_account(self):
        response = self._call("post", AdminUsersView, {
            "email": "New.Hire@Wear.test",
            "password": "secret123",
            "full_name": "Nia Hire",
        })

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["email"], "new.hire@wear.test")
        self.assertEqual(response.data["role"], StaffRole.STAFF)
        user = User.objects.get(email="new.hire@wear.test")
        self.assertEqual(user.username, "new.hire@wear.test")
        self.assertTrue(user.check_password("secret123"))

    def test_create_duplicate_email(self):
        response = self._call("post", AdminUsersView, {
            "email": "STAFF@wear.test",
            "password": "secret123",
            "full_name": "Dup",
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["email"], ["An account with this email already exists."])

    def test_create_short_password(self):
        response = self._call("post", AdminUsersView, {
            "email": "short@wear.test",
            "password": "123",
            "full_name": "Short",
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["password"], ["Password must be at least 6 characters."])

    def test_update_role_and_password(self):
        response = self._call(
            "patch", AdminUserDetailView, {"role": StaffRole.ADMIN, "password": "newpass1"}, pk=self.staff_profile.pk,
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.staff_profile.refresh_from_db()
        self.staff.refresh_from_db()
        self.assertEqual(self.staff_profile.role, StaffRole.ADMIN)
        self.assertTrue(self.staff.check_password("newpass1"))

    def test_deactivate(self):
        response = self._call("delete", AdminUserDetailView, pk=self.staff_profile.pk)

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.staff_profile.refresh_from_db()
        self.staff.refresh_from_db()
        self.assertFalse(self.staff_profile.is_active)
        self.assertFalse(self.staff.is_active)

    def test_cannot_deactivate_self(self):
        response = self._call("delete", AdminUserDetailView, pk=self.admin_profile.pk)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.admin_profile.refresh_from_db()
        self.assertTrue(self.admin_profile.is_active)

    def test_cannot_deactivate_self_through_patch(self):
        response = self._call("patch", AdminUserDetailView, {"is_active": False}, pk=self.admin_profile.pk)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "You cannot deactivate your own account.")
        self.admin_profile.refresh_from_db()
        self.admin.refresh_from_db()
        self.assertTrue(self.admin_profile.is_active)
        self.assertTrue(self.admin.is_active)

    def test_cannot_change_own_role(self):
        response = self._call("patch", AdminUserDetailView, {"role": StaffRole.STAFF}, pk=self.admin_profile.pk)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "You cannot change your own role.")
        self.admin_profile.refresh_from_db()
        self.assertEqual(self.admin_profile.role, StaffRole.ADMIN)

    def test_can_edit_own_name(self):
        response = self._call(
            "patch", AdminUserDetailView, {"full_name": "Ada Lovelace", "role": StaffRole.ADMIN}, pk=self.admin_profile.pk,
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["full_name"], "Ada Lovelace")
