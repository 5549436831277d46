# staff/models.py
from django.conf import settings
from django.db import models
from django.utils import timezone

from common.roles import StaffRole


class StaffProfile(models.Model):
    """
    Console account details kept alongside the Django user.
    The user's username is the lower-cased email so staff sign in by email.
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="staff_profile")
    full_name = models.CharField(max_length=150)
    phone = models.CharField(max_length=32, blank=True, default="")
    role = models.CharField(max_length=16, choices=StaffRole.choices, default=StaffRole.STAFF)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["full_name", "id"]

    def __str__(self):
        return f"{self.full_name} <{self.user.email}>"

    @property
    def email(self):
        return self.user.email

    @property
    def greeting_name(self):
        return self.full_name or "User"
