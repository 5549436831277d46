from django.db import models

class StaffRole(models.TextChoices):
    ADMIN = "admin", "System Administrator"
    STAFF = "staff", "Staff"
