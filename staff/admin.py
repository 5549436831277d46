from django.contrib import admin
from .models import StaffProfile


@admin.register(StaffProfile)
class StaffProfileAdmin(admin.ModelAdmin):
    list_display = ("full_name", "user", "phone", "role", "is_active", "created_at")
    list_filter = ("role", "is_active")
    search_fields = ("full_name", "user__email", "phone")
