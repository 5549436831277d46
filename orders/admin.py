# orders/admin.py
from django.contrib import admin
from .models import Order, OrderItem, AuditLog


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "customer_name", "payment_method", "payment_status", "delivery_status", "total_amount", "created_at")
    list_filter = ("payment_status", "delivery_status", "created_at")
    search_fields = ("id", "customer_name", "payment_method")
    date_hierarchy = "created_at"
    inlines = [OrderItemInline]


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("order", "action", "user", "created_at")
    list_filter = ("action", "created_at")
    readonly_fields = ("order", "action", "user", "metadata", "created_at")
