# orders/models.py

from django.conf import settings
from django.db import models
from django.utils import timezone


class DeliveryStatus(models.TextChoices):
    PROCESSING = "Processing", "Processing"
    SHIPPED = "Shipped", "Shipped"
    DELIVERED = "Delivered", "Delivered"
    CANCELLED = "Cancelled", "Cancelled"


class PaymentStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    PAID = "Paid", "Paid"
    FAILED = "Failed", "Failed"
    REFUNDED = "Refunded", "Refunded"


# Dropdown order in the console; the first entry is the display default.
DELIVERY_STATUS_OPTIONS = [c.value for c in DeliveryStatus]
PAYMENT_STATUS_OPTIONS = [c.value for c in PaymentStatus]


class Order(models.Model):
    customer_name = models.CharField(max_length=150, blank=True, null=True)
    payment_method = models.CharField(max_length=64, blank=True, null=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    # nullable: rows imported from the storefront may not carry a status yet
    delivery_status = models.CharField(max_length=16, choices=DeliveryStatus.choices, blank=True, null=True)
    payment_status = models.CharField(max_length=16, choices=PaymentStatus.choices, blank=True, null=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Order #{self.id} - {self.customer_name or 'N/A'} - {self.total_amount}"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product_name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"OrderItem {self.order_id} - {self.product_name} x {self.quantity}"


class AuditLog(models.Model):
    DELIVERY_STATUS_CHANGED = "order.delivery_status_changed"
    PAYMENT_STATUS_CHANGED = "order.payment_status_changed"

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="audit_logs")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="order_audit_logs")
    action = models.CharField(max_length=64)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.action} @ {self.created_at}"

    @classmethod
    def record(cls, *, order, action, user=None, metadata=None):
        return cls.objects.create(
            order=order,
            action=action,
            user=user,
            metadata=metadata or {},
        )
