# orders/serializers.py

from rest_framework import serializers

from .models import AuditLog, DeliveryStatus, Order, OrderItem, PaymentStatus
from .services import ORDER_FIELDS, normalize_order


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "product_name", "quantity"]


class OrderSerializer(serializers.ModelSerializer):
    """List row: statuses are shown with their defaults when unset."""

    class Meta:
        model = Order
        fields = list(ORDER_FIELDS)

    def to_representation(self, instance):
        return normalize_order(super().to_representation(instance))


class OrderDetailSerializer(OrderSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = list(ORDER_FIELDS) + ["updated_at", "items"]


class OrderStatusUpdateSerializer(serializers.Serializer):
    delivery_status = serializers.ChoiceField(choices=DeliveryStatus.choices, required=False)
    payment_status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide delivery_status and/or payment_status.")
        return attrs


class AuditLogSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = ["id", "order", "action", "user", "user_name", "metadata", "created_at"]

    def get_user_name(self, obj):
        u = getattr(obj, "user", None)
        if not u:
            return None
        profile = getattr(u, "staff_profile", None)
        if profile is not None and profile.full_name:
            return profile.full_name
        return u.get_full_name() or u.username
