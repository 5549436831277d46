# staff/api.py
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsConsoleAdmin
from common.roles import StaffRole
from .models import StaffProfile

logger = logging.getLogger(__name__)

User = get_user_model()

PASSWORD_MIN_LENGTH = 6
PASSWORD_ERRORS = {"min_length": "Password must be at least 6 characters."}

# ---------- SERIALIZERS ----------

class StaffProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source="user.id", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    role_label = serializers.CharField(source="get_role_display", read_only=True)
    greeting_name = serializers.CharField(read_only=True)

    class Meta:
        model = StaffProfile
        fields = (
            "id", "user_id", "email", "full_name", "phone",
            "role", "role_label", "greeting_name", "is_active", "created_at",
        )


class StaffCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=PASSWORD_MIN_LENGTH, error_messages=PASSWORD_ERRORS)
    full_name = serializers.CharField(max_length=150)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=StaffRole.choices, default=StaffRole.STAFF)

    def validate_email(self, val):
        val = val.strip().lower()
        if User.objects.filter(Q(username__iexact=val) | Q(email__iexact=val)).exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return val

    def validate_full_name(self, val):
        val = val.strip()
        if not val:
            raise serializers.ValidationError("Full name is required.")
        return val


class StaffUpdateSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=150, required=False)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=StaffRole.choices, required=False)
    is_active = serializers.BooleanField(required=False)
    password = serializers.CharField(write_only=True, required=False, min_length=PASSWORD_MIN_LENGTH, error_messages=PASSWORD_ERRORS)

# ---------- VIEWS ----------

class MeView(APIView):
    """
    GET /api/v1/staff/me
    Profile of the signed-in account (used for the greeting and role badge).
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        profile = StaffProfile.objects.select_related("user").filter(user=request.user).first()
        if profile is None:
            # superusers created from the shell may have no profile yet
            return Response({
                "id": None,
                "user_id": request.user.id,
                "email": request.user.email,
                "full_name": request.user.get_full_name(),
                "phone": "",
                "role": StaffRole.ADMIN if request.user.is_superuser else None,
                "role_label": StaffRole.ADMIN.label if request.user.is_superuser else None,
                "greeting_name": request.user.get_full_name() or "User",
                "is_active": request.user.is_active,
                "created_at": None,
            })
        return Response(StaffProfileSerializer(profile).data)


class AdminUsersView(APIView):
    permission_classes = [IsAuthenticated, IsConsoleAdmin]

    def get(self, request):
        q = (request.GET.get("q") or "").strip()
        qs = StaffProfile.objects.select_related("user")
        if q:
            qs = qs.filter(
                Q(full_name__icontains=q) | Q(user__email__icontains=q) | Q(phone__icontains=q)
            )
        return Response(StaffProfileSerializer(qs.order_by("full_name", "id"), many=True).data)

    @transaction.atomic
    def post(self, request):
        ser = StaffCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        user = User.objects.create_user(
            username=data["email"],
            email=data["email"],
            password=data["password"],
        )
        profile = StaffProfile.objects.create(
            user=user,
            full_name=data["full_name"],
            phone=data.get("phone") or "",
            role=data["role"],
        )
        logger.info("Staff account %s created by user %s with role %s", user.email, request.user.pk, profile.role)
        return Response(StaffProfileSerializer(profile).data, status=status.HTTP_201_CREATED)


class AdminUserDetailView(APIView):
    permission_classes = [IsAuthenticated, IsConsoleAdmin]

    @transaction.atomic
    def patch(self, request, pk):
        profile = get_object_or_404(StaffProfile.objects.select_related("user"), pk=pk)
        ser = StaffUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        if profile.user_id == request.user.id:
            if data.get("is_active") is False:
                return Response({"error": "You cannot deactivate your own account."}, status=status.HTTP_400_BAD_REQUEST)
            if "role" in data and data["role"] != profile.role:
                return Response({"error": "You cannot change your own role."}, status=status.HTTP_400_BAD_REQUEST)

        for f in ("full_name", "phone", "role", "is_active"):
            if f in data:
                setattr(profile, f, data[f])
        profile.save()

        user = profile.user
        if data.get("password"):
            user.set_password(data["password"])
        if "is_active" in data:
            user.is_active = data["is_active"]
        user.save()

        return Response(StaffProfileSerializer(profile).data)

    @transaction.atomic
    def delete(self, request, pk):
        profile = get_object_or_404(StaffProfile.objects.select_related("user"), pk=pk)
        if profile.user_id == request.user.id:
            return Response({"error": "You cannot deactivate your own account."}, status=status.HTTP_400_BAD_REQUEST)
        profile.is_active = False
        profile.save(update_fields=["is_active", "updated_at"])
        profile.user.is_active = False
        profile.user.save(update_fields=["is_active"])
        logger.info("Staff account %s deactivated by user %s", profile.user.email, request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
