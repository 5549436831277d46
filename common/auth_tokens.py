# common/auth_tokens.py
from rest_framework import exceptions, serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from common.roles import StaffRole
from staff.models import StaffProfile


def _profile_claims(user):
    profile = StaffProfile.objects.filter(user=user).first()
    if profile is not None:
        return profile, profile.role, profile.full_name
    role = StaffRole.ADMIN.value if user.is_superuser else None
    return None, role, user.get_full_name()


class StaffTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Accepts email (or username) and password.
    Embeds role + full_name in the resulting tokens.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields[self.username_field].required = False
        self.fields["email"] = serializers.EmailField(required=False, write_only=True)

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        _, role, full_name = _profile_claims(user)
        token["role"] = role
        token["full_name"] = full_name
        return token

    def validate(self, attrs):
        # staff usernames are their lower-cased email
        email = attrs.pop("email", None)
        if email and not attrs.get(self.username_field):
            attrs[self.username_field] = email.strip().lower()
        if not attrs.get(self.username_field):
            raise exceptions.ValidationError({"email": ["This field is required."]})

        # Let SimpleJWT authenticate the user (sets self.user)
        data = super().validate(attrs)

        profile, role, full_name = _profile_claims(self.user)
        if profile is None and not self.user.is_superuser:
            raise exceptions.AuthenticationFailed("This account has no console access")
        if profile is not None and not profile.is_active:
            raise exceptions.AuthenticationFailed("This account has been deactivated")

        data["user"] = {
            "id": self.user.id,
            "email": self.user.email,
            "full_name": full_name,
            "role": role,
        }
        return data
