# accounts/serializers.py
from rest_framework import serializers

PASSWORD_MIN_LENGTH = 6


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    password_confirm = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError({"password": "Passwords do not match."})
        if len(attrs["password"]) < PASSWORD_MIN_LENGTH:
            raise serializers.ValidationError({"password": "Password must be at least 6 characters."})
        return attrs
