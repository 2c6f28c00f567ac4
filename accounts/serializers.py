from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from django.contrib.auth import get_user_model
from rest_framework import serializers
from django.conf import settings

User = get_user_model()

INVALID_CREDENTIALS = "No active account found with the given credentials"


class LoginSerializer(TokenObtainPairSerializer):
    """
    Custom JWT serializer that logs in with email and password.

    Unknown email and wrong password share one error message. The
    verification check only runs once the credentials are correct.
    """

    def validate(self, attrs):
        email = (attrs.get("email") or "").strip().lower()
        password = attrs.get("password")

        if not email or not password:
            raise serializers.ValidationError('Must include "email" and "password".')

        # 1. Check credentials
        user = User.objects.filter(email=email).first()
        if user is None or not user.check_password(password):
            raise serializers.ValidationError({"detail": INVALID_CREDENTIALS})

        # 2. Check verification (if enforced)
        if getattr(settings, "ENFORCE_EMAIL_VERIFICATION", False):
            if not user.is_verified:
                raise serializers.ValidationError(
                    {"detail": "Email address is not verified."}
                )

        attrs["email"] = email
        return super().validate(attrs)

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)

        # Add custom claims
        token["name"] = user.name
        token["role"] = user.role
        return token


class RegisterSerializer(serializers.Serializer):
    """Request serializer for patient / doctor self-registration."""

    email = serializers.EmailField()
    name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    password = serializers.CharField(write_only=True, min_length=8)
    role = serializers.ChoiceField(choices=["PATIENT", "DOCTOR"], default="PATIENT")

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email=value).exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return value


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "email", "name", "phone", "role", "is_verified"]
        read_only_fields = fields
