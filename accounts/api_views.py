import logging

from django.contrib.auth import get_user_model
from rest_framework import status, permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import LoginSerializer, RegisterSerializer, UserSerializer
from .email_utils import send_verification_email, verify_email_token
from .services import register_user

logger = logging.getLogger(__name__)

User = get_user_model()


class MyTokenObtainPairView(TokenObtainPairView):
    serializer_class = LoginSerializer


class RegisterAPIView(APIView):
    """
    POST /api/accounts/register/

    Request body:
        {"email": "...", "name": "...", "password": "...", "role": "PATIENT" | "DOCTOR"}
    """

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        user = register_user(**serializer.validated_data)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class MeAPIView(APIView):
    """GET /api/accounts/me/ returns the authenticated user."""

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class LogoutAPIView(APIView):
    """
    API View to handle user logout by blacklisting the refresh token.
    Always answers 200 so logout stays idempotent.
    """

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        refresh_token = request.data.get("refresh_token")
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError:
                # Invalid, expired or already blacklisted: already logged out
                pass

        return Response(
            {"detail": "Successfully logged out."}, status=status.HTTP_200_OK
        )


class SendVerificationEmailAPIView(APIView):
    """POST /api/accounts/verify-email/ sends a verification link to the user."""

    def post(self, request):
        if request.user.is_verified:
            return Response(
                {"detail": "Email is already verified."}, status=status.HTTP_400_BAD_REQUEST
            )

        sent, message = send_verification_email(request.user, request)
        if not sent:
            return Response({"detail": message}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({"detail": message}, status=status.HTTP_200_OK)


class VerifyEmailAPIView(APIView):
    """GET /api/accounts/verify-email/<token>/"""

    permission_classes = [permissions.AllowAny]

    def get(self, request, token):
        valid, data, message = verify_email_token(token)
        if not valid:
            return Response({"detail": message}, status=status.HTTP_400_BAD_REQUEST)

        updated = User.objects.filter(id=data["user_id"], email=data["email"]).update(
            is_verified=True
        )
        if not updated:
            return Response({"detail": "Invalid verification link."}, status=status.HTTP_400_BAD_REQUEST)

        logger.info("[ACCOUNTS] Email verified user_id=%s", data["user_id"])
        return Response({"detail": message}, status=status.HTTP_200_OK)
