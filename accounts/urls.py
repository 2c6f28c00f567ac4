from django.urls import path
from . import api_views
from rest_framework_simplejwt.views import TokenRefreshView

app_name = "accounts"

urlpatterns = [
    path("register/", api_views.RegisterAPIView.as_view(), name="api_register"),
    path("login/", api_views.MyTokenObtainPairView.as_view(), name="api_login"),
    path("logout/", api_views.LogoutAPIView.as_view(), name="api_logout"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("me/", api_views.MeAPIView.as_view(), name="api_me"),
    path(
        "verify-email/",
        api_views.SendVerificationEmailAPIView.as_view(),
        name="api_send_verification",
    ),
    path(
        "verify-email/<str:token>/",
        api_views.VerifyEmailAPIView.as_view(),
        name="api_verify_email",
    ),
]
