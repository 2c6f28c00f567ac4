from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework import status

from accounts.email_utils import generate_email_verification_token, verify_email_token
from accounts.services import register_user
from doctors.models import DoctorProfile
from patients.models import PatientProfile

User = get_user_model()


class RegisterUserServiceTest(TestCase):

    def test_patient_gets_patient_profile(self):
        user = register_user(email="Ali@Example.com", name="Ali", password="password123")
        self.assertEqual(user.email, "ali@example.com")
        self.assertEqual(user.role, "PATIENT")
        self.assertTrue(PatientProfile.objects.filter(user=user).exists())
        self.assertFalse(DoctorProfile.objects.filter(user=user).exists())

    def test_doctor_gets_unverified_profile(self):
        user = register_user(
            email="doc@example.com", name="Doc", password="password123", role="DOCTOR"
        )
        self.assertEqual(
            user.doctor_profile.verification_status, DoctorProfile.Verification.UNVERIFIED
        )
        self.assertFalse(PatientProfile.objects.filter(user=user).exists())


class RegisterAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.url = reverse("accounts:api_register")

    def test_register_patient(self):
        response = self.client.post(
            self.url,
            {"email": "new@example.com", "name": "New Patient", "password": "password123"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["role"], "PATIENT")
        self.assertFalse(response.data["is_verified"])
        self.assertNotIn("password", response.data)

    def test_duplicate_email_rejected(self):
        register_user(email="taken@example.com", name="Taken", password="password123")
        response = self.client.post(
            self.url,
            {"email": "TAKEN@example.com", "name": "Again", "password": "password123"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.data)

    def test_admin_role_not_allowed(self):
        response = self.client.post(
            self.url,
            {"email": "x@example.com", "name": "X", "password": "password123", "role": "ADMIN"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class LoginAPITest(TestCase):
    def setUp(self):
        self.user = register_user(email="ali@example.com", name="Ali", password="password123")
        self.client = APIClient()
        self.url = reverse("accounts:api_login")

    def test_login_returns_tokens(self):
        response = self.client.post(
            self.url, {"email": "ali@example.com", "password": "password123"}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)

    def test_wrong_password(self):
        response = self.client.post(
            self.url, {"email": "ali@example.com", "password": "wrong-password"}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_email(self):
        response = self.client.post(
            self.url, {"email": "nobody@example.com", "password": "password123"}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_email_and_wrong_password_look_the_same(self):
        unknown = self.client.post(
            self.url, {"email": "nobody@example.com", "password": "password123"}
        )
        wrong = self.client.post(
            self.url, {"email": "ali@example.com", "password": "wrong-password"}
        )
        self.assertEqual(unknown.status_code, wrong.status_code)
        self.assertEqual(unknown.data, wrong.data)

    @override_settings(ENFORCE_EMAIL_VERIFICATION=True)
    def test_unverified_blocked_when_enforced(self):
        response = self.client.post(
            self.url, {"email": "ali@example.com", "password": "password123"}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("not verified", str(response.data))

    @override_settings(ENFORCE_EMAIL_VERIFICATION=True)
    def test_unverified_with_wrong_password_gets_generic_error(self):
        response = self.client.post(
            self.url, {"email": "ali@example.com", "password": "wrong-password"}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertNotIn("not verified", str(response.data))
        self.assertIn("No active account found", str(response.data))

    def test_me(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get(reverse("accounts:api_me"))
        self.assertEqual(response.data["email"], "ali@example.com")

    def test_me_requires_auth(self):
        response = self.client.get(reverse("accounts:api_me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class LogoutTests(TestCase):
    def setUp(self):
        self.user = register_user(
            email="logout@example.com",
            name="Test User",
            password="password123",
        )
        self.api_client = APIClient()

    def test_api_logout(self):
        """Verify API logout returns success and blacklists the refresh token"""
        response = self.api_client.post(
            reverse("accounts:api_login"),
            {"email": "logout@example.com", "password": "password123"},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        refresh_token = response.data["refresh"]
        access_token = response.data["access"]

        self.api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access_token}")
        logout_response = self.api_client.post(
            reverse("accounts:api_logout"), {"refresh_token": refresh_token}
        )

        self.assertEqual(logout_response.status_code, status.HTTP_200_OK)
        self.assertEqual(logout_response.data["detail"], "Successfully logged out.")

        # Blacklisted token can no longer be refreshed
        refresh_response = self.api_client.post(
            reverse("accounts:token_refresh"), {"refresh": refresh_token}
        )
        self.assertEqual(refresh_response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_api_logout_idempotency_no_token(self):
        """Verify API logout works even without a token provided"""
        logout_response = self.api_client.post(reverse("accounts:api_logout"), {})

        self.assertEqual(logout_response.status_code, status.HTTP_200_OK)
        self.assertEqual(logout_response.data["detail"], "Successfully logged out.")

    def test_api_logout_idempotency_invalid_token(self):
        """Verify API logout works with invalid token"""
        logout_response = self.api_client.post(
            reverse("accounts:api_logout"), {"refresh_token": "invalid_token_string"}
        )

        self.assertEqual(logout_response.status_code, status.HTTP_200_OK)
        self.assertEqual(logout_response.data["detail"], "Successfully logged out.")


class EmailVerificationTest(TestCase):
    def setUp(self):
        self.user = register_user(email="verify@example.com", name="Verify Me", password="password123")
        self.client = APIClient()

    def test_token_round_trip(self):
        token = generate_email_verification_token(self.user)
        valid, data, _ = verify_email_token(token)
        self.assertTrue(valid)
        self.assertEqual(data, {"user_id": self.user.id, "email": "verify@example.com"})

    def test_tampered_token(self):
        token = generate_email_verification_token(self.user)
        valid, data, message = verify_email_token(token + "x")
        self.assertFalse(valid)
        self.assertIsNone(data)
        self.assertEqual(message, "Invalid verification link.")

    def test_verify_endpoint_marks_user_verified(self):
        token = generate_email_verification_token(self.user)
        response = self.client.get(reverse("accounts:api_verify_email", kwargs={"token": token}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_verified)

    def test_token_for_changed_email_rejected(self):
        token = generate_email_verification_token(self.user)
        User.objects.filter(id=self.user.id).update(email="changed@example.com")

        response = self.client.get(reverse("accounts:api_verify_email", kwargs={"token": token}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_verified)

    @override_settings(BREVO_API_KEY="xkeysib-test")
    @patch("accounts.email_utils._get_brevo_api")
    def test_send_verification_email(self, get_api):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(reverse("accounts:api_send_verification"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        sent = get_api.return_value.send_transac_email.call_args.args[0]
        self.assertEqual(sent.to, [{"email": "verify@example.com", "name": "Verify Me"}])
        self.assertIn("/api/accounts/verify-email/", sent.html_content)

    @override_settings(BREVO_API_KEY="")
    def test_send_without_brevo_returns_503(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(reverse("accounts:api_send_verification"))
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_already_verified(self):
        User.objects.filter(id=self.user.id).update(is_verified=True)
        self.user.refresh_from_db()
        self.client.force_authenticate(user=self.user)
        response = self.client.post(reverse("accounts:api_send_verification"))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class CreateSuperAdminCommandTest(TestCase):

    @patch.dict(
        "os.environ",
        {"DJANGO_SUPERUSER_EMAIL": "Root@Example.com", "DJANGO_SUPERUSER_PASSWORD": "password123"},
    )
    def test_creates_admin(self):
        out = StringIO()
        call_command("create_super_admin", stdout=out)

        user = User.objects.get(email="root@example.com")
        self.assertTrue(user.is_superuser)
        self.assertEqual(user.role, "ADMIN")
        self.assertIn("Successfully created", out.getvalue())

    @patch.dict(
        "os.environ",
        {"DJANGO_SUPERUSER_EMAIL": "ali@example.com", "DJANGO_SUPERUSER_PASSWORD": "password123"},
    )
    def test_promotes_existing_user(self):
        register_user(email="ali@example.com", name="Ali", password="password123")

        call_command("create_super_admin", stdout=StringIO())

        user = User.objects.get(email="ali@example.com")
        self.assertTrue(user.is_staff)
        self.assertEqual(user.role, "ADMIN")

    @patch.dict("os.environ", {"DJANGO_SUPERUSER_EMAIL": "", "DJANGO_SUPERUSER_PASSWORD": ""})
    def test_missing_env(self):
        out = StringIO()
        call_command("create_super_admin", stdout=out)
        self.assertIn("Missing", out.getvalue())
        self.assertFalse(User.objects.exists())
