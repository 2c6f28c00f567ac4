from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework import status
from django.urls import reverse

from accounts.services import register_user
from doctors.models import DoctorProfile
from patients.models import EmergencyContact


class PatientProfileTestMixin:
    def setUp(self):
        self.client = APIClient()
        self.patient_user = register_user(
            email="patient@example.com",
            password="password123",
            name="Test Patient",
            phone="5550001111",
        )
        self.patient_profile = self.patient_user.patient_profile
        self.patient_profile.date_of_birth = "2000-01-01"
        self.patient_profile.gender = "M"
        self.patient_profile.save()

        self.doctor_user = register_user(
            email="doctor@example.com",
            password="password123",
            name="Test Doctor",
            role="DOCTOR",
        )
        self.doctor_profile = self.doctor_user.doctor_profile


class PatientProfileAPITest(PatientProfileTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.url = reverse("patients:api_patient_me")

    def test_get_profile_authenticated_patient(self):
        self.client.force_authenticate(user=self.patient_user)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        # Check CustomUser fields
        self.assertEqual(response.data["name"], "Test Patient")
        self.assertEqual(response.data["phone"], "5550001111")
        self.assertEqual(response.data["email"], "patient@example.com")
        # Check PatientProfile fields
        self.assertEqual(response.data["gender"], "M")
        self.assertEqual(response.data["date_of_birth"], "2000-01-01")
        self.assertEqual(response.data["emergency_contacts"], [])

    def test_get_profile_unauthenticated(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_get_profile_wrong_role(self):
        self.client.force_authenticate(user=self.doctor_user)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_profile_replaces_contacts(self):
        EmergencyContact.objects.create(patient=self.patient_profile, name="Old Contact")
        self.client.force_authenticate(user=self.patient_user)
        response = self.client.put(
            self.url,
            {
                "blood_type": "O+",
                "allergies": "Penicillin",
                "emergency_contacts": [
                    {"name": "Jane Doe", "relationship": "Sister", "phone": "5552223333"},
                ],
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["blood_type"], "O+")
        self.assertEqual(len(response.data["emergency_contacts"]), 1)
        self.assertEqual(response.data["emergency_contacts"][0]["name"], "Jane Doe")

    def test_non_list_contacts_clear_them(self):
        EmergencyContact.objects.create(patient=self.patient_profile, name="Old Contact")
        self.client.force_authenticate(user=self.patient_user)
        response = self.client.put(self.url, {"emergency_contacts": "none"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(self.patient_profile.emergency_contacts.exists())

    def test_update_user_name(self):
        self.client.force_authenticate(user=self.patient_user)
        response = self.client.put(self.url, {"name": "Renamed"}, format="json")
        self.assertEqual(response.data["name"], "Renamed")

    def test_invalid_blood_type(self):
        self.client.force_authenticate(user=self.patient_user)
        response = self.client.put(self.url, {"blood_type": "C+"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class FavoriteDoctorsAPITest(PatientProfileTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.url = reverse("patients:api_patient_favorites")
        self.client.force_authenticate(user=self.patient_user)

    def test_add_and_list_favorite(self):
        response = self.client.post(self.url, {"doctor_id": self.doctor_profile.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["results"]), 1)
        self.assertEqual(response.data["results"][0]["name"], "Test Doctor")

    def test_duplicate_favorite_returns_400(self):
        self.patient_profile.favorite_doctors.add(self.doctor_profile)
        response = self.client.post(self.url, {"doctor_id": self.doctor_profile.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "Doctor already in favorites")

    def test_unknown_doctor_returns_404(self):
        missing = DoctorProfile.objects.order_by("-id").first().id + 1
        response = self.client.post(self.url, {"doctor_id": missing}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
