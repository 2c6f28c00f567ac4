from datetime import time, timedelta

from django.test import TestCase
from django.utils import timezone
from django.core.exceptions import ValidationError
from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework import status

from accounts.services import register_user
from .models import DoctorProfile, Hospital, TimeSlot
from . import services

User = get_user_model()


class DoctorTestMixin:
    """Two verified doctors with hospitals, one patient."""

    def setUp(self):
        self.tomorrow = timezone.localdate() + timedelta(days=1)

        self.doctor_user = register_user(
            email="ahmad@example.com",
            name="Ahmad Saleh",
            password="testpass123",
            role="DOCTOR",
        )
        self.profile = self.doctor_user.doctor_profile
        services.update_doctor_profile(
            self.profile,
            {
                "gender": "M",
                "country": "USA",
                "state": "California",
                "city": "San Diego",
                "specialities": "Cardiology",
                "languages": ["English", "Arabic"],
                "conditions": "Hypertension",
                "hospitals": [{"name": "Mercy General", "city": "San Diego"}],
            },
        )
        self.profile.verification_status = DoctorProfile.Verification.VERIFIED
        self.profile.save()
        self.hospital = self.profile.hospitals.get(name="Mercy General")

        self.other_user = register_user(
            email="sara@example.com",
            name="Sara Klein",
            password="testpass123",
            role="DOCTOR",
        )
        self.other = self.other_user.doctor_profile
        services.update_doctor_profile(
            self.other,
            {
                "gender": "F",
                "country": "Canada",
                "state": "Ontario",
                "city": "Toronto",
                "specialities": ["Dermatology"],
                "languages": "French",
                "hospitals": [{"name": "Toronto Western"}],
            },
        )
        self.other.verification_status = DoctorProfile.Verification.VERIFIED
        self.other.save()

        self.patient = register_user(
            email="patient@example.com",
            name="Patient Ali",
            password="testpass123",
        )

        self.slot = TimeSlot.objects.create(
            doctor=self.profile,
            hospital=self.hospital,
            date=self.tomorrow,
            start_time=time(9, 0),
            end_time=time(10, 0),
        )
        TimeSlot.objects.create(
            doctor=self.other,
            hospital=self.other.hospitals.get(),
            date=self.tomorrow + timedelta(days=1),
            start_time=time(14, 0),
            end_time=time(15, 0),
        )


class TimeSlotModelTests(DoctorTestMixin, TestCase):

    def test_start_after_end_raises_error(self):
        with self.assertRaises(ValidationError):
            TimeSlot.objects.create(
                doctor=self.profile,
                hospital=self.hospital,
                date=self.tomorrow,
                start_time=time(11, 0),
                end_time=time(10, 0),
            )

    def test_hospital_of_other_doctor_rejected(self):
        with self.assertRaises(ValidationError):
            TimeSlot.objects.create(
                doctor=self.profile,
                hospital=self.other.hospitals.get(),
                date=self.tomorrow,
                start_time=time(11, 0),
                end_time=time(12, 0),
            )

    def test_duplicate_start_rejected(self):
        with self.assertRaises(ValidationError):
            TimeSlot.objects.create(
                doctor=self.profile,
                hospital=self.hospital,
                date=self.tomorrow,
                start_time=time(9, 0),
                end_time=time(9, 30),
            )

    def test_hospital_address(self):
        hospital = Hospital(name="X", street="1 Main St", city="Austin", country="USA")
        self.assertEqual(hospital.address, "1 Main St, Austin, USA")


class SearchServiceTests(DoctorTestMixin, TestCase):

    def _names(self, params):
        return [d.user.name for d in services.search_doctors(params)]

    def test_no_filters_returns_verified_doctors_with_free_slots(self):
        self.assertEqual(self._names({}), ["Ahmad Saleh", "Sara Klein"])

    def test_unverified_doctor_excluded(self):
        self.other.verification_status = DoctorProfile.Verification.PENDING
        self.other.save()
        self.assertEqual(self._names({}), ["Ahmad Saleh"])

    def test_doctor_without_free_slot_excluded(self):
        self.slot.status = TimeSlot.Status.BOOKED
        self.slot.save()
        self.assertEqual(self._names({}), ["Sara Klein"])

    def test_what_matches_specialty_name_or_condition(self):
        self.assertEqual(self._names({"what": "cardio"}), ["Ahmad Saleh"])
        self.assertEqual(self._names({"what": "klein"}), ["Sara Klein"])
        self.assertEqual(self._names({"what": "hypertension"}), ["Ahmad Saleh"])

    def test_where_matches_city_state_or_country(self):
        self.assertEqual(self._names({"where": "toronto"}), ["Sara Klein"])
        self.assertEqual(self._names({"where": "california"}), ["Ahmad Saleh"])

    def test_what_and_where_must_both_match(self):
        self.assertEqual(self._names({"what": "Cardiology", "where": "Canada"}), [])

    def test_language_filter_matches_any(self):
        self.assertEqual(
            self._names({"languages": "Arabic,French"}),
            ["Ahmad Saleh", "Sara Klein"],
        )
        self.assertEqual(self._names({"languages": "French"}), ["Sara Klein"])

    def test_gender_and_hospital_filters(self):
        self.assertEqual(self._names({"gender": "F"}), ["Sara Klein"])
        self.assertEqual(self._names({"hospitals": "mercy"}), ["Ahmad Saleh"])

    def test_availability_filter(self):
        self.other.is_available = False
        self.other.save()
        self.assertEqual(self._names({"availability": "true"}), ["Ahmad Saleh"])
        self.assertEqual(self._names({"availability": "false"}), ["Sara Klein"])

    def test_date_availability_filter(self):
        self.assertEqual(
            self._names({"date_availability": self.tomorrow.isoformat()}),
            ["Ahmad Saleh"],
        )

    def test_bad_date_raises_value_error(self):
        with self.assertRaises(ValueError):
            list(services.search_doctors({"date_availability": "17/10/2026"}))


class OptionsServiceTests(DoctorTestMixin, TestCase):

    def test_distinct_values(self):
        self.assertEqual(services.distinct_values("countries"), ["Canada", "USA"])
        self.assertEqual(services.distinct_values("languages"), ["Arabic", "English", "French"])
        self.assertEqual(
            services.distinct_values("hospitals"), ["Mercy General", "Toronto Western"]
        )

    def test_unknown_field_raises_key_error(self):
        with self.assertRaises(KeyError):
            services.distinct_values("planets")

    def test_what_options(self):
        options = services.what_options()
        self.assertEqual(options["specialities"], ["Cardiology", "Dermatology"])
        self.assertEqual(options["conditions"], ["Hypertension"])
        self.assertIn("Sara Klein", options["doctors"])

    def test_list_verified_doctors_sorted(self):
        self.other.profile_views = 10
        self.other.save()
        doctors = list(services.list_verified_doctors("mostViewed"))
        self.assertEqual(doctors[0], self.other)


class ProfileServiceTests(DoctorTestMixin, TestCase):

    def test_update_replaces_lists(self):
        services.update_doctor_profile(self.profile, {"languages": "Spanish", "name": "Ahmad S."})
        self.profile.refresh_from_db()
        self.assertEqual(
            list(self.profile.languages.values_list("name", flat=True)), ["Spanish"]
        )
        self.assertEqual(self.profile.user.name, "Ahmad S.")

    def test_hospital_with_slots_survives_replacement(self):
        services.update_doctor_profile(self.profile, {"hospitals": [{"name": "Scripps"}]})
        names = set(self.profile.hospitals.values_list("name", flat=True))
        self.assertEqual(names, {"Mercy General", "Scripps"})

    def test_request_verification_twice_when_verified(self):
        with self.assertRaises(ValueError):
            services.request_verification(self.profile)

    def test_request_subscription_invalid_amount(self):
        with self.assertRaises(ValueError):
            services.request_subscription(self.profile, "Gold", "abc")
        with self.assertRaises(ValueError):
            services.request_subscription(self.profile, "Gold", 0)

    def test_request_subscription_pending(self):
        services.request_subscription(self.profile, "Gold", "4999")
        self.profile.refresh_from_db()
        self.assertEqual(self.profile.subscription_status, DoctorProfile.Subscription.PENDING)
        self.assertEqual(self.profile.subscription_amount, 4999)

    def test_delete_booked_slot_refused(self):
        self.slot.status = TimeSlot.Status.BOOKED
        self.slot.save()
        with self.assertRaises(ValueError):
            services.delete_time_slot(self.profile, self.slot.id)

    def test_delete_other_doctors_slot_not_found(self):
        with self.assertRaises(TimeSlot.DoesNotExist):
            services.delete_time_slot(self.other, self.slot.id)


# ═══════════════════════════════════════════════════════════════════
#  API Endpoint Tests
# ═══════════════════════════════════════════════════════════════════


class DoctorDiscoveryAPITests(DoctorTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def test_search_is_public(self):
        response = self.client.get(reverse("doctors:api_doctor_search"), {"what": "derma"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["name"], "Sara Klein")

    def test_search_bad_date_returns_400(self):
        response = self.client.get(
            reverse("doctors:api_doctor_search"), {"date_availability": "tomorrow"}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_options_endpoint(self):
        response = self.client.get(
            reverse("doctors:api_doctor_options", kwargs={"field": "cities"})
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, ["San Diego", "Toronto"])

    def test_unknown_options_returns_404(self):
        response = self.client.get(
            reverse("doctors:api_doctor_options", kwargs={"field": "planets"})
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_where_options_endpoint(self):
        response = self.client.get(reverse("doctors:api_where_options"))
        self.assertEqual(response.data["states"], ["California", "Ontario"])

    def test_directory_includes_option_lists(self):
        response = self.client.get(reverse("doctors:api_doctor_list"), {"sort": "highestRated"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["results"]), 2)
        self.assertIn("specialities", response.data)
        self.assertIn("genders", response.data)

    def test_slots_view_counts_profile_view(self):
        self.client.force_authenticate(user=self.patient)
        url = reverse("doctors:api_doctor_slots", kwargs={"doctor_id": self.profile.id})
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["time_slots"]), 1)
        self.profile.refresh_from_db()
        self.assertEqual(self.profile.profile_views, 1)

    def test_slots_view_requires_patient(self):
        self.client.force_authenticate(user=self.other_user)
        url = reverse("doctors:api_doctor_slots", kwargs={"doctor_id": self.profile.id})
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class DoctorSelfServiceAPITests(DoctorTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(user=self.doctor_user)

    def test_get_own_profile(self):
        response = self.client.get(reverse("doctors:api_doctor_me"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["specialities"], ["Cardiology"])

    def test_update_own_profile(self):
        response = self.client.put(
            reverse("doctors:api_doctor_me"),
            {"bio": "Heart doctor", "specialities": ["Cardiology", "Internal Medicine"]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["bio"], "Heart doctor")
        self.assertEqual(response.data["specialities"], ["Cardiology", "Internal Medicine"])

    def test_patient_cannot_use_doctor_endpoints(self):
        self.client.force_authenticate(user=self.patient)
        response = self.client.get(reverse("doctors:api_doctor_me"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_request_verification(self):
        self.profile.verification_status = DoctorProfile.Verification.UNVERIFIED
        self.profile.save()
        response = self.client.post(reverse("doctors:api_doctor_verify"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["verification_status"], "PENDING")

    def test_add_time_slot(self):
        response = self.client.post(
            reverse("doctors:api_time_slots"),
            {
                "date": self.tomorrow.isoformat(),
                "start_time": "11:00",
                "end_time": "11:30",
                "hospital": "Mercy General",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "FREE")
        self.assertEqual(response.data["start_time"], "11:00")

    def test_add_time_slot_unknown_hospital(self):
        response = self.client.post(
            reverse("doctors:api_time_slots"),
            {
                "date": self.tomorrow.isoformat(),
                "start_time": "11:00",
                "end_time": "11:30",
                "hospital": "Toronto Western",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_add_time_slot_end_before_start(self):
        response = self.client.post(
            reverse("doctors:api_time_slots"),
            {
                "date": self.tomorrow.isoformat(),
                "start_time": "11:00",
                "end_time": "10:00",
                "hospital": "Mercy General",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_and_delete_time_slot(self):
        response = self.client.get(reverse("doctors:api_time_slots"))
        self.assertEqual(len(response.data["results"]), 1)

        response = self.client.delete(
            reverse("doctors:api_time_slot_delete", kwargs={"slot_id": self.slot.id})
        )
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(TimeSlot.objects.filter(id=self.slot.id).exists())

    def test_subscription_request(self):
        response = self.client.post(
            reverse("doctors:api_doctor_subscription"),
            {"subscription_type": "Premium", "amount": "2500"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["subscription_status"], "PENDING")

    def test_subscription_invalid_amount(self):
        response = self.client.post(
            reverse("doctors:api_doctor_subscription"),
            {"subscription_type": "Premium", "amount": "-5"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "Invalid payment amount")
