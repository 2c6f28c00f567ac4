"""
Tests for the appointment lifecycle.

Covers:
- Booking service (happy path, validations, slot locking)
- Status updates (effective status, slot reconciliation, notifications)
- Meet link creation and appointment emails
- Calendar, prescriptions and notifications
- API endpoints under /api/appointments/
"""

from datetime import date, datetime, time, timedelta
from unittest.mock import MagicMock, patch

from django.test import TestCase, override_settings
from django.utils import timezone
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework import status

from accounts.services import register_user
from appointments.meetings import MeetingLinkError, create_meeting_link
from appointments.models import Booking, Notification, Prescription, parse_time_range
from appointments.services import (
    book_appointment,
    BookingError,
    BookingNotFoundError,
    BookingPermissionError,
    InvalidSlotError,
    InvalidStatusError,
    PastDateError,
    SlotUnavailableError,
    create_prescription,
    get_calendar,
    get_completed_bookings,
    reconcile_slot_status,
    update_booking_status,
)
from chats.models import Chat
from doctors.models import DoctorProfile, TimeSlot


class BookingTestMixin:
    """Shared setup for booking tests."""

    def setUp(self):
        # Users
        self.doctor = register_user(
            email="ahmad@example.com",
            password="testpass123",
            name="Ahmad Saleh",
            role="DOCTOR",
        )
        self.other_doctor = register_user(
            email="sara@example.com",
            password="testpass123",
            name="Sara Klein",
            role="DOCTOR",
        )
        self.patient = register_user(
            email="ali@example.com",
            password="testpass123",
            name="Patient Ali",
        )
        self.patient2 = register_user(
            email="mona@example.com",
            password="testpass123",
            name="Patient Mona",
        )

        self.profile = self.doctor.doctor_profile
        self.profile.verification_status = DoctorProfile.Verification.VERIFIED
        self.profile.save()
        self.hospital = self.profile.hospitals.create(
            name="Mercy General",
            street="4077 5th Ave",
            city="San Diego",
            state="CA",
            country="USA",
            zip_code="92103",
        )

        self.tomorrow = timezone.localdate() + timedelta(days=1)
        self.slot = TimeSlot.objects.create(
            doctor=self.profile,
            hospital=self.hospital,
            date=self.tomorrow,
            start_time=time(9, 0),
            end_time=time(9, 30),
        )

    def _book(self, patient=None, consultation_type=Booking.ConsultationType.IN_PERSON):
        return book_appointment(
            patient=patient or self.patient,
            doctor_id=self.profile.id,
            booking_date=self.tomorrow,
            time_range="09:00 - 09:30",
            consultation_type=consultation_type,
        )

    def _refresh_slot(self):
        self.slot.refresh_from_db()
        return self.slot.status


# ═══════════════════════════════════════════════════════════════════
#  Model helpers
# ═══════════════════════════════════════════════════════════════════


class TimeRangeTests(TestCase):

    def test_parse_time_range(self):
        self.assertEqual(parse_time_range("09:00 - 09:30"), (time(9, 0), time(9, 30)))
        self.assertEqual(parse_time_range("14:15-15:00"), (time(14, 15), time(15, 0)))

    def test_parse_time_range_malformed(self):
        for value in ("09:00", "9am - 10am", "", None, "25:00 - 26:00"):
            with self.assertRaises(ValueError):
                parse_time_range(value)

    def test_booking_time_range(self):
        booking = Booking(start_time=time(9, 5), end_time=time(10, 0))
        self.assertEqual(booking.time_range, "09:05 - 10:00")


# ═══════════════════════════════════════════════════════════════════
#  Service Layer Tests
# ═══════════════════════════════════════════════════════════════════


class BookingServiceTests(BookingTestMixin, TestCase):
    """Tests for the book_appointment service function."""

    def test_successful_booking(self):
        """Happy path: patient books a free slot."""
        booking = self._book(consultation_type=Booking.ConsultationType.VIDEO_CALL)

        self.assertEqual(booking.patient, self.patient)
        self.assertEqual(booking.doctor, self.doctor)
        self.assertEqual(booking.hospital, self.hospital)
        self.assertEqual(booking.date, self.tomorrow)
        self.assertEqual(booking.end_time, time(9, 30))
        self.assertEqual(booking.status, Booking.Status.WAITING)
        self.assertEqual(booking.consultation_type, Booking.ConsultationType.VIDEO_CALL)
        self.assertEqual(self._refresh_slot(), TimeSlot.Status.BOOKED)

    def test_double_booking_raises_slot_unavailable(self):
        self._book()
        with self.assertRaises(SlotUnavailableError):
            self._book(patient=self.patient2)
        self.assertEqual(Booking.objects.count(), 1)

    def test_unknown_start_time_raises_invalid_slot(self):
        with self.assertRaises(InvalidSlotError):
            book_appointment(
                patient=self.patient,
                doctor_id=self.profile.id,
                booking_date=self.tomorrow,
                time_range="09:15 - 09:45",
                consultation_type=Booking.ConsultationType.IN_PERSON,
            )

    def test_malformed_time_range_raises_invalid_slot(self):
        with self.assertRaises(InvalidSlotError):
            book_appointment(
                patient=self.patient,
                doctor_id=self.profile.id,
                booking_date=self.tomorrow,
                time_range="nine o'clock",
                consultation_type=Booking.ConsultationType.IN_PERSON,
            )

    def test_past_date_raises(self):
        with self.assertRaises(PastDateError):
            book_appointment(
                patient=self.patient,
                doctor_id=self.profile.id,
                booking_date=timezone.localdate() - timedelta(days=1),
                time_range="09:00 - 09:30",
                consultation_type=Booking.ConsultationType.IN_PERSON,
            )

    def test_started_slot_today_raises(self):
        today = self.tomorrow - timedelta(days=1)
        TimeSlot.objects.create(
            doctor=self.profile,
            hospital=self.hospital,
            date=today,
            start_time=time(8, 0),
            end_time=time(8, 30),
        )
        with self.assertRaises(PastDateError):
            book_appointment(
                patient=self.patient,
                doctor_id=self.profile.id,
                booking_date=today,
                time_range="08:00 - 08:30",
                consultation_type=Booking.ConsultationType.IN_PERSON,
                now=datetime.combine(today, time(12, 0)),
            )

    def test_unverified_doctor_raises(self):
        self.profile.verification_status = DoctorProfile.Verification.PENDING
        self.profile.save()
        with self.assertRaises(BookingError) as ctx:
            self._book()
        self.assertEqual(ctx.exception.code, "invalid_doctor")


@patch("appointments.emails._send_email", return_value=True)
class UpdateBookingStatusTests(BookingTestMixin, TestCase):
    """Tests for the doctor-side status lifecycle."""

    def setUp(self):
        super().setUp()
        self.booking = self._book()
        self.before_end = datetime.combine(self.tomorrow, time(8, 0))
        self.after_end = datetime.combine(self.tomorrow, time(10, 0))

    def _update(self, requested, now=None, booking=None):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            result = update_booking_status(
                (booking or self.booking).id,
                self.doctor,
                requested,
                now=now or self.before_end,
            )
        return result, callbacks

    def test_accept_in_person(self, send_email):
        booking, callbacks = self._update(Booking.Status.ACCEPTED)

        self.assertEqual(booking.status, Booking.Status.ACCEPTED)
        self.assertEqual(booking.meeting_link, "")
        self.assertEqual(self._refresh_slot(), TimeSlot.Status.BOOKED)
        self.assertEqual(len(callbacks), 1)

        # Patient email only, with the hospital address
        self.assertEqual(send_email.call_count, 1)
        to_email, subject, html, _text = send_email.call_args.args
        self.assertEqual(to_email, "ali@example.com")
        self.assertEqual(subject, "Appointment Confirmation")
        self.assertIn("Mercy General", html)
        self.assertIn("92103", html)

        chat = Chat.objects.get(doctor=self.doctor, patient=self.patient)
        message = chat.messages.get()
        self.assertEqual(message.sender, self.doctor)
        self.assertIn("has been confirmed", message.text)
        self.assertIn("Please visit the hospital at Mercy General", message.text)

        notification = Notification.objects.get(user=self.patient)
        self.assertEqual(notification.notification_type, Notification.Type.APPOINTMENT)
        self.assertEqual(notification.booking, self.booking)

    @patch(
        "appointments.services.booking_service.create_meeting_link",
        return_value="https://meet.google.com/abc-defg-hij",
    )
    def test_accept_video_call_creates_link_and_notifies_both(self, create_link, send_email):
        self.booking.consultation_type = Booking.ConsultationType.VIDEO_CALL
        self.booking.save()

        booking, _ = self._update(Booking.Status.ACCEPTED)

        create_link.assert_called_once()
        self.assertEqual(booking.meeting_link, "https://meet.google.com/abc-defg-hij")
        recipients = [c.args[0] for c in send_email.call_args_list]
        self.assertEqual(recipients, ["ali@example.com", "ahmad@example.com"])
        subjects = [c.args[1] for c in send_email.call_args_list]
        self.assertEqual(subjects, ["Appointment Confirmation", "Appointment Confirmation Notification"])

        message = Chat.objects.get(doctor=self.doctor, patient=self.patient).messages.get()
        self.assertIn("https://meet.google.com/abc-defg-hij", message.text)

    @patch("appointments.services.booking_service.create_meeting_link")
    def test_existing_link_is_reused(self, create_link, send_email):
        self.booking.consultation_type = Booking.ConsultationType.VIDEO_CALL
        self.booking.meeting_link = "https://meet.google.com/existing"
        self.booking.save()

        booking, _ = self._update(Booking.Status.ACCEPTED)

        create_link.assert_not_called()
        self.assertEqual(booking.meeting_link, "https://meet.google.com/existing")

    @patch(
        "appointments.services.booking_service.create_meeting_link",
        side_effect=MeetingLinkError(),
    )
    def test_meeting_link_failure_saves_nothing(self, create_link, send_email):
        self.booking.consultation_type = Booking.ConsultationType.VIDEO_CALL
        self.booking.save()

        with self.assertRaises(MeetingLinkError):
            self._update(Booking.Status.ACCEPTED)

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.WAITING)
        self.assertFalse(Notification.objects.exists())
        send_email.assert_not_called()

    def test_reject_frees_slot_and_notifies(self, send_email):
        booking, _ = self._update(Booking.Status.REJECTED)

        self.assertEqual(booking.status, Booking.Status.REJECTED)
        self.assertEqual(self._refresh_slot(), TimeSlot.Status.FREE)
        self.assertEqual(send_email.call_args.args[1], "Appointment Rejection")
        message = Chat.objects.get(doctor=self.doctor, patient=self.patient).messages.get()
        self.assertIn("has been rejected", message.text)
        self.assertTrue(Notification.objects.filter(user=self.patient).exists())

    def test_reopen_rejected_books_slot_again(self, send_email):
        self._update(Booking.Status.REJECTED)
        self.assertEqual(self._refresh_slot(), TimeSlot.Status.FREE)

        booking, callbacks = self._update(Booking.Status.WAITING)

        self.assertEqual(booking.status, Booking.Status.WAITING)
        self.assertEqual(self._refresh_slot(), TimeSlot.Status.BOOKED)
        # WAITING sends nothing
        self.assertEqual(len(callbacks), 0)

    def test_reopen_refused_once_slot_rebooked(self, send_email):
        self._update(Booking.Status.REJECTED)
        second = self._book(patient=self.patient2)

        with self.assertRaises(SlotUnavailableError):
            self._update(Booking.Status.ACCEPTED)

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.REJECTED)
        live = Booking.objects.filter(
            doctor=self.doctor,
            date=self.tomorrow,
            start_time=time(9, 0),
            status__in=[Booking.Status.WAITING, Booking.Status.ACCEPTED],
        )
        self.assertEqual(list(live), [second])
        self.assertEqual(self._refresh_slot(), TimeSlot.Status.BOOKED)

    def test_reject_keeps_slot_booked_while_another_booking_is_live(self, send_email):
        self._update(Booking.Status.REJECTED)
        second = self._book(patient=self.patient2)
        # Older rows may already hold two live bookings on one slot.
        Booking.objects.filter(id=self.booking.id).update(status=Booking.Status.ACCEPTED)

        booking, _ = self._update(Booking.Status.REJECTED, booking=second)

        self.assertEqual(booking.status, Booking.Status.REJECTED)
        self.assertEqual(self._refresh_slot(), TimeSlot.Status.BOOKED)

    def test_update_after_end_completes(self, send_email):
        booking, callbacks = self._update(Booking.Status.REJECTED, now=self.after_end)

        self.assertEqual(booking.status, Booking.Status.COMPLETED)
        self.assertEqual(self._refresh_slot(), TimeSlot.Status.BOOKED)
        self.assertEqual(len(callbacks), 0)
        send_email.assert_not_called()
        self.assertIn(booking, get_completed_bookings(self.doctor))

    def test_missing_slot_logs_and_skips_notifications(self, send_email):
        self.slot.delete()

        with self.assertLogs("appointments.services.booking_service", level="ERROR"):
            booking, callbacks = self._update(Booking.Status.ACCEPTED)

        self.assertEqual(booking.status, Booking.Status.ACCEPTED)
        self.assertEqual(len(callbacks), 0)
        self.assertFalse(Notification.objects.exists())

    def test_email_failure_does_not_block_chat(self, send_email):
        send_email.side_effect = RuntimeError("smtp down")

        self._update(Booking.Status.ACCEPTED)

        self.assertTrue(Chat.objects.filter(doctor=self.doctor, patient=self.patient).exists())
        self.assertTrue(Notification.objects.filter(user=self.patient).exists())

    def test_other_doctor_forbidden(self, send_email):
        with self.assertRaises(BookingPermissionError):
            update_booking_status(self.booking.id, self.other_doctor, Booking.Status.ACCEPTED)

    def test_unknown_booking(self, send_email):
        with self.assertRaises(BookingNotFoundError):
            update_booking_status(self.booking.id + 100, self.doctor, Booking.Status.ACCEPTED)

    def test_completed_cannot_be_requested(self, send_email):
        with self.assertRaises(InvalidStatusError):
            update_booking_status(self.booking.id, self.doctor, Booking.Status.COMPLETED)


class ReconcileSlotStatusTests(TestCase):

    def test_rules(self):
        S = Booking.Status
        cases = [
            (S.REJECTED, S.WAITING, TimeSlot.Status.BOOKED),
            (S.REJECTED, S.ACCEPTED, TimeSlot.Status.BOOKED),
            (S.WAITING, S.REJECTED, TimeSlot.Status.FREE),
            (S.ACCEPTED, S.REJECTED, TimeSlot.Status.FREE),
            (S.WAITING, S.ACCEPTED, TimeSlot.Status.BOOKED),
            (S.REJECTED, S.COMPLETED, TimeSlot.Status.BOOKED),
        ]
        for previous, effective, expected in cases:
            self.assertEqual(reconcile_slot_status(previous, effective), expected)

    def test_rejection_keeps_slot_held_by_another_booking(self):
        S = Booking.Status
        self.assertEqual(
            reconcile_slot_status(S.ACCEPTED, S.REJECTED, held_elsewhere=True),
            TimeSlot.Status.BOOKED,
        )
        self.assertEqual(
            reconcile_slot_status(S.WAITING, S.REJECTED, held_elsewhere=False),
            TimeSlot.Status.FREE,
        )


# ═══════════════════════════════════════════════════════════════════
#  Integrations
# ═══════════════════════════════════════════════════════════════════


def _response(status_code, payload):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = str(payload)
    return response


@override_settings(
    GOOGLE_CLIENT_ID="client-id",
    GOOGLE_CLIENT_SECRET="client-secret",
    GOOGLE_REFRESH_TOKEN="refresh-token",
    GOOGLE_CALENDAR_ID="primary",
)
class MeetingLinkTests(BookingTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.booking = self._book(consultation_type=Booking.ConsultationType.VIDEO_CALL)

    @patch("appointments.meetings.requests.post")
    def test_creates_link(self, post):
        post.side_effect = [
            _response(200, {"access_token": "token-123"}),
            _response(200, {"id": "evt", "hangoutLink": "https://meet.google.com/xyz"}),
        ]

        link = create_meeting_link(self.booking)

        self.assertEqual(link, "https://meet.google.com/xyz")
        event_call = post.call_args_list[1]
        self.assertEqual(event_call.kwargs["params"], {"conferenceDataVersion": 1})
        self.assertEqual(event_call.kwargs["headers"]["Authorization"], "Bearer token-123")
        event = event_call.kwargs["json"]
        self.assertEqual(event["summary"], "Appointment with Dr. Ahmad Saleh")
        self.assertEqual(
            event["conferenceData"]["createRequest"]["conferenceSolutionKey"]["type"],
            "hangoutsMeet",
        )
        self.assertEqual(
            [a["email"] for a in event["attendees"]],
            ["ahmad@example.com", "ali@example.com"],
        )

    @override_settings(GOOGLE_CALENDAR_ID="team#clinic@group.calendar.google.com")
    @patch("appointments.meetings.requests.post")
    def test_calendar_id_is_url_encoded(self, post):
        post.side_effect = [
            _response(200, {"access_token": "token-123"}),
            _response(200, {"id": "evt", "hangoutLink": "https://meet.google.com/xyz"}),
        ]

        create_meeting_link(self.booking)

        self.assertEqual(
            post.call_args_list[1].args[0],
            "https://www.googleapis.com/calendar/v3/calendars/"
            "team%23clinic%40group.calendar.google.com/events",
        )

    @patch("appointments.meetings.requests.post")
    def test_token_failure_raises(self, post):
        post.return_value = _response(400, {"error": "invalid_grant"})
        with self.assertRaises(MeetingLinkError):
            create_meeting_link(self.booking)

    @patch("appointments.meetings.requests.post")
    def test_event_failure_raises(self, post):
        post.side_effect = [
            _response(200, {"access_token": "token-123"}),
            _response(403, {"error": "forbidden"}),
        ]
        with self.assertRaises(MeetingLinkError):
            create_meeting_link(self.booking)

    @override_settings(GOOGLE_REFRESH_TOKEN="")
    @patch("appointments.meetings.requests.post")
    def test_not_configured_returns_empty(self, post):
        self.assertEqual(create_meeting_link(self.booking), "")
        post.assert_not_called()


class AppointmentEmailTests(BookingTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.booking = self._book()

    @override_settings(BREVO_API_KEY="")
    @patch("accounts.email_utils._get_brevo_api")
    def test_skipped_without_api_key(self, get_api):
        from appointments import emails

        self.assertFalse(emails.send_rejection(self.booking))
        get_api.assert_not_called()

    @override_settings(BREVO_API_KEY="xkeysib-test")
    @patch("accounts.email_utils._get_brevo_api")
    def test_sent_through_brevo(self, get_api):
        from appointments import emails

        self.assertTrue(emails.send_in_person_confirmation(self.booking))
        sent = get_api.return_value.send_transac_email.call_args.args[0]
        self.assertEqual(sent.to, [{"email": "ali@example.com", "name": "Patient Ali"}])
        self.assertEqual(sent.subject, "Appointment Confirmation")


# ═══════════════════════════════════════════════════════════════════
#  Calendar, prescriptions
# ═══════════════════════════════════════════════════════════════════


class CalendarTests(BookingTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.booking = self._book()
        Booking.objects.filter(id=self.booking.id).update(status=Booking.Status.ACCEPTED)

    def test_month_with_accepted_booking(self):
        data = get_calendar(
            self.patient, "PATIENT", month=str(self.tomorrow.month), year=str(self.tomorrow.year)
        )
        self.assertEqual(data["month"], self.tomorrow.month)
        self.assertEqual([b.id for b in data["bookings"]], [self.booking.id])

        doctor_view = get_calendar(
            self.doctor, "DOCTOR", month=self.tomorrow.month, year=self.tomorrow.year
        )
        self.assertEqual(len(doctor_view["bookings"]), 1)

    def test_invalid_values_fall_back_to_today(self):
        today = date(2026, 2, 10)
        data = get_calendar(self.patient, "PATIENT", month="13", year="1800", today=today)
        self.assertEqual((data["month"], data["year"]), (2, 2026))
        self.assertEqual(data["month_name"], "February")
        self.assertEqual(data["days_in_month"], 28)

        data = get_calendar(self.patient, "PATIENT", month="abc", year=None, today=today)
        self.assertEqual((data["month"], data["year"]), (2, 2026))

    def test_waiting_bookings_excluded(self):
        Booking.objects.filter(id=self.booking.id).update(status=Booking.Status.WAITING)
        data = get_calendar(
            self.patient, "PATIENT", month=self.tomorrow.month, year=self.tomorrow.year
        )
        self.assertEqual(data["bookings"], [])


class PrescriptionServiceTests(BookingTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.booking = self._book()

    def test_create_from_booking_fills_header(self):
        prescription = create_prescription(
            self.doctor,
            {
                "booking_id": self.booking.id,
                "medicines": [
                    {"name": "Amoxicillin", "dosage": "500mg", "after_food": "on",
                     "timing": {"morning": True, "night": True}},
                    {"name": "", "dosage": "ignored"},
                ],
            },
        )
        self.assertEqual(prescription.patient, self.patient)
        self.assertEqual(prescription.patient_name, "Patient Ali")
        self.assertEqual(prescription.doctor_email, "ahmad@example.com")
        self.assertEqual(prescription.meeting_time, "09:00 - 09:30")

        medicine = prescription.medicines.get()
        self.assertTrue(medicine.after_food)
        self.assertFalse(medicine.before_food)
        self.assertTrue(medicine.morning)
        self.assertFalse(medicine.afternoon)
        self.assertTrue(medicine.night)

    def test_other_doctors_booking_forbidden(self):
        with self.assertRaises(BookingPermissionError):
            create_prescription(self.other_doctor, {"booking_id": self.booking.id, "medicines": []})

    def test_unknown_patient(self):
        with self.assertRaises(BookingError) as ctx:
            create_prescription(self.doctor, {"patient_id": self.doctor.id, "medicines": []})
        self.assertEqual(ctx.exception.code, "invalid_patient")


# ═══════════════════════════════════════════════════════════════════
#  API Endpoint Tests
# ═══════════════════════════════════════════════════════════════════


class BookAppointmentAPITests(BookingTestMixin, TestCase):
    """Tests for POST /api/appointments/book/ endpoint."""

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.url = reverse("appointments:api_book_appointment")

    def _book_payload(self, **overrides):
        payload = {
            "doctor_id": self.profile.id,
            "date": self.tomorrow.isoformat(),
            "time": "09:00 - 09:30",
            "consultation_type": "IN_PERSON",
        }
        payload.update(overrides)
        return payload

    def test_successful_api_booking(self):
        self.client.force_authenticate(user=self.patient)
        response = self.client.post(self.url, self._book_payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "WAITING")
        self.assertEqual(response.data["doctor_name"], "Ahmad Saleh")
        self.assertEqual(response.data["hospital_name"], "Mercy General")
        self.assertEqual(response.data["time"], "09:00 - 09:30")

    def test_unauthenticated_returns_401(self):
        response = self.client.post(self.url, self._book_payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_doctor_cannot_book(self):
        self.client.force_authenticate(user=self.doctor)
        response = self.client.post(self.url, self._book_payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_fields_returns_400(self):
        self.client.force_authenticate(user=self.patient)
        response = self.client.post(self.url, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_slot_unavailable_returns_409(self):
        self.client.force_authenticate(user=self.patient)
        self.client.post(self.url, self._book_payload(), format="json")

        self.client.force_authenticate(user=self.patient2)
        response = self.client.post(self.url, self._book_payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "slot_unavailable")

    def test_past_date_returns_400(self):
        self.client.force_authenticate(user=self.patient)
        yesterday = timezone.localdate() - timedelta(days=1)
        response = self.client.post(
            self.url, self._book_payload(date=yesterday.isoformat()), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "past_date")

    def test_unknown_doctor_returns_404(self):
        self.client.force_authenticate(user=self.patient)
        response = self.client.post(
            self.url, self._book_payload(doctor_id=self.profile.id + 100), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "invalid_doctor")

    def test_patient_lists_own_bookings(self):
        self._book()
        self.client.force_authenticate(user=self.patient)
        response = self.client.get(reverse("appointments:api_patient_bookings"))
        self.assertEqual(len(response.data["results"]), 1)

        self.client.force_authenticate(user=self.patient2)
        response = self.client.get(reverse("appointments:api_patient_bookings"))
        self.assertEqual(response.data["results"], [])


@patch("appointments.emails._send_email", return_value=True)
class BookingStatusAPITests(BookingTestMixin, TestCase):
    """Tests for POST /api/appointments/doctor/<id>/status/."""

    def setUp(self):
        super().setUp()
        self.booking = self._book()
        self.client = APIClient()
        self.client.force_authenticate(user=self.doctor)
        self.url = reverse("appointments:api_booking_status", kwargs={"booking_id": self.booking.id})

    def test_accept(self, send_email):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.url, {"status": "accepted"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "ACCEPTED")
        self.assertEqual(Notification.objects.filter(user=self.patient).count(), 1)

    def test_invalid_status_returns_400(self, send_email):
        response = self.client.post(self.url, {"status": "COMPLETED"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_status")

    def test_other_doctor_returns_403(self, send_email):
        self.client.force_authenticate(user=self.other_doctor)
        response = self.client.post(self.url, {"status": "ACCEPTED"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reopen_after_rebooking_returns_409(self, send_email):
        with self.captureOnCommitCallbacks(execute=True):
            self.client.post(self.url, {"status": "REJECTED"}, format="json")
        self._book(patient=self.patient2)

        response = self.client.post(self.url, {"status": "ACCEPTED"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "slot_unavailable")

    def test_missing_booking_returns_404(self, send_email):
        url = reverse("appointments:api_booking_status", kwargs={"booking_id": self.booking.id + 100})
        response = self.client.post(url, {"status": "ACCEPTED"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @patch(
        "appointments.services.booking_service.create_meeting_link",
        side_effect=MeetingLinkError(),
    )
    def test_meeting_failure_returns_502(self, create_link, send_email):
        Booking.objects.filter(id=self.booking.id).update(
            consultation_type=Booking.ConsultationType.VIDEO_CALL
        )
        response = self.client.post(self.url, {"status": "ACCEPTED"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data["code"], "meeting_link_failed")

    def test_doctor_lists(self, send_email):
        response = self.client.get(reverse("appointments:api_doctor_bookings"))
        self.assertEqual([b["id"] for b in response.data["results"]], [self.booking.id])

        response = self.client.get(reverse("appointments:api_completed_bookings"))
        self.assertEqual(response.data["results"], [])

    def test_doctor_calendar(self, send_email):
        Booking.objects.filter(id=self.booking.id).update(status=Booking.Status.ACCEPTED)
        response = self.client.get(
            reverse("appointments:api_doctor_calendar"),
            {"month": self.tomorrow.month, "year": self.tomorrow.year},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["bookings"]), 1)


class PrescriptionAPITests(BookingTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.booking = self._book()
        self.client = APIClient()

    def test_context_and_create(self):
        self.client.force_authenticate(user=self.doctor)
        response = self.client.get(
            reverse("appointments:api_prescription_context", kwargs={"booking_id": self.booking.id})
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["patient_name"], "Patient Ali")

        response = self.client.post(
            reverse("appointments:api_prescriptions"),
            {
                "booking_id": self.booking.id,
                "patient_age": 34,
                "medicines": [{"name": "Ibuprofen", "dosage": "200mg", "morning": True}],
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["medicines"][0]["name"], "Ibuprofen")
        self.assertTrue(response.data["medicines"][0]["morning"])

        response = self.client.get(
            reverse(
                "appointments:api_doctor_patient_prescriptions",
                kwargs={"patient_id": self.patient.id},
            )
        )
        self.assertEqual(len(response.data["results"]), 1)

    def test_doctor_without_booking_cannot_list_patient_prescriptions(self):
        create_prescription(self.doctor, {"booking_id": self.booking.id, "medicines": []})
        self.client.force_authenticate(user=self.other_doctor)

        response = self.client.get(
            reverse(
                "appointments:api_doctor_patient_prescriptions",
                kwargs={"patient_id": self.patient.id},
            )
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "forbidden")

    def test_patient_sees_own_prescriptions(self):
        create_prescription(self.doctor, {"booking_id": self.booking.id, "medicines": []})
        self.client.force_authenticate(user=self.patient)
        response = self.client.get(reverse("appointments:api_prescriptions"))
        self.assertEqual(len(response.data["results"]), 1)

    def test_patient_cannot_write(self):
        self.client.force_authenticate(user=self.patient)
        response = self.client.post(
            reverse("appointments:api_prescriptions"),
            {"patient_id": self.patient.id, "medicines": []},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_requires_booking_or_patient(self):
        self.client.force_authenticate(user=self.doctor)
        response = self.client.post(
            reverse("appointments:api_prescriptions"), {"medicines": []}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Prescription.objects.exists())


class NotificationAPITests(BookingTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.notification = Notification.objects.create(
            user=self.patient,
            message="Your appointment has been confirmed.",
            notification_type=Notification.Type.APPOINTMENT,
        )

    def test_list_and_mark_read(self):
        self.client.force_authenticate(user=self.patient)
        response = self.client.get(reverse("appointments:api_notifications"))
        self.assertEqual(response.data["results"][0]["type"], "APPOINTMENT")
        self.assertFalse(response.data["results"][0]["read"])

        response = self.client.post(
            reverse("appointments:api_notification_read", kwargs={"notification_id": self.notification.id})
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["read"])

    def test_cannot_read_others_notification(self):
        self.client.force_authenticate(user=self.patient2)
        response = self.client.post(
            reverse("appointments:api_notification_read", kwargs={"notification_id": self.notification.id})
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
