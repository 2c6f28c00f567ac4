"""
Appointment booking service.

Two entry points:

book_appointment
    Patient claims a FREE time slot. The slot row is locked with
    select_for_update() so two patients racing for the same slot cannot
    both get it.

update_booking_status
    Doctor accepts or rejects a booking. Under one transaction it:
    1. Locks the booking and checks ownership
    2. Works out the effective status (COMPLETED once the slot has ended)
    3. Creates a Meet link for accepted video consultations
    4. Saves the booking and reconciles the matching time slot, which
       stays BOOKED while any other live booking holds it
    5. Schedules emails, a chat message and an in-app notification
       for after the commit
"""

import logging
from datetime import date

from django.db import transaction
from django.utils import timezone

from appointments import emails
from appointments.meetings import create_meeting_link
from appointments.models import Booking, Notification, parse_time_range
from chats.services import append_message
from doctors.models import DoctorProfile, TimeSlot

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base exception for booking failures."""

    def __init__(self, message, code="booking_error"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class SlotUnavailableError(BookingError):
    """Raised when the requested slot is no longer available."""

    def __init__(self, message="This time slot is no longer available. Please select another slot."):
        super().__init__(message, code="slot_unavailable")


class InvalidSlotError(BookingError):
    """Raised when the requested time does not match any of the doctor's slots."""

    def __init__(self, message="The selected time is not a valid slot for this doctor."):
        super().__init__(message, code="invalid_slot")


class PastDateError(BookingError):
    """Raised when trying to book a date in the past."""

    def __init__(self, message="Cannot book appointments for past dates."):
        super().__init__(message, code="past_date")


class BookingNotFoundError(BookingError):
    def __init__(self, message="Booking not found."):
        super().__init__(message, code="not_found")


class BookingPermissionError(BookingError):
    def __init__(self, message="This booking belongs to another doctor."):
        super().__init__(message, code="forbidden")


class InvalidStatusError(BookingError):
    def __init__(self, message="Status must be one of WAITING, ACCEPTED or REJECTED."):
        super().__init__(message, code="invalid_status")


# Statuses a doctor may request; COMPLETED is only ever derived.
REQUESTABLE_STATUSES = (
    Booking.Status.WAITING,
    Booking.Status.ACCEPTED,
    Booking.Status.REJECTED,
)


def _local_now_naive(now=None):
    now = now or timezone.now()
    if timezone.is_aware(now):
        now = timezone.localtime(now).replace(tzinfo=None)
    return now


# ── Booking ──────────────────────────────────────────────────────────────────


def book_appointment(
    *,
    patient,
    doctor_id: int,
    booking_date: date,
    time_range: str,
    consultation_type: str,
    now=None,
) -> Booking:
    """
    Book one of a doctor's free slots for a patient.

    Args:
        patient: The User instance (patient) booking the appointment.
        doctor_id: The DoctorProfile ID.
        booking_date: The slot date.
        time_range: "HH:MM - HH:MM"; the start must match a slot's start.
        consultation_type: Booking.ConsultationType value.
        now: Override for the current time (tests).

    Returns:
        The created Booking, status WAITING.

    Raises:
        PastDateError: Date (or today's start time) already passed.
        BookingError: Unknown or unverified doctor (code "invalid_doctor").
        InvalidSlotError: No slot starts at that time, or the range is malformed.
        SlotUnavailableError: The slot is already booked.
    """
    try:
        start_time, _ = parse_time_range(time_range)
    except ValueError:
        raise InvalidSlotError("Time must be given as HH:MM - HH:MM.")

    # ── 1. Basic date validation ──────────────────────────────────────
    local_now = _local_now_naive(now)
    today = local_now.date()
    if booking_date < today:
        raise PastDateError()
    if booking_date == today and start_time <= local_now.time():
        raise PastDateError("Cannot book a slot that has already passed today.")

    # ── 2. Validate doctor ────────────────────────────────────────────
    try:
        profile = DoctorProfile.objects.select_related("user").get(
            id=doctor_id,
            verification_status=DoctorProfile.Verification.VERIFIED,
        )
    except DoctorProfile.DoesNotExist:
        raise BookingError("Doctor not found or not verified.", code="invalid_doctor")

    # ── 3. Lock the slot and re-check under the lock ──────────────────
    with transaction.atomic():
        slot = (
            TimeSlot.objects.select_for_update()
            .select_related("hospital")
            .filter(doctor=profile, date=booking_date, start_time=start_time)
            .first()
        )
        if slot is None:
            raise InvalidSlotError()
        if slot.status != TimeSlot.Status.FREE:
            raise SlotUnavailableError()

        booking = Booking.objects.create(
            patient=patient,
            doctor=profile.user,
            hospital=slot.hospital,
            date=booking_date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            consultation_type=consultation_type,
            status=Booking.Status.WAITING,
        )
        slot.status = TimeSlot.Status.BOOKED
        slot.save(update_fields=["status"])

    logger.info(
        "[BOOKING] Created booking_id=%s patient_id=%s doctor_id=%s date=%s time=%s",
        booking.id,
        patient.id,
        profile.user_id,
        booking_date,
        booking.time_range,
    )
    return booking


# ── Status lifecycle ─────────────────────────────────────────────────────────


LIVE_STATUSES = (Booking.Status.WAITING, Booking.Status.ACCEPTED)


def reconcile_slot_status(previous_status, effective_status, held_elsewhere=False):
    """
    TimeSlot status that matches a booking moving between two statuses.

    ``held_elsewhere`` is True when another WAITING or ACCEPTED booking
    sits on the same slot; the slot then stays BOOKED on a rejection.
    """
    if previous_status == Booking.Status.REJECTED and effective_status in LIVE_STATUSES:
        return TimeSlot.Status.BOOKED
    if effective_status == Booking.Status.REJECTED and not held_elsewhere:
        return TimeSlot.Status.FREE
    return TimeSlot.Status.BOOKED


def _slot_held_elsewhere(booking):
    return (
        Booking.objects.filter(
            doctor_id=booking.doctor_id,
            date=booking.date,
            start_time=booking.start_time,
            status__in=LIVE_STATUSES,
        )
        .exclude(id=booking.id)
        .exists()
    )


def update_booking_status(booking_id, doctor, requested_status, now=None) -> Booking:
    """
    Apply a doctor's status decision to a booking.

    Args:
        booking_id: Booking PK.
        doctor: The doctor User making the change.
        requested_status: WAITING, ACCEPTED or REJECTED.
        now: Override for the current time (tests).

    Returns:
        The saved Booking. Its status is COMPLETED instead of the
        requested one if the consultation has already ended.

    Raises:
        InvalidStatusError: Requested status not allowed.
        BookingNotFoundError: No such booking.
        BookingPermissionError: Booking belongs to another doctor.
        SlotUnavailableError: Reopening a rejected booking whose slot
            another live booking now holds.
        MeetingLinkError: Google Calendar failed; nothing is saved.
    """
    if requested_status not in REQUESTABLE_STATUSES:
        raise InvalidStatusError()

    local_now = _local_now_naive(now)

    with transaction.atomic():
        try:
            booking = (
                Booking.objects.select_for_update()
                .select_related("patient", "doctor", "hospital")
                .get(id=booking_id)
            )
        except Booking.DoesNotExist:
            raise BookingNotFoundError()

        if booking.doctor_id != doctor.id:
            raise BookingPermissionError()

        previous_status = booking.status
        if local_now > booking.ends_at:
            effective_status = Booking.Status.COMPLETED
        else:
            effective_status = requested_status

        slot = (
            TimeSlot.objects.select_for_update()
            .filter(doctor__user=doctor, date=booking.date, start_time=booking.start_time)
            .first()
        )
        held_elsewhere = _slot_held_elsewhere(booking)

        # A rejected booking can only come back while nobody else holds the slot.
        if (
            previous_status == Booking.Status.REJECTED
            and effective_status in LIVE_STATUSES
            and held_elsewhere
        ):
            logger.warning(
                "[BOOKING] Reopen refused booking_id=%s date=%s start=%s (slot taken)",
                booking.id,
                booking.date,
                booking.start_time,
            )
            raise SlotUnavailableError()

        booking.status = effective_status

        if (
            effective_status == Booking.Status.ACCEPTED
            and booking.consultation_type == Booking.ConsultationType.VIDEO_CALL
            and not booking.meeting_link
        ):
            booking.meeting_link = create_meeting_link(booking)

        booking.save(update_fields=["status", "meeting_link", "updated_at"])

        if slot is None:
            logger.error(
                "[BOOKING] No time slot for booking_id=%s date=%s start=%s",
                booking.id,
                booking.date,
                booking.start_time,
            )
            return booking

        slot.status = reconcile_slot_status(previous_status, effective_status, held_elsewhere)
        slot.save(update_fields=["status"])

        logger.info(
            "[BOOKING] Status updated booking_id=%s %s -> %s (requested %s) slot_id=%s slot_status=%s",
            booking.id,
            previous_status,
            effective_status,
            requested_status,
            slot.id,
            slot.status,
        )

        if effective_status in (Booking.Status.ACCEPTED, Booking.Status.REJECTED):
            transaction.on_commit(lambda: notify_status_change(booking.id))

    return booking


# ── Notifications ────────────────────────────────────────────────────────────


def _status_chat_text(booking):
    doctor = booking.doctor
    when = f"{booking.date:%a %b %d %Y} at {booking.time_range}"

    if booking.status == Booking.Status.REJECTED:
        return (
            f"Your appointment with Dr. {doctor.name} on {when} has been rejected. "
            "Please contact us for further assistance."
        )
    if booking.consultation_type == Booking.ConsultationType.VIDEO_CALL:
        return (
            f"Your appointment with Dr. {doctor.name} on {when} has been confirmed. "
            f"Join the meeting using the following link: {booking.meeting_link}"
        )
    return (
        f"Your appointment with Dr. {doctor.name} on {when} has been confirmed. "
        f"Please visit the hospital at {emails.hospital_location(booking)}"
    )


def _send_status_emails(booking):
    if booking.status == Booking.Status.REJECTED:
        emails.send_rejection(booking)
    elif booking.consultation_type == Booking.ConsultationType.VIDEO_CALL:
        emails.send_video_confirmation(booking)
        emails.send_doctor_video_confirmation(booking)
    else:
        emails.send_in_person_confirmation(booking)


def notify_status_change(booking_id):
    """
    Tell the patient about an ACCEPTED or REJECTED booking.

    Runs after the status transaction commits. Email problems are logged
    and do not stop the chat message or the in-app notification.
    """
    booking = Booking.objects.select_related("patient", "doctor", "hospital").get(id=booking_id)

    try:
        _send_status_emails(booking)
    except Exception:
        logger.exception("[EMAIL] Status email failed booking_id=%s", booking.id)

    text = _status_chat_text(booking)
    append_message(
        booking.doctor,
        booking.patient,
        booking.doctor,
        text,
        consultation_type=booking.get_consultation_type_display(),
    )
    Notification.objects.create(
        user=booking.patient,
        booking=booking,
        message=text,
        notification_type=Notification.Type.APPOINTMENT,
    )
    logger.info(
        "[NOTIFICATION] Status %s sent for booking_id=%s patient_id=%s",
        booking.status,
        booking.id,
        booking.patient_id,
    )
