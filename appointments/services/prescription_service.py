"""
Prescriptions written by doctors after a consultation.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from appointments.models import Booking, Medicine, Prescription
from appointments.services.booking_service import (
    BookingError,
    BookingNotFoundError,
    BookingPermissionError,
)

logger = logging.getLogger(__name__)

User = get_user_model()

MEDICINE_FLAGS = ("before_food", "after_food", "morning", "afternoon", "night")


def _flag(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "on", "yes")
    return bool(value)


def _medicine_fields(data):
    """Coerce one medicine entry; timing flags may be nested under "timing"."""
    timing = data.get("timing") or {}
    fields = {
        "name": (data.get("name") or "").strip(),
        "dosage": (data.get("dosage") or "").strip(),
    }
    for flag in MEDICINE_FLAGS:
        fields[flag] = _flag(data.get(flag, timing.get(flag, False)))
    return fields


def _doctor_speciality(doctor):
    profile = getattr(doctor, "doctor_profile", None)
    if profile is None:
        return ""
    return ", ".join(profile.specialties.values_list("name", flat=True))


def _owned_booking(booking_id, doctor):
    try:
        booking = Booking.objects.select_related("patient", "doctor").get(id=booking_id)
    except Booking.DoesNotExist:
        raise BookingNotFoundError()
    if booking.doctor_id != doctor.id:
        raise BookingPermissionError()
    return booking


def prescription_context(booking_id, doctor):
    """
    Prefill values for writing a prescription for one of the doctor's bookings.

    Raises:
        BookingNotFoundError, BookingPermissionError
    """
    booking = _owned_booking(booking_id, doctor)
    patient_profile = getattr(booking.patient, "patient_profile", None)
    return {
        "booking_id": booking.id,
        "patient_id": booking.patient_id,
        "patient_name": booking.patient.name,
        "patient_age": patient_profile.age if patient_profile else None,
        "doctor_name": doctor.name,
        "doctor_email": doctor.email,
        "doctor_speciality": _doctor_speciality(doctor),
        "meeting_date": booking.date,
        "meeting_time": booking.time_range,
    }


def create_prescription(doctor, data):
    """
    Store a prescription and its medicines.

    ``data`` keys: patient_id, optional booking_id, the copied header
    fields (patient_name, doctor_name, ...) and ``medicines``, a list of
    dicts. Missing header fields are filled from the booking or users.

    Raises:
        BookingNotFoundError, BookingPermissionError: Bad booking_id.
        BookingError: Unknown patient (code "invalid_patient"), or the
            patient does not match the booking.
    """
    booking = None
    if data.get("booking_id"):
        booking = _owned_booking(data["booking_id"], doctor)

    patient_id = data.get("patient_id") or (booking.patient_id if booking else None)
    try:
        patient = User.objects.get(id=patient_id, role="PATIENT")
    except User.DoesNotExist:
        raise BookingError("Patient not found.", code="invalid_patient")

    if booking and booking.patient_id != patient.id:
        raise BookingError("Patient does not match the booking.", code="patient_mismatch")

    medicines = [_medicine_fields(m) for m in data.get("medicines") or []]
    medicines = [m for m in medicines if m["name"]]

    with transaction.atomic():
        prescription = Prescription.objects.create(
            booking=booking,
            patient=patient,
            doctor=doctor,
            patient_name=data.get("patient_name") or patient.name,
            doctor_name=data.get("doctor_name") or doctor.name,
            doctor_speciality=data.get("doctor_speciality") or _doctor_speciality(doctor),
            doctor_email=data.get("doctor_email") or doctor.email,
            patient_age=data.get("patient_age"),
            meeting_date=data.get("meeting_date") or (booking.date if booking else None),
            meeting_time=data.get("meeting_time") or (booking.time_range if booking else ""),
        )
        Medicine.objects.bulk_create(
            Medicine(prescription=prescription, **fields) for fields in medicines
        )

    logger.info(
        "[BOOKING] Prescription created prescription_id=%s doctor_id=%s patient_id=%s medicines=%s",
        prescription.id,
        doctor.id,
        patient.id,
        len(medicines),
    )
    return prescription


def get_patient_prescriptions(patient_id, doctor=None):
    """
    A patient's prescriptions, newest first.

    When ``doctor`` is given the patient must have booked with that doctor.

    Raises:
        BookingPermissionError: ``doctor`` has no booking with the patient.
    """
    if doctor is not None and not Booking.objects.filter(
        doctor=doctor, patient_id=patient_id
    ).exists():
        raise BookingPermissionError("This patient has no booking with you.")

    return (
        Prescription.objects.filter(patient_id=patient_id)
        .select_related("doctor", "patient")
        .prefetch_related("medicines")
        .order_by("-created_at", "-id")
    )
