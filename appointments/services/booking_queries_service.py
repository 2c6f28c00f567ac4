"""
Read-side booking queries: per-doctor and per-patient lists, completed
consultations and the month calendar.
"""

import calendar
from datetime import date

from django.utils import timezone

from appointments.models import Booking


def _base_qs():
    return Booking.objects.select_related("patient", "doctor", "hospital")


def get_doctor_bookings(doctor):
    """All bookings for a doctor user, newest first."""
    return _base_qs().filter(doctor=doctor).order_by("-created_at", "-id")


def get_patient_bookings(patient):
    """All bookings made by a patient user, newest first."""
    return _base_qs().filter(patient=patient).order_by("-created_at", "-id")


def get_completed_bookings(doctor):
    return (
        _base_qs()
        .filter(doctor=doctor, status=Booking.Status.COMPLETED)
        .order_by("-date", "-start_time")
    )


def _as_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def get_calendar(user, role, month=None, year=None, today=None):
    """
    ACCEPTED bookings of one month for the calendar view.

    Args:
        user: The doctor or patient user.
        role: "DOCTOR" or "PATIENT"; picks which side of the booking matches.
        month: 1..12. Anything else falls back to the current month.
        year: 1900..2100. Anything else falls back to the current year.
        today: Override for the current date (tests).
    """
    today = today or timezone.localdate()

    month = _as_int(month)
    if month is None or not 1 <= month <= 12:
        month = today.month

    year = _as_int(year)
    if year is None or not 1900 <= year <= 2100:
        year = today.year

    days_in_month = calendar.monthrange(year, month)[1]

    qs = _base_qs().filter(
        status=Booking.Status.ACCEPTED,
        date__gte=date(year, month, 1),
        date__lte=date(year, month, days_in_month),
    )
    if role == "DOCTOR":
        qs = qs.filter(doctor=user)
    else:
        qs = qs.filter(patient=user)

    return {
        "month": month,
        "year": year,
        "month_name": calendar.month_name[month],
        "days_in_month": days_in_month,
        "today": today,
        "bookings": list(qs.order_by("date", "start_time")),
    }
