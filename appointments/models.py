from datetime import datetime

from django.db import models
from django.conf import settings


TIME_RANGE_FORMAT = "%H:%M"


def parse_time_range(value):
    """
    Split "HH:MM - HH:MM" into (start, end) time objects.

    Raises:
        ValueError: If the string is not a valid range.
    """
    if not isinstance(value, str) or "-" not in value:
        raise ValueError(f"Invalid time range: {value!r}")

    start_str, _, end_str = value.partition("-")
    start = datetime.strptime(start_str.strip(), TIME_RANGE_FORMAT).time()
    end = datetime.strptime(end_str.strip(), TIME_RANGE_FORMAT).time()
    return start, end


class Booking(models.Model):
    """
    A patient's request for one of a doctor's time slots.

    Lifecycle: WAITING on creation; the doctor moves it to ACCEPTED or
    REJECTED; it becomes COMPLETED once a status update arrives after
    its end time has passed.
    """

    class Status(models.TextChoices):
        WAITING = "WAITING", "Waiting"
        ACCEPTED = "ACCEPTED", "Accepted"
        REJECTED = "REJECTED", "Rejected"
        COMPLETED = "COMPLETED", "Completed"

    class ConsultationType(models.TextChoices):
        VIDEO_CALL = "VIDEO_CALL", "Video call"
        IN_PERSON = "IN_PERSON", "In-person"

    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings_as_patient",
    )
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings_as_doctor",
    )
    hospital = models.ForeignKey(
        "doctors.Hospital",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    consultation_type = models.CharField(
        max_length=20,
        choices=ConsultationType.choices,
        default=ConsultationType.IN_PERSON,
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.WAITING)
    meeting_link = models.URLField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Booking"
        verbose_name_plural = "Bookings"
        indexes = [
            models.Index(fields=["doctor", "date"], name="booking_doctor_date_idx"),
        ]

    def __str__(self):
        return f"{self.patient.name} with Dr. {self.doctor.name} on {self.date} {self.time_range}"

    @property
    def time_range(self):
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"

    @property
    def ends_at(self):
        """Naive local datetime at which the consultation is over."""
        return datetime.combine(self.date, self.end_time)


class Prescription(models.Model):
    """
    A doctor's prescription for a patient.

    Names, speciality and age are copied at write time so the document
    reads the same even if profiles change later.
    """

    booking = models.ForeignKey(
        Booking,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="prescriptions",
    )
    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="prescriptions_received",
    )
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="prescriptions_written",
    )
    patient_name = models.CharField(max_length=255)
    doctor_name = models.CharField(max_length=255)
    doctor_speciality = models.CharField(max_length=255, blank=True)
    doctor_email = models.EmailField(blank=True)
    patient_age = models.PositiveIntegerField(null=True, blank=True)
    meeting_date = models.DateField(null=True, blank=True)
    meeting_time = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Prescription for {self.patient_name} by Dr. {self.doctor_name}"


class Medicine(models.Model):
    prescription = models.ForeignKey(
        Prescription,
        on_delete=models.CASCADE,
        related_name="medicines",
    )
    name = models.CharField(max_length=255)
    dosage = models.CharField(max_length=255, blank=True)
    before_food = models.BooleanField(default=False)
    after_food = models.BooleanField(default=False)
    morning = models.BooleanField(default=False)
    afternoon = models.BooleanField(default=False)
    night = models.BooleanField(default=False)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.name} ({self.dosage})" if self.dosage else self.name


class Notification(models.Model):
    """In-app notification shown to a patient or doctor."""

    class Type(models.TextChoices):
        CHAT = "CHAT", "Chat"
        APPOINTMENT = "APPOINTMENT", "Appointment"
        REMINDER = "REMINDER", "Reminder"
        OTHER = "OTHER", "Other"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    booking = models.ForeignKey(
        Booking,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    message = models.TextField()
    notification_type = models.CharField(max_length=20, choices=Type.choices)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"

    def __str__(self):
        return f"[{self.notification_type}] {self.user} - {self.message[:40]}"
