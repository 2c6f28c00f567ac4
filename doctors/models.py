from django.db import models
from django.conf import settings
from django.core.exceptions import ValidationError


class Specialty(models.Model):
    """
    Medical specialties (e.g. Cardiology, Dermatology, Pediatrics).
    Used to categorize doctors for patient discovery.
    """

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(
        blank=True,
        help_text="Brief description of this specialty.",
    )

    class Meta:
        verbose_name = "Specialty"
        verbose_name_plural = "Specialties"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Language(models.Model):
    """Languages a doctor can consult in."""

    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Condition(models.Model):
    """Conditions a doctor treats (searchable through the "what" box)."""

    name = models.CharField(max_length=150, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class DoctorProfile(models.Model):
    """
    Extended profile for doctor users.

        CustomUser (auth/identity) ← OneToOne → DoctorProfile (domain data)

    Created on registration with verification_status=UNVERIFIED. Only
    VERIFIED doctors show up in patient-facing search and listings.
    """

    class Verification(models.TextChoices):
        UNVERIFIED = "UNVERIFIED", "Not Verified"
        PENDING = "PENDING", "Pending"
        VERIFIED = "VERIFIED", "Verified"
        REJECTED = "REJECTED", "Rejected"

    class Subscription(models.TextChoices):
        NONE = "NONE", "None"
        PENDING = "PENDING", "Pending"
        ACTIVE = "ACTIVE", "Active"
        REJECTED = "REJECTED", "Rejected"

    GENDER_CHOICES = [
        ("M", "Male"),
        ("F", "Female"),
        ("O", "Other"),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="doctor_profile",
        limit_choices_to={"role": "DOCTOR"},
    )
    bio = models.TextField(
        blank=True,
        help_text="Public bio displayed on the doctor's profile.",
    )
    gender = models.CharField(max_length=1, choices=GENDER_CHOICES, blank=True)
    country = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    city = models.CharField(max_length=100, blank=True)
    specialties = models.ManyToManyField(Specialty, related_name="doctors", blank=True)
    languages = models.ManyToManyField(Language, related_name="doctors", blank=True)
    conditions = models.ManyToManyField(Condition, related_name="doctors", blank=True)
    verification_status = models.CharField(
        max_length=20,
        choices=Verification.choices,
        default=Verification.UNVERIFIED,
    )
    is_available = models.BooleanField(
        default=True,
        help_text="Doctor is currently accepting new patients.",
    )
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    consultations_completed = models.PositiveIntegerField(default=0)
    profile_views = models.PositiveIntegerField(default=0)

    # Subscription request (reviewed by an admin)
    subscription_type = models.CharField(max_length=50, blank=True)
    subscription_status = models.CharField(
        max_length=20,
        choices=Subscription.choices,
        default=Subscription.NONE,
    )
    subscription_amount = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Amount in the smallest currency unit (cents).",
    )

    class Meta:
        verbose_name = "Doctor Profile"
        verbose_name_plural = "Doctor Profiles"
        ordering = ["user__name"]

    def __str__(self):
        return f"Dr. {self.user.name}"

    @property
    def is_verified(self):
        return self.verification_status == self.Verification.VERIFIED


class Hospital(models.Model):
    """A hospital or practice location where the doctor sees patients."""

    doctor = models.ForeignKey(
        DoctorProfile,
        on_delete=models.CASCADE,
        related_name="hospitals",
    )
    name = models.CharField(max_length=255)
    street = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True)
    zip_code = models.CharField(max_length=20, blank=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["doctor", "name"],
                name="unique_hospital_name_per_doctor",
            )
        ]

    def __str__(self):
        return f"{self.name} ({self.doctor})"

    @property
    def address(self):
        parts = [self.street, self.city, self.state, self.country, self.zip_code]
        return ", ".join(p for p in parts if p)


class TimeSlot(models.Model):
    """
    A single dated consultation window published by a doctor.

    A booking claims the slot whose date and start time match its own;
    the slot's status mirrors whether that booking is still live.
    """

    class Status(models.TextChoices):
        FREE = "FREE", "Free"
        BOOKED = "BOOKED", "Booked"

    doctor = models.ForeignKey(
        DoctorProfile,
        on_delete=models.CASCADE,
        related_name="time_slots",
    )
    hospital = models.ForeignKey(
        Hospital,
        on_delete=models.PROTECT,
        related_name="time_slots",
    )
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.FREE)

    class Meta:
        verbose_name = "Time Slot"
        verbose_name_plural = "Time Slots"
        ordering = ["date", "start_time"]
        constraints = [
            models.UniqueConstraint(
                fields=["doctor", "date", "start_time"],
                name="unique_doctor_slot_start",
            )
        ]

    def __str__(self):
        return f"{self.doctor} {self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M} [{self.status}]"

    def clean(self):
        super().clean()

        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError({"end_time": "End time must be after start time."})

        if self.hospital_id and self.doctor_id and self.hospital.doctor_id != self.doctor_id:
            raise ValidationError({"hospital": "Hospital does not belong to this doctor."})

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)
