import logging

from django.db import transaction

from doctors.models import DoctorProfile
from .models import EmergencyContact

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("date_of_birth", "gender", "blood_type", "medical_history", "allergies")


def update_patient_profile(profile, data):
    """
    Apply a validated profile update.

    ``emergency_contacts``, when present, replaces the stored contacts;
    anything that is not a list clears them.
    """
    with transaction.atomic():
        user = profile.user
        user_changed = [field for field in ("name", "phone") if field in data]
        for field in user_changed:
            setattr(user, field, data[field])
        if user_changed:
            user.save(update_fields=user_changed)

        for field in PROFILE_FIELDS:
            if field in data:
                setattr(profile, field, data[field])
        profile.save()

        if "emergency_contacts" in data:
            contacts = data["emergency_contacts"]
            profile.emergency_contacts.all().delete()
            if isinstance(contacts, list):
                EmergencyContact.objects.bulk_create(
                    EmergencyContact(patient=profile, **contact) for contact in contacts
                )

    logger.info("[PATIENTS] Profile updated patient_profile_id=%s", profile.id)
    return profile


def add_favorite_doctor(profile, doctor_id):
    """
    Raises:
        DoctorProfile.DoesNotExist: Unknown doctor.
        ValueError: Already a favorite.
    """
    doctor = DoctorProfile.objects.get(id=doctor_id)
    if profile.favorite_doctors.filter(id=doctor.id).exists():
        raise ValueError("Doctor already in favorites")

    profile.favorite_doctors.add(doctor)
    logger.info(
        "[PATIENTS] Favorite added patient_profile_id=%s doctor_profile_id=%s",
        profile.id,
        doctor.id,
    )
    return doctor


def favorite_doctors(profile):
    return profile.favorite_doctors.select_related("user").prefetch_related(
        "specialties", "languages", "conditions", "hospitals"
    )
