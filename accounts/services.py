import logging

from django.contrib.auth import get_user_model
from django.db import transaction

logger = logging.getLogger(__name__)

User = get_user_model()


def register_user(*, email, name, password, role="PATIENT", phone=""):
    """
    Create a user together with the profile that matches its role.

    Doctors get an empty, unverified DoctorProfile; patients get a
    PatientProfile. Both writes happen in one transaction.
    """
    from doctors.models import DoctorProfile
    from patients.models import PatientProfile

    with transaction.atomic():
        user = User.objects.create_user(
            email=email,
            password=password,
            name=name,
            phone=phone,
            role=role,
        )
        if role == "DOCTOR":
            DoctorProfile.objects.create(user=user)
        elif role == "PATIENT":
            PatientProfile.objects.create(user=user)

    logger.info("[ACCOUNTS] Registered user_id=%s role=%s", user.id, role)
    return user
