"""
Doctor discovery and self-service.

Discovery:
- search_doctors: multi-field filter used by the public search box
- distinct_values / what_options / where_options: option lists for the
  search form drop-downs
- list_verified_doctors: the patient-facing directory with sort options

Self-service (doctor role):
- update_doctor_profile, request_verification, request_subscription
- add_time_slot / delete_time_slot
"""

import logging
from datetime import datetime

from django.db import transaction
from django.db.models import Exists, F, OuterRef, Q

from .models import Condition, DoctorProfile, Hospital, Language, Specialty, TimeSlot

logger = logging.getLogger(__name__)


SORT_OPTIONS = {
    "mostReviewed": "-consultations_completed",
    "highestRated": "-rating",
    "mostViewed": "-profile_views",
}

# option name -> DoctorProfile column
_PROFILE_COLUMNS = {
    "countries": "country",
    "states": "state",
    "cities": "city",
    "genders": "gender",
}

OPTION_FIELDS = (
    "countries",
    "states",
    "cities",
    "hospitals",
    "languages",
    "specialities",
    "genders",
)


# ── Internal helpers ─────────────────────────────────────────────────────────


def _base_qs():
    return DoctorProfile.objects.select_related("user").prefetch_related(
        "specialties", "languages", "conditions", "hospitals"
    )


def _as_list(value):
    """Accept a single string, a comma-separated string or a list."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = value
    return [str(item).strip() for item in items if item and str(item).strip()]


def _parse_date(value):
    return datetime.strptime(value, "%Y-%m-%d").date()


# ── Discovery ────────────────────────────────────────────────────────────────


def search_doctors(params):
    """
    Return verified doctors with at least one free slot, filtered by params.

    Args:
        params: mapping of query parameters (request.query_params works).
            Text filters are case-insensitive substring matches.
            ``what`` matches specialty, doctor name or treated condition;
            ``where`` matches city, state or country. When both are given
            a doctor must satisfy each group.

    Returns:
        A distinct DoctorProfile queryset ordered by doctor name.

    Raises:
        ValueError: If ``date_availability`` is not YYYY-MM-DD.
    """
    free_slots = TimeSlot.objects.filter(doctor=OuterRef("pk"), status=TimeSlot.Status.FREE)

    date_value = params.get("date_availability") or params.get("dateAvailability")
    if date_value:
        free_slots = free_slots.filter(date=_parse_date(date_value))

    qs = _base_qs().filter(
        Exists(free_slots),
        verification_status=DoctorProfile.Verification.VERIFIED,
    )

    for key, column in (("country", "country"), ("state", "state"), ("city", "city")):
        value = (params.get(key) or "").strip()
        if value:
            qs = qs.filter(**{f"{column}__icontains": value})

    speciality = (params.get("speciality") or "").strip()
    if speciality:
        qs = qs.filter(specialties__name__icontains=speciality)

    languages = _as_list(params.get("languages"))
    if languages:
        language_match = Q()
        for language in languages:
            language_match |= Q(languages__name__icontains=language)
        qs = qs.filter(language_match)

    gender = (params.get("gender") or "").strip()
    if gender:
        qs = qs.filter(gender=gender)

    hospital = (params.get("hospitals") or params.get("hospital") or "").strip()
    if hospital:
        qs = qs.filter(hospitals__name__icontains=hospital)

    availability = params.get("availability")
    if availability:
        qs = qs.filter(is_available=(availability == "true"))

    what = (params.get("what") or "").strip()
    if what:
        qs = qs.filter(
            Q(specialties__name__icontains=what)
            | Q(user__name__icontains=what)
            | Q(conditions__name__icontains=what)
        )

    where = (params.get("where") or "").strip()
    if where:
        qs = qs.filter(
            Q(city__icontains=where)
            | Q(state__icontains=where)
            | Q(country__icontains=where)
        )

    return qs.distinct().order_by("user__name")


def distinct_values(field):
    """
    Sorted, de-duplicated, non-empty values of one doctor attribute.

    Raises:
        KeyError: If ``field`` is not one of OPTION_FIELDS.
    """
    if field in _PROFILE_COLUMNS:
        column = _PROFILE_COLUMNS[field]
        values = (
            DoctorProfile.objects.exclude(**{column: ""})
            .order_by(column)
            .values_list(column, flat=True)
            .distinct()
        )
    elif field == "hospitals":
        values = Hospital.objects.order_by("name").values_list("name", flat=True).distinct()
    elif field == "languages":
        values = (
            Language.objects.filter(doctors__isnull=False)
            .order_by("name")
            .values_list("name", flat=True)
            .distinct()
        )
    elif field == "specialities":
        values = (
            Specialty.objects.filter(doctors__isnull=False)
            .order_by("name")
            .values_list("name", flat=True)
            .distinct()
        )
    else:
        raise KeyError(field)
    return list(values)


def what_options():
    """Names for the "what" search box: specialities, conditions and doctors."""
    conditions = (
        Condition.objects.filter(doctors__isnull=False)
        .order_by("name")
        .values_list("name", flat=True)
        .distinct()
    )
    doctors = DoctorProfile.objects.order_by("user__name").values_list("user__name", flat=True)
    return {
        "specialities": distinct_values("specialities"),
        "conditions": list(conditions),
        "doctors": list(doctors),
    }


def where_options():
    """Names for the "where" search box."""
    return {
        "cities": distinct_values("cities"),
        "states": distinct_values("states"),
        "countries": distinct_values("countries"),
    }


def list_verified_doctors(sort=None):
    """
    Verified doctors for the patient directory.

    ``sort`` is one of SORT_OPTIONS keys; anything else keeps the
    default ordering (by name).
    """
    qs = _base_qs().filter(verification_status=DoctorProfile.Verification.VERIFIED)
    order = SORT_OPTIONS.get(sort)
    if order:
        qs = qs.order_by(order, "user__name")
    return qs


def record_profile_view(profile):
    """Atomically bump the profile view counter."""
    DoctorProfile.objects.filter(pk=profile.pk).update(profile_views=F("profile_views") + 1)
    profile.refresh_from_db(fields=["profile_views"])


# ── Self-service ─────────────────────────────────────────────────────────────


def _sync_names(model, names):
    return [model.objects.get_or_create(name=name)[0] for name in names]


def _sync_hospitals(profile, hospitals):
    """
    Replace the doctor's hospitals with ``hospitals``.

    Hospitals still referenced by time slots are kept (and updated when
    present in the new list) so existing slots never lose their location.
    """
    keep_names = set()
    for data in hospitals:
        name = (data.get("name") or "").strip()
        if not name:
            continue
        keep_names.add(name)
        Hospital.objects.update_or_create(
            doctor=profile,
            name=name,
            defaults={
                "street": data.get("street", ""),
                "city": data.get("city", ""),
                "state": data.get("state", ""),
                "country": data.get("country", ""),
                "zip_code": data.get("zip_code") or data.get("zip", ""),
            },
        )

    stale = profile.hospitals.exclude(name__in=keep_names).filter(time_slots__isnull=True)
    stale.delete()


def update_doctor_profile(profile, data):
    """
    Apply a profile update.

    ``data`` is validated input: scalar profile fields, ``name`` / ``phone``
    for the user, list fields (specialities, languages, conditions) as
    strings or lists of names, and ``hospitals`` as a list of dicts.
    """
    scalar_fields = ("bio", "gender", "country", "state", "city", "is_available")

    with transaction.atomic():
        user = profile.user
        user_changed = []
        for field in ("name", "phone"):
            if field in data:
                setattr(user, field, data[field])
                user_changed.append(field)
        if user_changed:
            user.save(update_fields=user_changed)

        for field in scalar_fields:
            if field in data:
                setattr(profile, field, data[field])
        profile.save()

        if "specialities" in data:
            profile.specialties.set(_sync_names(Specialty, _as_list(data["specialities"])))
        if "languages" in data:
            profile.languages.set(_sync_names(Language, _as_list(data["languages"])))
        if "conditions" in data:
            profile.conditions.set(_sync_names(Condition, _as_list(data["conditions"])))
        if "hospitals" in data:
            hospitals = data["hospitals"]
            if isinstance(hospitals, dict):
                hospitals = [hospitals]
            _sync_hospitals(profile, hospitals or [])

    logger.info("[DOCTORS] Profile updated doctor_profile_id=%s", profile.id)
    return profile


def request_verification(profile):
    """
    Move the profile into the admin review queue.

    Raises:
        ValueError: The profile is already verified.
    """
    if profile.verification_status == DoctorProfile.Verification.VERIFIED:
        raise ValueError("Profile is already verified.")

    profile.verification_status = DoctorProfile.Verification.PENDING
    profile.save(update_fields=["verification_status"])
    logger.info("[DOCTORS] Verification requested doctor_profile_id=%s", profile.id)
    return profile


def request_subscription(profile, subscription_type, amount):
    """
    Record a subscription request for admin review.

    Raises:
        ValueError: ``amount`` is not a positive integer.
    """
    try:
        amount = int(amount)
    except (TypeError, ValueError):
        raise ValueError("Invalid payment amount")
    if amount <= 0:
        raise ValueError("Invalid payment amount")

    profile.subscription_type = subscription_type
    profile.subscription_amount = amount
    profile.subscription_status = DoctorProfile.Subscription.PENDING
    profile.save(update_fields=["subscription_type", "subscription_amount", "subscription_status"])
    logger.info(
        "[DOCTORS] Subscription requested doctor_profile_id=%s type=%s amount=%s",
        profile.id,
        subscription_type,
        amount,
    )
    return profile


def add_time_slot(profile, *, date, start_time, end_time, hospital):
    """
    Publish a new FREE slot at one of the doctor's hospitals.

    Raises:
        Hospital.DoesNotExist: ``hospital`` is not one of the doctor's hospitals.
        django.core.exceptions.ValidationError: Bad times or duplicate start.
    """
    selected = profile.hospitals.get(name=hospital)
    slot = TimeSlot.objects.create(
        doctor=profile,
        hospital=selected,
        date=date,
        start_time=start_time,
        end_time=end_time,
        status=TimeSlot.Status.FREE,
    )
    logger.info("[DOCTORS] Time slot added slot_id=%s doctor_profile_id=%s", slot.id, profile.id)
    return slot


def delete_time_slot(profile, slot_id):
    """
    Remove one of the doctor's own slots.

    Raises:
        TimeSlot.DoesNotExist: Not found or owned by another doctor.
        ValueError: The slot is booked.
    """
    slot = TimeSlot.objects.get(id=slot_id, doctor=profile)
    if slot.status == TimeSlot.Status.BOOKED:
        raise ValueError("Cannot delete a booked time slot.")
    slot.delete()
    logger.info("[DOCTORS] Time slot deleted slot_id=%s doctor_profile_id=%s", slot_id, profile.id)
