from django.core.exceptions import ValidationError
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsDoctor, IsPatient
from .models import DoctorProfile, Hospital, TimeSlot
from .serializers import (
    DoctorProfileDetailSerializer,
    DoctorProfileListSerializer,
    DoctorProfileUpdateSerializer,
    SubscriptionSerializer,
    TimeSlotCreateSerializer,
    TimeSlotSerializer,
)
from . import services


def _doctor_profile(user):
    try:
        return DoctorProfile.objects.select_related("user").get(user=user)
    except DoctorProfile.DoesNotExist:
        return None


def _not_found(thing="Doctor"):
    return Response({"detail": f"{thing} not found."}, status=status.HTTP_404_NOT_FOUND)


# --- Public discovery ---


class DoctorSearchAPIView(APIView):
    """
    GET /api/doctors/search/?what=&where=&country=&state=&city=&speciality=
        &languages=&gender=&hospitals=&availability=&date_availability=

    Public search over verified doctors with at least one free slot.
    """

    permission_classes = [AllowAny]

    def get(self, request):
        try:
            doctors = services.search_doctors(request.query_params)
            data = DoctorProfileListSerializer(doctors, many=True).data
        except ValueError:
            return Response(
                {"date_availability": "Invalid date format. Use YYYY-MM-DD."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response({"count": len(data), "results": data}, status=status.HTTP_200_OK)


class DoctorOptionsAPIView(APIView):
    """
    GET /api/doctors/options/<field>/

    Distinct values for a search drop-down (countries, states, cities,
    hospitals, languages, specialities, genders).
    """

    permission_classes = [AllowAny]

    def get(self, request, field):
        try:
            values = services.distinct_values(field)
        except KeyError:
            return Response(
                {"detail": f"Unknown option list '{field}'."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(values, status=status.HTTP_200_OK)


class WhatOptionsAPIView(APIView):
    """GET /api/doctors/options/what/"""

    permission_classes = [AllowAny]

    def get(self, request):
        return Response(services.what_options(), status=status.HTTP_200_OK)


class WhereOptionsAPIView(APIView):
    """GET /api/doctors/options/where/"""

    permission_classes = [AllowAny]

    def get(self, request):
        return Response(services.where_options(), status=status.HTTP_200_OK)


class DoctorListAPIView(APIView):
    """
    GET /api/doctors/?sort=mostReviewed|highestRated|mostViewed

    Verified doctors plus the option lists used by the directory filters.
    """

    permission_classes = [AllowAny]

    def get(self, request):
        doctors = services.list_verified_doctors(request.query_params.get("sort"))
        payload = {
            "results": DoctorProfileListSerializer(doctors, many=True).data,
        }
        for field in services.OPTION_FIELDS:
            payload[field] = services.distinct_values(field)
        return Response(payload, status=status.HTTP_200_OK)


class DoctorSlotsAPIView(APIView):
    """
    GET /api/doctors/<doctor_id>/slots/

    Patient view of one doctor's profile and time slots. Counts a view.
    """

    permission_classes = [IsPatient]

    def get(self, request, doctor_id):
        try:
            profile = DoctorProfile.objects.select_related("user").get(id=doctor_id)
        except DoctorProfile.DoesNotExist:
            return _not_found()

        services.record_profile_view(profile)
        return Response(DoctorProfileDetailSerializer(profile).data, status=status.HTTP_200_OK)


# --- Doctor self-service ---


class DoctorMeAPIView(APIView):
    """GET / PUT /api/doctors/me/"""

    permission_classes = [IsDoctor]

    def get(self, request):
        profile = _doctor_profile(request.user)
        if profile is None:
            return _not_found()
        return Response(DoctorProfileDetailSerializer(profile).data)

    def put(self, request):
        profile = _doctor_profile(request.user)
        if profile is None:
            return _not_found()

        serializer = DoctorProfileUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        services.update_doctor_profile(profile, serializer.validated_data)
        profile.refresh_from_db()
        return Response(DoctorProfileDetailSerializer(profile).data)


class DoctorHomeAPIView(APIView):
    """GET /api/doctors/me/home/: profile plus featured blogs."""

    permission_classes = [IsDoctor]

    def get(self, request):
        from blogs.serializers import BlogSerializer
        from blogs.services import priority_blogs

        profile = _doctor_profile(request.user)
        if profile is None:
            return _not_found()

        return Response(
            {
                "doctor": DoctorProfileListSerializer(profile).data,
                "blogs": BlogSerializer(priority_blogs()[:5], many=True).data,
            }
        )


class RequestVerificationAPIView(APIView):
    """POST /api/doctors/me/verify/"""

    permission_classes = [IsDoctor]

    def post(self, request):
        profile = _doctor_profile(request.user)
        if profile is None:
            return _not_found()

        try:
            services.request_verification(profile)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "detail": "Verification request sent. You will be notified once verified.",
                "verification_status": profile.verification_status,
            },
            status=status.HTTP_200_OK,
        )


class TimeSlotListCreateAPIView(APIView):
    """GET / POST /api/doctors/me/time-slots/"""

    permission_classes = [IsDoctor]

    def get(self, request):
        profile = _doctor_profile(request.user)
        if profile is None:
            return _not_found()

        slots = profile.time_slots.select_related("hospital")
        return Response({"results": TimeSlotSerializer(slots, many=True).data})

    def post(self, request):
        profile = _doctor_profile(request.user)
        if profile is None:
            return _not_found()

        serializer = TimeSlotCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            slot = services.add_time_slot(profile, **serializer.validated_data)
        except Hospital.DoesNotExist:
            return _not_found("Hospital")
        except ValidationError as e:
            return Response(
                {"detail": e.messages[0] if e.messages else "Invalid time slot."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(TimeSlotSerializer(slot).data, status=status.HTTP_201_CREATED)


class TimeSlotDeleteAPIView(APIView):
    """DELETE /api/doctors/me/time-slots/<slot_id>/"""

    permission_classes = [IsDoctor]

    def delete(self, request, slot_id):
        profile = _doctor_profile(request.user)
        if profile is None:
            return _not_found()

        try:
            services.delete_time_slot(profile, slot_id)
        except TimeSlot.DoesNotExist:
            return _not_found("Time slot")
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(status=status.HTTP_204_NO_CONTENT)


class SubscriptionAPIView(APIView):
    """POST /api/doctors/me/subscription/"""

    permission_classes = [IsDoctor]

    def post(self, request):
        profile = _doctor_profile(request.user)
        if profile is None:
            return _not_found()

        serializer = SubscriptionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            services.request_subscription(
                profile,
                serializer.validated_data["subscription_type"],
                serializer.validated_data["amount"],
            )
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "subscription_type": profile.subscription_type,
                "subscription_status": profile.subscription_status,
                "amount": profile.subscription_amount,
            },
            status=status.HTTP_200_OK,
        )
