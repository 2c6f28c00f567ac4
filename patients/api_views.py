from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsPatient
from doctors.models import DoctorProfile
from doctors.serializers import DoctorProfileListSerializer
from .models import PatientProfile
from .serializers import (
    FavoriteDoctorSerializer,
    PatientProfileSerializer,
    PatientProfileUpdateSerializer,
)
from . import services


def _patient_profile(user):
    try:
        return PatientProfile.objects.select_related("user").get(user=user)
    except PatientProfile.DoesNotExist:
        return None


def _profile_not_found():
    return Response(
        {"detail": "Patient profile not found."},
        status=status.HTTP_404_NOT_FOUND,
    )


class PatientProfileAPIView(APIView):
    """
    API endpoint for patients to view and update their own profile.
    """

    permission_classes = [IsPatient]

    def get(self, request):
        patient_profile = _patient_profile(request.user)
        if patient_profile is None:
            return _profile_not_found()

        serializer = PatientProfileSerializer(patient_profile)
        return Response(serializer.data)

    def put(self, request):
        patient_profile = _patient_profile(request.user)
        if patient_profile is None:
            return _profile_not_found()

        serializer = PatientProfileUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        services.update_patient_profile(patient_profile, serializer.validated_data)
        patient_profile.refresh_from_db()
        return Response(PatientProfileSerializer(patient_profile).data)


class FavoriteDoctorsAPIView(APIView):
    """GET / POST /api/patients/me/favorites/"""

    permission_classes = [IsPatient]

    def get(self, request):
        patient_profile = _patient_profile(request.user)
        if patient_profile is None:
            return _profile_not_found()

        doctors = services.favorite_doctors(patient_profile)
        return Response({"results": DoctorProfileListSerializer(doctors, many=True).data})

    def post(self, request):
        patient_profile = _patient_profile(request.user)
        if patient_profile is None:
            return _profile_not_found()

        serializer = FavoriteDoctorSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            doctor = services.add_favorite_doctor(
                patient_profile, serializer.validated_data["doctor_id"]
            )
        except DoctorProfile.DoesNotExist:
            return Response({"detail": "Doctor not found."}, status=status.HTTP_404_NOT_FOUND)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {"detail": "Doctor added to favorites", "doctor": DoctorProfileListSerializer(doctor).data},
            status=status.HTTP_201_CREATED,
        )
