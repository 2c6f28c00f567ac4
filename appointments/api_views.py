from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsDoctor, IsPatient
from .models import Notification
from .serializers import (
    BookAppointmentSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    CalendarSerializer,
    NotificationSerializer,
    PrescriptionCreateSerializer,
    PrescriptionSerializer,
)
from .services import (
    BookingError,
    MeetingLinkError,
    book_appointment,
    create_prescription,
    get_calendar,
    get_completed_bookings,
    get_doctor_bookings,
    get_patient_bookings,
    get_patient_prescriptions,
    list_notifications,
    mark_notification_read,
    prescription_context,
    update_booking_status,
)

# BookingError.code -> HTTP status; anything else is a 400.
ERROR_STATUS = {
    "slot_unavailable": status.HTTP_409_CONFLICT,
    "invalid_doctor": status.HTTP_404_NOT_FOUND,
    "invalid_patient": status.HTTP_404_NOT_FOUND,
    "not_found": status.HTTP_404_NOT_FOUND,
    "forbidden": status.HTTP_403_FORBIDDEN,
}


def _error_response(e):
    return Response(
        {"detail": e.message, "code": e.code},
        status=ERROR_STATUS.get(e.code, status.HTTP_400_BAD_REQUEST),
    )


# --- Patient ---


class BookAppointmentAPIView(APIView):
    """
    POST /api/appointments/book/

    Book one of a doctor's free time slots as a patient.

    Request body:
        {
            "doctor_id": 5,
            "date": "2026-02-20",
            "time": "10:00 - 10:30",
            "consultation_type": "VIDEO_CALL"
        }

    Success Response (201):
        The booking via BookingSerializer, status WAITING.

    Error Responses:
        400: Validation errors, past date or unknown slot.
        404: Doctor not found or not verified.
        409: Slot no longer available.
    """

    permission_classes = [IsPatient]

    def post(self, request):
        serializer = BookAppointmentSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            booking = book_appointment(
                patient=request.user,
                doctor_id=serializer.validated_data["doctor_id"],
                booking_date=serializer.validated_data["date"],
                time_range=serializer.validated_data["time"],
                consultation_type=serializer.validated_data["consultation_type"],
            )
        except BookingError as e:
            return _error_response(e)

        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


class PatientBookingsAPIView(APIView):
    """GET /api/appointments/mine/"""

    permission_classes = [IsPatient]

    def get(self, request):
        bookings = get_patient_bookings(request.user)
        return Response({"results": BookingSerializer(bookings, many=True).data})


class PatientCalendarAPIView(APIView):
    """GET /api/appointments/calendar/?month=1..12&year="""

    permission_classes = [IsPatient]

    def get(self, request):
        data = get_calendar(
            request.user,
            "PATIENT",
            month=request.query_params.get("month"),
            year=request.query_params.get("year"),
        )
        return Response(CalendarSerializer(data).data)


# --- Doctor ---


class DoctorBookingsAPIView(APIView):
    """GET /api/appointments/doctor/"""

    permission_classes = [IsDoctor]

    def get(self, request):
        bookings = get_doctor_bookings(request.user)
        return Response({"results": BookingSerializer(bookings, many=True).data})


class BookingStatusAPIView(APIView):
    """
    POST /api/appointments/doctor/<booking_id>/status/

    Request body:
        {"status": "ACCEPTED" | "REJECTED" | "WAITING"}

    The response status may be COMPLETED when the consultation has
    already ended.

    Error Responses:
        400: Unknown status.
        403: Booking belongs to another doctor.
        404: Booking not found.
        502: Meeting link could not be created.
    """

    permission_classes = [IsDoctor]

    def post(self, request, booking_id):
        serializer = BookingStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            booking = update_booking_status(
                booking_id, request.user, serializer.validated_data["status"]
            )
        except MeetingLinkError as e:
            return Response(
                {"detail": e.message, "code": e.code},
                status=status.HTTP_502_BAD_GATEWAY,
            )
        except BookingError as e:
            return _error_response(e)

        return Response(BookingSerializer(booking).data, status=status.HTTP_200_OK)


class CompletedBookingsAPIView(APIView):
    """GET /api/appointments/doctor/completed/"""

    permission_classes = [IsDoctor]

    def get(self, request):
        bookings = get_completed_bookings(request.user)
        return Response({"results": BookingSerializer(bookings, many=True).data})


class DoctorCalendarAPIView(APIView):
    """GET /api/appointments/doctor/calendar/?month=1..12&year="""

    permission_classes = [IsDoctor]

    def get(self, request):
        data = get_calendar(
            request.user,
            "DOCTOR",
            month=request.query_params.get("month"),
            year=request.query_params.get("year"),
        )
        return Response(CalendarSerializer(data).data)


class PrescriptionContextAPIView(APIView):
    """GET /api/appointments/doctor/<booking_id>/prescription/"""

    permission_classes = [IsDoctor]

    def get(self, request, booking_id):
        try:
            context = prescription_context(booking_id, request.user)
        except BookingError as e:
            return _error_response(e)
        return Response(context)


class PrescriptionsAPIView(APIView):
    """
    GET /api/appointments/prescriptions/ (patient): own prescriptions.

    POST /api/appointments/prescriptions/ (doctor): write a prescription.

    Request body:
        {
            "booking_id": 12,
            "patient_age": 34,
            "medicines": [
                {"name": "Amoxicillin", "dosage": "500mg", "after_food": true,
                 "morning": true, "night": true}
            ]
        }
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsDoctor()]
        return [IsPatient()]

    def get(self, request):
        prescriptions = get_patient_prescriptions(request.user.id)
        return Response({"results": PrescriptionSerializer(prescriptions, many=True).data})

    def post(self, request):
        serializer = PrescriptionCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            prescription = create_prescription(request.user, serializer.validated_data)
        except BookingError as e:
            return _error_response(e)

        return Response(PrescriptionSerializer(prescription).data, status=status.HTTP_201_CREATED)


class DoctorPatientPrescriptionsAPIView(APIView):
    """GET /api/appointments/patients/<patient_id>/prescriptions/"""

    permission_classes = [IsDoctor]

    def get(self, request, patient_id):
        try:
            prescriptions = get_patient_prescriptions(patient_id, doctor=request.user)
        except BookingError as e:
            return _error_response(e)
        return Response({"results": PrescriptionSerializer(prescriptions, many=True).data})


# --- Notifications (any role) ---


class NotificationListAPIView(APIView):
    """GET /api/appointments/notifications/"""

    def get(self, request):
        notifications = list_notifications(request.user)
        return Response({"results": NotificationSerializer(notifications, many=True).data})


class NotificationReadAPIView(APIView):
    """POST /api/appointments/notifications/<notification_id>/read/"""

    def post(self, request, notification_id):
        try:
            notification = mark_notification_read(request.user, notification_id)
        except Notification.DoesNotExist:
            return Response(
                {"detail": "Notification not found."}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(NotificationSerializer(notification).data)
