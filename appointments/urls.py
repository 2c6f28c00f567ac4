from django.urls import path
from . import api_views

app_name = "appointments"

urlpatterns = [
    # --- Patient ---
    path("book/", api_views.BookAppointmentAPIView.as_view(), name="api_book_appointment"),
    path("mine/", api_views.PatientBookingsAPIView.as_view(), name="api_patient_bookings"),
    path("calendar/", api_views.PatientCalendarAPIView.as_view(), name="api_patient_calendar"),
    path(
        "prescriptions/",
        api_views.PrescriptionsAPIView.as_view(),
        name="api_prescriptions",
    ),

    # --- Doctor ---
    path("doctor/", api_views.DoctorBookingsAPIView.as_view(), name="api_doctor_bookings"),
    path(
        "doctor/completed/",
        api_views.CompletedBookingsAPIView.as_view(),
        name="api_completed_bookings",
    ),
    path(
        "doctor/calendar/",
        api_views.DoctorCalendarAPIView.as_view(),
        name="api_doctor_calendar",
    ),
    path(
        "doctor/<int:booking_id>/status/",
        api_views.BookingStatusAPIView.as_view(),
        name="api_booking_status",
    ),
    path(
        "doctor/<int:booking_id>/prescription/",
        api_views.PrescriptionContextAPIView.as_view(),
        name="api_prescription_context",
    ),
    path(
        "patients/<int:patient_id>/prescriptions/",
        api_views.DoctorPatientPrescriptionsAPIView.as_view(),
        name="api_doctor_patient_prescriptions",
    ),

    # --- Notifications ---
    path(
        "notifications/",
        api_views.NotificationListAPIView.as_view(),
        name="api_notifications",
    ),
    path(
        "notifications/<int:notification_id>/read/",
        api_views.NotificationReadAPIView.as_view(),
        name="api_notification_read",
    ),
]
