from rest_framework import serializers
from .models import Booking, Medicine, Notification, Prescription


class BookAppointmentSerializer(serializers.Serializer):
    """
    Request serializer for booking an appointment.

    Validates incoming data from the patient before passing
    to the booking service for business-logic validation.
    """

    doctor_id = serializers.IntegerField(help_text="DoctorProfile id.")
    date = serializers.DateField(help_text="Slot date in YYYY-MM-DD format.")
    time = serializers.CharField(help_text='Slot time range, e.g. "09:00 - 09:30".')
    consultation_type = serializers.ChoiceField(choices=Booking.ConsultationType.choices)


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.CharField()

    def validate_status(self, value):
        return value.strip().upper()


class BookingSerializer(serializers.ModelSerializer):
    """
    Response serializer for a booking, used by both the patient and the
    doctor lists.
    """

    patient_name = serializers.CharField(source="patient.name", read_only=True)
    patient_email = serializers.EmailField(source="patient.email", read_only=True)
    doctor_name = serializers.CharField(source="doctor.name", read_only=True)
    hospital_name = serializers.CharField(source="hospital.name", read_only=True, default=None)
    hospital_address = serializers.CharField(source="hospital.address", read_only=True, default=None)
    time = serializers.CharField(source="time_range", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    consultation_type_display = serializers.CharField(
        source="get_consultation_type_display", read_only=True
    )

    class Meta:
        model = Booking
        fields = [
            "id",
            "patient",
            "patient_name",
            "patient_email",
            "doctor",
            "doctor_name",
            "hospital",
            "hospital_name",
            "hospital_address",
            "date",
            "time",
            "consultation_type",
            "consultation_type_display",
            "status",
            "status_display",
            "meeting_link",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CalendarSerializer(serializers.Serializer):
    month = serializers.IntegerField()
    year = serializers.IntegerField()
    month_name = serializers.CharField()
    days_in_month = serializers.IntegerField()
    today = serializers.DateField()
    bookings = BookingSerializer(many=True)


class MedicineSerializer(serializers.ModelSerializer):
    class Meta:
        model = Medicine
        fields = ["id", "name", "dosage", "before_food", "after_food", "morning", "afternoon", "night"]


class PrescriptionSerializer(serializers.ModelSerializer):
    medicines = MedicineSerializer(many=True, read_only=True)

    class Meta:
        model = Prescription
        fields = [
            "id",
            "booking",
            "patient",
            "doctor",
            "patient_name",
            "doctor_name",
            "doctor_speciality",
            "doctor_email",
            "patient_age",
            "meeting_date",
            "meeting_time",
            "medicines",
            "created_at",
        ]


class MedicineInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    dosage = serializers.CharField(max_length=255, required=False, allow_blank=True)
    before_food = serializers.BooleanField(required=False)
    after_food = serializers.BooleanField(required=False)
    morning = serializers.BooleanField(required=False)
    afternoon = serializers.BooleanField(required=False)
    night = serializers.BooleanField(required=False)
    timing = serializers.DictField(child=serializers.BooleanField(), required=False)


class PrescriptionCreateSerializer(serializers.Serializer):
    """Request serializer for POST /api/appointments/prescriptions/."""

    booking_id = serializers.IntegerField(required=False, allow_null=True)
    patient_id = serializers.IntegerField(required=False, allow_null=True)
    patient_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    doctor_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    doctor_speciality = serializers.CharField(max_length=255, required=False, allow_blank=True)
    doctor_email = serializers.EmailField(required=False, allow_blank=True)
    patient_age = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    meeting_date = serializers.DateField(required=False, allow_null=True)
    meeting_time = serializers.CharField(max_length=20, required=False, allow_blank=True)
    medicines = MedicineInputSerializer(many=True)

    def validate(self, attrs):
        if not attrs.get("booking_id") and not attrs.get("patient_id"):
            raise serializers.ValidationError("Either booking_id or patient_id is required.")
        return attrs


class NotificationSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source="notification_type", read_only=True)
    read = serializers.BooleanField(source="is_read", read_only=True)

    class Meta:
        model = Notification
        fields = ["id", "message", "type", "read", "booking", "created_at"]
