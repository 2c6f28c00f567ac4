from rest_framework import serializers
from .models import DoctorProfile, Hospital, TimeSlot


class HospitalSerializer(serializers.ModelSerializer):
    """Serializer for a doctor's hospital / practice location."""

    address = serializers.CharField(read_only=True)

    class Meta:
        model = Hospital
        fields = ["id", "name", "street", "city", "state", "country", "zip_code", "address"]


class TimeSlotSerializer(serializers.ModelSerializer):
    hospital = serializers.CharField(source="hospital.name", read_only=True)
    hospital_address = serializers.CharField(source="hospital.address", read_only=True)
    start_time = serializers.TimeField(format="%H:%M")
    end_time = serializers.TimeField(format="%H:%M")

    class Meta:
        model = TimeSlot
        fields = ["id", "date", "start_time", "end_time", "status", "hospital", "hospital_address"]


class DoctorProfileListSerializer(serializers.ModelSerializer):
    """
    Serializer for doctor listing, used in browse/search views.
    Includes user info, specialities, languages and hospitals.
    """

    user_id = serializers.IntegerField(source="user.id", read_only=True)
    name = serializers.CharField(source="user.name")
    email = serializers.EmailField(source="user.email")
    specialities = serializers.SlugRelatedField(
        source="specialties", slug_field="name", many=True, read_only=True
    )
    languages = serializers.SlugRelatedField(slug_field="name", many=True, read_only=True)
    conditions = serializers.SlugRelatedField(slug_field="name", many=True, read_only=True)
    hospitals = HospitalSerializer(many=True, read_only=True)

    class Meta:
        model = DoctorProfile
        fields = [
            "id",
            "user_id",
            "name",
            "email",
            "gender",
            "bio",
            "country",
            "state",
            "city",
            "specialities",
            "languages",
            "conditions",
            "hospitals",
            "is_available",
            "rating",
            "consultations_completed",
            "profile_views",
            "verification_status",
        ]


class DoctorProfileDetailSerializer(DoctorProfileListSerializer):
    """List serializer plus the doctor's time slots and subscription state."""

    time_slots = TimeSlotSerializer(many=True, read_only=True)

    class Meta(DoctorProfileListSerializer.Meta):
        fields = DoctorProfileListSerializer.Meta.fields + [
            "subscription_type",
            "subscription_status",
            "time_slots",
        ]


class HospitalInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    street = serializers.CharField(required=False, allow_blank=True, default="")
    city = serializers.CharField(required=False, allow_blank=True, default="")
    state = serializers.CharField(required=False, allow_blank=True, default="")
    country = serializers.CharField(required=False, allow_blank=True, default="")
    zip_code = serializers.CharField(required=False, allow_blank=True, default="")


class StringOrListField(serializers.Field):
    """Accepts "a", "a,b" or ["a", "b"] and yields a list of strings."""

    def to_internal_value(self, data):
        if isinstance(data, str):
            return [item.strip() for item in data.split(",") if item.strip()]
        if isinstance(data, (list, tuple)):
            return [str(item).strip() for item in data if str(item).strip()]
        raise serializers.ValidationError("Expected a string or a list of strings.")

    def to_representation(self, value):
        return value


class DoctorProfileUpdateSerializer(serializers.Serializer):
    """Request serializer for PUT /api/doctors/me/ (all fields optional)."""

    name = serializers.CharField(max_length=255, required=False)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    bio = serializers.CharField(required=False, allow_blank=True)
    gender = serializers.ChoiceField(choices=DoctorProfile.GENDER_CHOICES, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    is_available = serializers.BooleanField(required=False)
    specialities = StringOrListField(required=False)
    languages = StringOrListField(required=False)
    conditions = StringOrListField(required=False)
    hospitals = HospitalInputSerializer(many=True, required=False)


class TimeSlotCreateSerializer(serializers.Serializer):
    date = serializers.DateField(help_text="Slot date in YYYY-MM-DD format.")
    start_time = serializers.TimeField(help_text="Start time in HH:MM format.")
    end_time = serializers.TimeField(help_text="End time in HH:MM format.")
    hospital = serializers.CharField(help_text="Name of one of the doctor's hospitals.")

    def validate(self, attrs):
        if attrs["start_time"] >= attrs["end_time"]:
            raise serializers.ValidationError({"end_time": "End time must be after start time."})
        return attrs


class SubscriptionSerializer(serializers.Serializer):
    subscription_type = serializers.CharField(max_length=50)
    amount = serializers.CharField()
