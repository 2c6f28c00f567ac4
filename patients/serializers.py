from rest_framework import serializers
from .models import EmergencyContact, PatientProfile


class EmergencyContactSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmergencyContact
        fields = ["name", "relationship", "phone", "email"]
        extra_kwargs = {
            "relationship": {"required": False},
            "phone": {"required": False},
            "email": {"required": False},
        }


class PatientProfileSerializer(serializers.ModelSerializer):
    """
    Serializer for the Patient Profile.
    Combines data from the User model and the PatientProfile model.
    """

    # Fields from CustomUser
    name = serializers.CharField(source="user.name")
    phone = serializers.CharField(source="user.phone")
    email = serializers.EmailField(source="user.email")
    emergency_contacts = EmergencyContactSerializer(many=True, read_only=True)
    favorite_doctors = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = PatientProfile
        fields = [
            "id",
            "name",
            "phone",
            "email",
            "date_of_birth",
            "age",
            "gender",
            "blood_type",
            "medical_history",
            "allergies",
            "emergency_contacts",
            "favorite_doctors",
        ]


class EmergencyContactsField(serializers.Field):
    """A list of contacts; any non-list value means "clear them"."""

    def to_internal_value(self, data):
        if not isinstance(data, list):
            return None
        serializer = EmergencyContactSerializer(data=data, many=True)
        serializer.is_valid(raise_exception=True)
        return list(serializer.validated_data)

    def to_representation(self, value):
        return value


class PatientProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    gender = serializers.ChoiceField(
        choices=PatientProfile.GENDER_CHOICES, required=False, allow_blank=True
    )
    blood_type = serializers.ChoiceField(
        choices=PatientProfile.BLOOD_TYPE_CHOICES, required=False, allow_blank=True
    )
    medical_history = serializers.CharField(required=False, allow_blank=True)
    allergies = serializers.CharField(required=False, allow_blank=True)
    emergency_contacts = EmergencyContactsField(required=False, allow_null=True)


class FavoriteDoctorSerializer(serializers.Serializer):
    doctor_id = serializers.IntegerField()
