from rest_framework import serializers
from .models import Chat, ChatMessage


class ChatMessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source="sender.name", read_only=True)

    class Meta:
        model = ChatMessage
        fields = ["id", "sender", "sender_name", "text", "timestamp"]


class ChatSerializer(serializers.ModelSerializer):
    doctor_name = serializers.CharField(source="doctor.name", read_only=True)
    patient_name = serializers.CharField(source="patient.name", read_only=True)

    class Meta:
        model = Chat
        fields = [
            "id",
            "doctor",
            "doctor_name",
            "patient",
            "patient_name",
            "consultation_type",
            "created_at",
            "updated_at",
        ]


class ChatDetailSerializer(ChatSerializer):
    messages = ChatMessageSerializer(many=True, read_only=True)

    class Meta(ChatSerializer.Meta):
        fields = ChatSerializer.Meta.fields + ["messages"]


class SendMessageSerializer(serializers.Serializer):
    text = serializers.CharField(allow_blank=True, trim_whitespace=True)
