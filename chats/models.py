from django.db import models
from django.conf import settings


class Chat(models.Model):
    """One conversation per (doctor, patient) pair."""

    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chats_as_doctor",
    )
    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chats_as_patient",
    )
    consultation_type = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["doctor", "patient"],
                name="unique_chat_per_doctor_patient",
            )
        ]

    def __str__(self):
        return f"Chat: Dr. {self.doctor.name} / {self.patient.name}"

    def has_participant(self, user):
        return user.id in (self.doctor_id, self.patient_id)

    def other_participant(self, user):
        return self.patient if user.id == self.doctor_id else self.doctor


class ChatMessage(models.Model):
    chat = models.ForeignKey(Chat, on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_messages",
    )
    text = models.TextField()
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["timestamp", "id"]

    def __str__(self):
        return f"{self.sender.name}: {self.text[:40]}"
