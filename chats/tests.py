from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework import status

from accounts.services import register_user
from appointments.models import Notification
from .models import Chat, ChatMessage
from .services import (
    ChatError,
    ChatPermissionError,
    append_message,
    list_chats,
    send_message,
)


class ChatTestMixin:
    def setUp(self):
        self.doctor = register_user(
            email="ahmad@example.com", name="Ahmad Saleh", password="testpass123", role="DOCTOR"
        )
        self.patient = register_user(
            email="ali@example.com", name="Patient Ali", password="testpass123"
        )
        self.stranger = register_user(
            email="mona@example.com", name="Patient Mona", password="testpass123"
        )
        self.first = append_message(
            self.doctor, self.patient, self.doctor, "Welcome", consultation_type="Video call"
        )
        self.chat = self.first.chat


class ChatServiceTests(ChatTestMixin, TestCase):

    def test_append_reuses_chat_for_pair(self):
        append_message(self.doctor, self.patient, self.patient, "Thanks doctor")

        self.assertEqual(Chat.objects.count(), 1)
        self.assertEqual(
            list(self.chat.messages.values_list("text", flat=True)),
            ["Welcome", "Thanks doctor"],
        )
        self.chat.refresh_from_db()
        self.assertEqual(self.chat.consultation_type, "Video call")

    def test_send_message_notifies_other_side(self):
        message = send_message(self.chat.id, self.patient, "  See you tomorrow  ")

        self.assertEqual(message.text, "See you tomorrow")
        self.assertEqual(message.sender, self.patient)
        notification = Notification.objects.get(user=self.doctor)
        self.assertEqual(notification.notification_type, Notification.Type.CHAT)
        self.assertIn("Patient Ali", notification.message)

    def test_send_message_rejects_stranger(self):
        with self.assertRaises(ChatPermissionError):
            send_message(self.chat.id, self.stranger, "hello")
        self.assertEqual(ChatMessage.objects.count(), 1)

    def test_send_empty_message(self):
        with self.assertRaises(ChatError) as ctx:
            send_message(self.chat.id, self.doctor, "   ")
        self.assertEqual(ctx.exception.code, "empty_message")

    def test_list_chats_most_recent_first(self):
        other_patient_chat = append_message(self.doctor, self.stranger, self.doctor, "Hi").chat
        append_message(self.doctor, self.patient, self.patient, "Bump")

        self.assertEqual(
            [c.id for c in list_chats(self.doctor)],
            [self.chat.id, other_patient_chat.id],
        )
        self.assertEqual([c.id for c in list_chats(self.stranger)], [other_patient_chat.id])


class ChatAPITests(ChatTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def test_list(self):
        self.client.force_authenticate(user=self.patient)
        response = self.client.get(reverse("chats:api_chat_list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["results"][0]["doctor_name"], "Ahmad Saleh")

    def test_detail_includes_messages(self):
        self.client.force_authenticate(user=self.doctor)
        response = self.client.get(reverse("chats:api_chat_detail", kwargs={"chat_id": self.chat.id}))
        self.assertEqual([m["text"] for m in response.data["messages"]], ["Welcome"])

    def test_detail_forbidden_for_stranger(self):
        self.client.force_authenticate(user=self.stranger)
        response = self.client.get(reverse("chats:api_chat_detail", kwargs={"chat_id": self.chat.id}))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_detail_not_found(self):
        self.client.force_authenticate(user=self.doctor)
        response = self.client.get(reverse("chats:api_chat_detail", kwargs={"chat_id": self.chat.id + 50}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_send(self):
        self.client.force_authenticate(user=self.patient)
        url = reverse("chats:api_send_message", kwargs={"chat_id": self.chat.id})

        response = self.client.post(url, {"text": "Is 9am fine?"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["sender_name"], "Patient Ali")

        response = self.client.post(url, {"text": ""}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "empty_message")

    def test_send_requires_auth(self):
        url = reverse("chats:api_send_message", kwargs={"chat_id": self.chat.id})
        response = self.client.post(url, {"text": "hi"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
