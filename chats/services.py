"""
Doctor/patient chat.

A chat is created lazily the first time either side (or the booking
workflow) posts to a (doctor, patient) pair.
"""

import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from appointments.models import Notification
from .models import Chat, ChatMessage

logger = logging.getLogger(__name__)


class ChatError(Exception):
    def __init__(self, message, code="chat_error"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ChatPermissionError(ChatError):
    def __init__(self, message="You are not a participant in this chat."):
        super().__init__(message, code="not_participant")


def append_message(doctor, patient, sender, text, consultation_type=""):
    """Get-or-create the pair's chat, append ``text`` and bump updated_at."""
    with transaction.atomic():
        chat, created = Chat.objects.get_or_create(
            doctor=doctor,
            patient=patient,
            defaults={"consultation_type": consultation_type},
        )
        message = ChatMessage.objects.create(chat=chat, sender=sender, text=text)
        Chat.objects.filter(pk=chat.pk).update(updated_at=timezone.now())

    logger.info(
        "[CHAT] Message appended chat_id=%s sender_id=%s created=%s",
        chat.id,
        sender.id,
        created,
    )
    return message


def send_message(chat_id, user, text):
    """
    Post a message as one of the chat's participants.

    Raises:
        Chat.DoesNotExist: Unknown chat.
        ChatPermissionError: ``user`` is not the chat's doctor or patient.
        ChatError: Empty message.
    """
    chat = Chat.objects.select_related("doctor", "patient").get(id=chat_id)
    if not chat.has_participant(user):
        raise ChatPermissionError()

    text = (text or "").strip()
    if not text:
        raise ChatError("Message cannot be empty.", code="empty_message")

    message = append_message(chat.doctor, chat.patient, user, text)

    recipient = chat.other_participant(user)
    Notification.objects.create(
        user=recipient,
        message=f"New message from {user.name}",
        notification_type=Notification.Type.CHAT,
    )
    return message


def list_chats(user):
    return (
        Chat.objects.filter(Q(doctor=user) | Q(patient=user))
        .select_related("doctor", "patient")
        .order_by("-updated_at")
    )


def get_chat(chat_id, user):
    """
    Raises:
        Chat.DoesNotExist: Unknown chat.
        ChatPermissionError: ``user`` is not a participant.
    """
    chat = Chat.objects.select_related("doctor", "patient").get(id=chat_id)
    if not chat.has_participant(user):
        raise ChatPermissionError()
    return chat
