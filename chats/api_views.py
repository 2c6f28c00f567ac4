from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Chat
from .serializers import (
    ChatDetailSerializer,
    ChatMessageSerializer,
    ChatSerializer,
    SendMessageSerializer,
)
from .services import ChatError, ChatPermissionError, get_chat, list_chats, send_message


def _chat_not_found():
    return Response({"detail": "Chat not found."}, status=status.HTTP_404_NOT_FOUND)


class ChatListAPIView(APIView):
    """GET /api/chats/: the user's chats, most recent first."""

    def get(self, request):
        chats = list_chats(request.user)
        return Response({"results": ChatSerializer(chats, many=True).data})


class ChatDetailAPIView(APIView):
    """GET /api/chats/<chat_id>/"""

    def get(self, request, chat_id):
        try:
            chat = get_chat(chat_id, request.user)
        except Chat.DoesNotExist:
            return _chat_not_found()
        except ChatPermissionError as e:
            return Response({"detail": e.message, "code": e.code}, status=status.HTTP_403_FORBIDDEN)

        return Response(ChatDetailSerializer(chat).data)


class SendMessageAPIView(APIView):
    """
    POST /api/chats/<chat_id>/messages/

    Request body:
        {"text": "See you tomorrow"}
    """

    def post(self, request, chat_id):
        serializer = SendMessageSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            message = send_message(chat_id, request.user, serializer.validated_data["text"])
        except Chat.DoesNotExist:
            return _chat_not_found()
        except ChatPermissionError as e:
            return Response({"detail": e.message, "code": e.code}, status=status.HTTP_403_FORBIDDEN)
        except ChatError as e:
            return Response({"detail": e.message, "code": e.code}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ChatMessageSerializer(message).data, status=status.HTTP_201_CREATED)
