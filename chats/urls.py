from django.urls import path
from . import api_views

app_name = "chats"

urlpatterns = [
    path("", api_views.ChatListAPIView.as_view(), name="api_chat_list"),
    path("<int:chat_id>/", api_views.ChatDetailAPIView.as_view(), name="api_chat_detail"),
    path(
        "<int:chat_id>/messages/",
        api_views.SendMessageAPIView.as_view(),
        name="api_send_message",
    ),
]
