from django.contrib import admin
from .models import Chat, ChatMessage


class ChatMessageInline(admin.TabularInline):
    model = ChatMessage
    extra = 0
    readonly_fields = ["sender", "text", "timestamp"]


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    list_display = ["doctor", "patient", "consultation_type", "updated_at"]
    search_fields = ["doctor__name", "patient__name"]
    raw_id_fields = ["doctor", "patient"]
    inlines = [ChatMessageInline]
