from django.contrib import admin
from .models import Booking, Medicine, Notification, Prescription


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "patient",
        "doctor",
        "hospital",
        "date",
        "start_time",
        "end_time",
        "consultation_type",
        "status",
    ]
    list_filter = ["status", "consultation_type", "date"]
    search_fields = ["patient__name", "patient__email", "doctor__name", "doctor__email"]
    raw_id_fields = ["patient", "doctor", "hospital"]
    date_hierarchy = "date"
    readonly_fields = ["created_at", "updated_at"]

    fieldsets = (
        (None, {"fields": ("patient", "doctor", "hospital")}),
        ("Schedule", {"fields": ("date", "start_time", "end_time", "consultation_type")}),
        ("Status", {"fields": ("status", "meeting_link")}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )


class MedicineInline(admin.TabularInline):
    model = Medicine
    extra = 0


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ["id", "patient_name", "doctor_name", "meeting_date", "created_at"]
    search_fields = ["patient_name", "doctor_name", "doctor_email"]
    raw_id_fields = ["booking", "patient", "doctor"]
    inlines = [MedicineInline]


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["user", "notification_type", "is_read", "created_at"]
    list_filter = ["notification_type", "is_read"]
    search_fields = ["user__name", "user__email", "message"]
    raw_id_fields = ["user", "booking"]
