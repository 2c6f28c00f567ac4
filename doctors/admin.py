from django.contrib import admin
from .models import (
    Condition,
    DoctorProfile,
    Hospital,
    Language,
    Specialty,
    TimeSlot,
)


@admin.register(Specialty)
class SpecialtyAdmin(admin.ModelAdmin):
    list_display = ["name", "description"]
    search_fields = ["name"]
    ordering = ["name"]


@admin.register(Language)
class LanguageAdmin(admin.ModelAdmin):
    search_fields = ["name"]


@admin.register(Condition)
class ConditionAdmin(admin.ModelAdmin):
    search_fields = ["name"]


class HospitalInline(admin.TabularInline):
    model = Hospital
    extra = 0


@admin.register(DoctorProfile)
class DoctorProfileAdmin(admin.ModelAdmin):
    list_display = [
        "user",
        "city",
        "country",
        "verification_status",
        "subscription_type",
        "subscription_status",
        "rating",
    ]
    list_filter = ["verification_status", "subscription_status", "specialties", "country"]
    search_fields = ["user__name", "user__email", "city", "state", "country"]
    raw_id_fields = ["user"]
    filter_horizontal = ["specialties", "languages", "conditions"]
    inlines = [HospitalInline]
    actions = [
        "mark_verified",
        "mark_rejected",
        "activate_subscription",
        "reject_subscription",
    ]

    @admin.action(description="Verify selected doctors")
    def mark_verified(self, request, queryset):
        updated = queryset.update(verification_status=DoctorProfile.Verification.VERIFIED)
        self.message_user(request, f"{updated} doctor(s) verified.")

    @admin.action(description="Reject verification for selected doctors")
    def mark_rejected(self, request, queryset):
        updated = queryset.update(verification_status=DoctorProfile.Verification.REJECTED)
        self.message_user(request, f"{updated} doctor(s) rejected.")

    @admin.action(description="Activate pending subscriptions")
    def activate_subscription(self, request, queryset):
        updated = queryset.filter(subscription_status=DoctorProfile.Subscription.PENDING).update(
            subscription_status=DoctorProfile.Subscription.ACTIVE
        )
        self.message_user(request, f"{updated} subscription(s) activated.")

    @admin.action(description="Reject pending subscriptions")
    def reject_subscription(self, request, queryset):
        updated = queryset.filter(subscription_status=DoctorProfile.Subscription.PENDING).update(
            subscription_status=DoctorProfile.Subscription.REJECTED
        )
        self.message_user(request, f"{updated} subscription(s) rejected.")


@admin.register(TimeSlot)
class TimeSlotAdmin(admin.ModelAdmin):
    list_display = ["doctor", "hospital", "date", "start_time", "end_time", "status"]
    list_filter = ["status", "date"]
    search_fields = ["doctor__user__name", "hospital__name"]
    raw_id_fields = ["doctor", "hospital"]
    date_hierarchy = "date"
    ordering = ["-date", "start_time"]
