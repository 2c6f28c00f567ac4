from django.contrib import admin
from .models import EmergencyContact, PatientProfile


class EmergencyContactInline(admin.TabularInline):
    model = EmergencyContact
    extra = 0
    fields = ["name", "relationship", "phone", "email"]


@admin.register(PatientProfile)
class PatientProfileAdmin(admin.ModelAdmin):
    list_display = ["user", "age", "gender", "blood_type", "favorite_count"]
    list_filter = ["gender", "blood_type"]
    search_fields = ["user__name", "user__email"]
    raw_id_fields = ["user"]
    filter_horizontal = ["favorite_doctors"]
    inlines = [EmergencyContactInline]

    fieldsets = (
        (None, {"fields": ("user",)}),
        ("Personal Information", {"fields": ("date_of_birth", "gender", "blood_type")}),
        ("Medical Information", {"fields": ("medical_history", "allergies")}),
        ("Favorite Doctors", {"fields": ("favorite_doctors",)}),
    )

    @admin.display(description="Favorites")
    def favorite_count(self, obj):
        return obj.favorite_doctors.count()
