"""
URL configuration for wellness_site project.

Every app exposes its JSON API under /api/<app>/.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/accounts/", include("accounts.urls")),
    path("api/doctors/", include("doctors.urls")),
    path("api/patients/", include("patients.urls")),
    path("api/appointments/", include("appointments.urls")),
    path("api/chats/", include("chats.urls")),
    path("api/blogs/", include("blogs.urls")),
]
