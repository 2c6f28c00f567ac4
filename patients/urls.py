from django.urls import path
from . import api_views

app_name = "patients"

urlpatterns = [
    path("me/", api_views.PatientProfileAPIView.as_view(), name="api_patient_me"),
    path(
        "me/favorites/",
        api_views.FavoriteDoctorsAPIView.as_view(),
        name="api_patient_favorites",
    ),
]
