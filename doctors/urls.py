from django.urls import path
from . import api_views

app_name = "doctors"

urlpatterns = [
    # --- Public discovery ---
    path("", api_views.DoctorListAPIView.as_view(), name="api_doctor_list"),
    path("search/", api_views.DoctorSearchAPIView.as_view(), name="api_doctor_search"),
    path("options/what/", api_views.WhatOptionsAPIView.as_view(), name="api_what_options"),
    path("options/where/", api_views.WhereOptionsAPIView.as_view(), name="api_where_options"),
    path("options/<str:field>/", api_views.DoctorOptionsAPIView.as_view(), name="api_doctor_options"),
    path("<int:doctor_id>/slots/", api_views.DoctorSlotsAPIView.as_view(), name="api_doctor_slots"),
    # --- Doctor self-service ---
    path("me/", api_views.DoctorMeAPIView.as_view(), name="api_doctor_me"),
    path("me/home/", api_views.DoctorHomeAPIView.as_view(), name="api_doctor_home"),
    path("me/verify/", api_views.RequestVerificationAPIView.as_view(), name="api_doctor_verify"),
    path("me/time-slots/", api_views.TimeSlotListCreateAPIView.as_view(), name="api_time_slots"),
    path(
        "me/time-slots/<int:slot_id>/",
        api_views.TimeSlotDeleteAPIView.as_view(),
        name="api_time_slot_delete",
    ),
    path("me/subscription/", api_views.SubscriptionAPIView.as_view(), name="api_doctor_subscription"),
]
