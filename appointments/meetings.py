"""
Google Meet links for video consultations.

Uses the Calendar REST API directly: the stored refresh token is
exchanged for an access token, then an event with a Meet conference
request is inserted and its ``hangoutLink`` returned.
"""

import logging
import uuid
from datetime import datetime
from urllib.parse import quote

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
REQUEST_TIMEOUT = 10


class MeetingLinkError(Exception):
    """Raised when Google Calendar refuses or fails to create the meeting."""

    def __init__(self, message="Unable to create Google Meet link", code="meeting_link_failed"):
        self.message = message
        self.code = code
        super().__init__(self.message)


def calendar_enabled():
    return all(
        getattr(settings, name, "")
        for name in ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "GOOGLE_REFRESH_TOKEN")
    )


def _get_access_token():
    try:
        response = requests.post(
            GOOGLE_TOKEN_URL,
            data={
                "client_id": settings.GOOGLE_CLIENT_ID,
                "client_secret": settings.GOOGLE_CLIENT_SECRET,
                "refresh_token": settings.GOOGLE_REFRESH_TOKEN,
                "grant_type": "refresh_token",
            },
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error("[CALENDAR] Token refresh request failed: %s", e)
        raise MeetingLinkError()

    if response.status_code != 200:
        logger.error("[CALENDAR] Token refresh failed status=%s body=%s", response.status_code, response.text)
        raise MeetingLinkError()

    access_token = response.json().get("access_token")
    if not access_token:
        logger.error("[CALENDAR] No access token in refresh response")
        raise MeetingLinkError()
    return access_token


def build_event(booking):
    doctor = booking.doctor
    patient = booking.patient
    start = datetime.combine(booking.date, booking.start_time)
    end = datetime.combine(booking.date, booking.end_time)
    return {
        "summary": f"Appointment with Dr. {doctor.name}",
        "description": f"Appointment with Dr. {doctor.name} and patient {patient.name}",
        "start": {"dateTime": start.isoformat(), "timeZone": settings.TIME_ZONE},
        "end": {"dateTime": end.isoformat(), "timeZone": settings.TIME_ZONE},
        "attendees": [{"email": doctor.email}, {"email": patient.email}],
        "conferenceData": {
            "createRequest": {
                "requestId": uuid.uuid4().hex,
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        },
    }


def create_meeting_link(booking):
    """
    Create a calendar event with a Meet conference for ``booking``.

    Returns:
        The Meet URL, or "" when Google Calendar is not configured.

    Raises:
        MeetingLinkError: The token refresh or event insert failed.
    """
    if not calendar_enabled():
        logger.info("[CALENDAR] Google Calendar not configured, no meeting link for booking_id=%s", booking.id)
        return ""

    access_token = _get_access_token()
    calendar_id = quote(settings.GOOGLE_CALENDAR_ID or "primary", safe="")

    try:
        response = requests.post(
            f"{GOOGLE_CALENDAR_API}/calendars/{calendar_id}/events",
            params={"conferenceDataVersion": 1},
            headers={"Authorization": f"Bearer {access_token}"},
            json=build_event(booking),
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error("[CALENDAR] Event insert request failed booking_id=%s: %s", booking.id, e)
        raise MeetingLinkError()

    if response.status_code not in (200, 201):
        logger.error(
            "[CALENDAR] Event insert failed booking_id=%s status=%s body=%s",
            booking.id,
            response.status_code,
            response.text,
        )
        raise MeetingLinkError()

    link = response.json().get("hangoutLink", "")
    if not link:
        logger.error("[CALENDAR] Event created without hangoutLink booking_id=%s", booking.id)
        raise MeetingLinkError()

    logger.info("[CALENDAR] Meeting link created booking_id=%s", booking.id)
    return link
