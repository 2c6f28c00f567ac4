"""
Appointment status emails, sent through the Brevo transport in
accounts.email_utils. Every function returns True when the email was
handed to Brevo and False otherwise; failures are logged, never raised.
"""

import logging

from django.conf import settings
from sib_api_v3_sdk.rest import ApiException

from accounts.email_utils import _send_email

logger = logging.getLogger(__name__)


def _signature():
    team = f"{settings.EMAIL_SENDER_NAME} Team"
    return f"<p>Best regards,</p><p>{team}</p>", f"Best regards,\n{team}"


def _when(booking):
    return f"{booking.date:%a %b %d %Y} at {booking.time_range}"


def _deliver(to_user, subject, paragraphs):
    html_sig, text_sig = _signature()
    html_content = "".join(f"<p>{p}</p>" for p in paragraphs) + html_sig
    text_content = "\n\n".join(paragraphs) + "\n\n" + text_sig

    try:
        sent = _send_email(to_user.email, subject, html_content, text_content, to_name=to_user.name)
    except ApiException as e:
        logger.error("[EMAIL] Brevo API error sending '%s' to %s: %s", subject, to_user.email, e)
        return False

    if sent:
        logger.info("[EMAIL] '%s' sent to %s", subject, to_user.email)
    return sent


def send_video_confirmation(booking):
    patient, doctor = booking.patient, booking.doctor
    link = booking.meeting_link
    return _deliver(
        patient,
        "Appointment Confirmation",
        [
            f"Dear {patient.name},",
            f"Your appointment with Dr. {doctor.name} on {_when(booking)} has been confirmed.",
            f"Join the meeting using the following link: <a href=\"{link}\">{link}</a>",
        ],
    )


def send_doctor_video_confirmation(booking):
    patient, doctor = booking.patient, booking.doctor
    link = booking.meeting_link
    return _deliver(
        doctor,
        "Appointment Confirmation Notification",
        [
            f"Dear Dr. {doctor.name},",
            f"The appointment with {patient.name} on {_when(booking)} has been confirmed.",
            f"Join the meeting using the following link: <a href=\"{link}\">{link}</a>",
        ],
    )


def send_in_person_confirmation(booking):
    patient, doctor = booking.patient, booking.doctor
    return _deliver(
        patient,
        "Appointment Confirmation",
        [
            f"Dear {patient.name},",
            f"Your appointment with Dr. {doctor.name} on {_when(booking)} has been confirmed.",
            f"Please visit the hospital at {hospital_location(booking)}",
        ],
    )


def send_rejection(booking):
    patient, doctor = booking.patient, booking.doctor
    return _deliver(
        patient,
        "Appointment Rejection",
        [
            f"Dear {patient.name},",
            f"We regret to inform you that your appointment with Dr. {doctor.name} "
            f"on {_when(booking)} has been rejected.",
            "Please contact us for further assistance.",
        ],
    )


def hospital_location(booking):
    hospital = booking.hospital
    if hospital is None:
        return "the doctor's practice"
    if hospital.address:
        return f"{hospital.name}, {hospital.address}"
    return hospital.name
