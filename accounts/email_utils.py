import logging

import sib_api_v3_sdk
from sib_api_v3_sdk.rest import ApiException
from django.conf import settings
from django.core.signing import TimestampSigner, BadSignature, SignatureExpired
from django.urls import reverse

logger = logging.getLogger(__name__)

EMAIL_VERIFICATION_TOKEN_EXPIRY = 15 * 60  # 15 minutes


def email_enabled():
    """Brevo is only used when an API key is configured."""
    return bool(getattr(settings, "BREVO_API_KEY", ""))


def _get_brevo_api():
    """Initialize and return Brevo API instance"""
    configuration = sib_api_v3_sdk.Configuration()
    configuration.api_key["api-key"] = settings.BREVO_API_KEY
    api_client = sib_api_v3_sdk.ApiClient(configuration)
    return sib_api_v3_sdk.TransactionalEmailsApi(api_client)


def _send_email(to_email, subject, html_content, text_content, to_name=None):
    """
    Send a single transactional email via Brevo.

    Returns False without calling Brevo when BREVO_API_KEY is unset.
    Raises ApiException on Brevo errors.
    """
    if not email_enabled():
        logger.info("[EMAIL] Brevo not configured, skipping '%s' to %s", subject, to_email)
        return False

    recipient = {"email": to_email}
    if to_name:
        recipient["name"] = to_name

    send_smtp_email = sib_api_v3_sdk.SendSmtpEmail(
        to=[recipient],
        sender={"name": settings.EMAIL_SENDER_NAME, "email": settings.DEFAULT_FROM_EMAIL},
        subject=subject,
        html_content=html_content,
        text_content=text_content,
    )

    _get_brevo_api().send_transac_email(send_smtp_email)
    return True


def generate_email_verification_token(user):
    """Generate a stateless signed token containing user ID and email"""
    signer = TimestampSigner()
    data = {"user_id": user.id, "email": user.email.lower().strip()}
    return signer.sign_object(data)


def verify_email_token(token):
    """Verify the token and return the embedded data if valid and within 15 mins"""
    signer = TimestampSigner()
    try:
        data = signer.unsign_object(token, max_age=EMAIL_VERIFICATION_TOKEN_EXPIRY)
        return True, data, "Email verified successfully!"
    except SignatureExpired:
        return False, None, "The verification link has expired (valid for 15 minutes)."
    except BadSignature:
        return False, None, "Invalid verification link."


def send_verification_email(user, request):
    """Email the user a signed verification link. Returns (sent, message)."""
    token = generate_email_verification_token(user)
    verification_url = request.build_absolute_uri(
        reverse("accounts:api_verify_email", kwargs={"token": token})
    )

    subject = f"Verify Your Email - {settings.EMAIL_SENDER_NAME}"
    text_content = (
        f"Hello {user.name},\n\n"
        f"Thank you for registering with {settings.EMAIL_SENDER_NAME}!\n\n"
        f"Please verify your email address by opening the link below:\n\n"
        f"{verification_url}\n\n"
        f"This link will expire in 15 minutes.\n\n"
        f"If you didn't request this, please ignore this email.\n\n"
        f"Best regards,\n{settings.EMAIL_SENDER_NAME} Team"
    )
    html_content = (
        f"<h2>Welcome {user.name}!</h2>"
        f"<p>Thank you for registering with {settings.EMAIL_SENDER_NAME}!</p>"
        f"<p>Please verify your email address by clicking the link below:</p>"
        f"<p><a href='{verification_url}'>Verify My Email</a></p>"
        f"<p>This link will expire in 15 minutes.</p>"
        f"<p>If you didn't request this, please ignore this email.</p>"
        f"<br><p>Best regards,<br>{settings.EMAIL_SENDER_NAME} Team</p>"
    )

    try:
        sent = _send_email(user.email, subject, html_content, text_content, to_name=user.name)
    except ApiException as e:
        logger.error("[EMAIL] Brevo API error sending to %s: %s", user.email, e)
        return False, "Failed to send verification email. Please try again."

    if not sent:
        return False, "Email delivery is not configured."

    logger.info("[EMAIL] Verification email sent to %s", user.email)
    return True, "Verification email sent! Please check your inbox."
