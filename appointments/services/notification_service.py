from appointments.models import Notification


def list_notifications(user):
    """The user's notifications, newest first."""
    return Notification.objects.filter(user=user).order_by("-created_at", "-id")


def mark_notification_read(user, notification_id):
    """
    Raises:
        Notification.DoesNotExist: Unknown id or another user's notification.
    """
    notification = Notification.objects.get(id=notification_id, user=user)
    if not notification.is_read:
        notification.is_read = True
        notification.save(update_fields=["is_read"])
    return notification
