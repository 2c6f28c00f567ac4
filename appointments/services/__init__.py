# appointments/services package
#
# All public symbols of the sub-modules are re-exported here:
#
#   from appointments.services import BookingError, book_appointment
#   from appointments.services import get_calendar, create_prescription

from appointments.meetings import MeetingLinkError  # noqa: F401

from appointments.services.booking_service import (  # noqa: F401
    BookingError,
    BookingNotFoundError,
    BookingPermissionError,
    InvalidSlotError,
    InvalidStatusError,
    PastDateError,
    SlotUnavailableError,
    book_appointment,
    notify_status_change,
    reconcile_slot_status,
    update_booking_status,
)

from appointments.services.booking_queries_service import (  # noqa: F401
    get_calendar,
    get_completed_bookings,
    get_doctor_bookings,
    get_patient_bookings,
)

from appointments.services.prescription_service import (  # noqa: F401
    create_prescription,
    get_patient_prescriptions,
    prescription_context,
)

from appointments.services.notification_service import (  # noqa: F401
    list_notifications,
    mark_notification_read,
)
