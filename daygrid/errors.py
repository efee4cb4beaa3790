class DayGridError(Exception):
    """Base class for day grid failures. None of them are fatal to the process."""


class LoadFailure(DayGridError):
    """Resources, services or bookings could not be loaded or were malformed."""


class CreationFailure(DayGridError):
    """The customer or booking insert failed while creating a booking.

    ``orphan_customer_id`` is set when the customer was created but the
    booking insert failed afterwards; that customer is left in the store.
    """

    def __init__(self, message: str, stage: str, orphan_customer_id: int | None = None):
        super().__init__(message)
        self.stage = stage
        self.orphan_customer_id = orphan_customer_id


class IncompleteBookingDraft(DayGridError, ValueError):
    pass


class InvalidDragTransition(DayGridError):
    pass


class PersistenceDriftFailure(DayGridError):
    """A best-effort write failed; local state no longer matches the store."""
