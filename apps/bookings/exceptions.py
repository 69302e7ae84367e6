"""Domain errors raised by booking workflows."""


class BookingError(Exception):
    """Base class for booking workflow errors."""


class SlotUnavailableError(BookingError):
    """Raised when the requested time has no room for the party."""


class BookingStateError(BookingError):
    """Raised when a booking is not in a state that allows the transition."""


class ModificationNotAllowedError(BookingError):
    """Raised when policy or timing forbids changing a booking."""
