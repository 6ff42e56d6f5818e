"""
duties/exceptions.py
────────────────────
Errors raised by the booking validator and the approval coordinator.

Every error carries a user-facing `message`; views show it as a flash
message.  Storage / network failures are left as Django's DatabaseError.
"""


class DutyError(Exception):
    """Base class for every rule the duty workflow can refuse on."""

    default_message = 'The request could not be completed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BookingValidationError(DutyError):
    """A business rule failed before anything was written."""


class InvalidTransition(BookingValidationError):
    """The requested status change is not in the transition table."""


class BookingAuthorizationError(DutyError):
    """Role or ownership mismatch."""

    default_message = 'You are not allowed to do that.'


class BookingConflictError(DutyError):
    """
    A storage constraint rejected the write (another request got there
    first).  Callers should re-fetch and show the current state.
    """

    default_message = 'This booking changed while you were working. The page has been refreshed.'
