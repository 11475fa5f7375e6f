"""
Dispatch Desk errors.

Every rejected command raises one of these before touching state, so a
caller that catches ``DeskError`` always sees the desk unchanged.
"""


class DeskError(Exception):
    """Base class for desk command failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DeskError):
    """A required field is empty or malformed."""


class NotFound(DeskError):
    """Unknown zone, call, employee or custom status id."""

    def __init__(self, kind: str, ident):
        super().__init__(f"{kind} {ident} not found")
        self.kind = kind
        self.ident = ident


class InvalidTransition(DeskError):
    """The entity is not in a state that allows the requested change."""
