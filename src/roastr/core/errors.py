"""Error taxonomy shared by the Roastr services."""

from __future__ import annotations


class RoastrError(RuntimeError):
    """Base exception for failures surfaced by Roastr operations."""


class UnauthenticatedError(RoastrError):
    """Raised when an action requires a viewer identity and none is present."""


class NotPermittedError(RoastrError):
    """Raised when the viewer may not act on the targeted record."""


class ValidationFailedError(RoastrError):
    """Raised when client-side checks reject user input.

    Attributes:
        rule: Machine-readable code of the violated rule.
    """

    def __init__(self, rule: str, message: str) -> None:
        super().__init__(message)
        self.rule = rule
        self.message = message


class TransportError(RoastrError):
    """Raised when a call into the backend itself fails."""
