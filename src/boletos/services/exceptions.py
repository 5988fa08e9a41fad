from __future__ import annotations


class InvalidInputError(ValueError):
    """Structurally invalid input (filter container, id list, status value)."""


class AuthError(Exception):
    """Missing, expired, or rejected credentials."""


class FunctionRejectError(Exception):
    """A remote function answered, but the response reports an error."""

    def __init__(
        self,
        message: str,
        response: dict | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.response = response or {}
        self.status_code = status_code


class CollaboratorUnavailableError(RuntimeError):
    """The remote platform could not be reached after retries."""
