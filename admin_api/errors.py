# admin_api/errors.py


class ApiError(Exception):
    """The admin API answered with a non-2xx status or ``success: false``."""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}

    @property
    def is_unauthorized(self):
        return self.status_code == 401

    def __str__(self):
        return self.message


class ApiConnectionError(ApiError):
    """The request never produced a response (DNS, refused, timeout)."""


class ValidationError(ValueError):
    """Input rejected locally, before any request is issued."""
