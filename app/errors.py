"""Failures raised by the tracking services.

Routers map these onto HTTP responses; services never raise HTTP errors.
"""


class TimeTrackerError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(TimeTrackerError):
    status_code = 404


class Forbidden(TimeTrackerError):
    status_code = 403


class InvalidRange(TimeTrackerError):
    status_code = 400


class ValidationError(TimeTrackerError):
    status_code = 422


class StoreConflict(TimeTrackerError):
    """A multi-row write could not be applied atomically; safe to retry."""

    status_code = 409
