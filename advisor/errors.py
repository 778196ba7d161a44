"""Exceptions raised by the recommendation core.

Each carries the HTTP status the API layer answers with, so handlers in
``server.py`` never need to know which module raised.
"""


class AdvisorError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AdvisorError):
    status_code = 400


class ProfileCreationError(AdvisorError):
    status_code = 400


class NotFoundError(AdvisorError):
    status_code = 404


class ProfileConflictError(AdvisorError):
    """Profile was saved by another request after this one loaded it."""

    status_code = 409
