"""Error taxonomy shared by the services and the HTTP layer.

Each error carries the HTTP status it is rendered with; the handlers in
``backend.main`` turn them into ``{"success": false, "message": ...}`` bodies.
"""

from __future__ import annotations


class VisitTrackerError(Exception):
    status_code = 500

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class ValidationError(VisitTrackerError):
    status_code = 400


class InvalidRange(ValidationError):
    pass


class NotFound(VisitTrackerError):
    status_code = 404


class Conflict(VisitTrackerError):
    status_code = 409


class StorageError(VisitTrackerError):
    status_code = 500
