"""Error types raised by the record stores and upload handling."""

from __future__ import annotations


class ChurchSiteError(Exception):
    """Base class for errors carrying a user-facing message."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ChurchSiteError):
    """A required field is missing or a field value is out of range."""

    default_message = "Please fill in all required fields"


class NotFound(ChurchSiteError):
    """No record with the requested id exists in the active backend."""

    default_message = "Record not found"

    def __init__(self, kind: str = "Record", record_id: str | None = None):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found")


class NoAttachment(ChurchSiteError):
    """The record exists but carries no binary attachment."""

    default_message = "No attachment available"


class AttachmentTooLarge(ChurchSiteError):
    """An upload exceeds the configured byte limit."""

    def __init__(self, limit_bytes: int):
        self.limit_bytes = limit_bytes
        megabytes = limit_bytes / (1024 * 1024)
        super().__init__(f"File too large. Maximum size is {megabytes:g}MB.")


class UnsupportedMediaType(ChurchSiteError):
    """An upload has the wrong content type for its target."""

    default_message = "Unsupported file type"


class DurableBackendError(ChurchSiteError):
    """Wraps a failure talking to the durable backend.

    Only raised and caught inside the store; callers see the fallback result.
    """

    default_message = "Durable backend unavailable"
