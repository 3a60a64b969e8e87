"""
Upload error taxonomy.

Every failure the upload service reports is an ``UploadError`` carrying
the HTTP status, a short title and a human-readable ``details`` string.
The routes render them as ``{"success": false, "error": ..., "details": ...}``.
"""

from typing import Any, Dict, Optional


class UploadError(Exception):
    """Base class for failures surfaced to the caller."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, details: str, error: Optional[str] = None):
        super().__init__(details)
        self.details = details
        if error is not None:
            self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "error": self.error, "details": self.details}


class MalformedRequest(UploadError):
    """Body or Content-Type could not be parsed as multipart/form-data."""

    status_code = 400
    error = "Failed to parse form data"


class ValidationFailed(UploadError):
    """A file failed one of the validation rules (size, mime_type, extension)."""

    status_code = 400
    error = "Validation failed"

    def __init__(self, rule: str, details: str):
        super().__init__(details)
        self.rule = rule

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["rule"] = self.rule
        return payload


class ConfigurationError(UploadError):
    """Unknown page type or section for the destination folder."""

    status_code = 400
    error = "Invalid page configuration"


class StorageNotConfigured(ConfigurationError):
    """Storage credentials are missing from the environment."""

    status_code = 500
    error = "Server configuration error"


class TranscodeFailed(UploadError):
    """The image could not be decoded or re-encoded."""

    status_code = 400
    error = "Processing failed"


class StorageWriteFailed(UploadError):
    """Writing to a storage bucket failed. ``target`` is optimized or original."""

    status_code = 500
    error = "Upload failed"

    def __init__(self, target: str, details: str):
        super().__init__(details)
        self.target = target


class RateLimitExceeded(UploadError):
    status_code = 429
    error = "Too many requests"

    def __init__(self, details: str = "Upload rate limit exceeded. Please wait before uploading more images."):
        super().__init__(details)
