"""
Upload validation and filename derivation.

Responsibilities:
- Validate size, declared MIME type and extension against the configured table
- Sanitize user-supplied filenames
- Generate collision-free storage filenames
"""

import os
import re
import time
import uuid

from portfolio_upload.core.config import ALLOWED_FILE_TYPES, settings
from portfolio_upload.core.errors import ValidationFailed

TRAVERSAL_PATTERN = re.compile(r"\.\.")
SEPARATOR_PATTERN = re.compile(r"[/\\]")
FORBIDDEN_PATTERN = re.compile(r'[<>:"|?*]')
CONTROL_PATTERN = re.compile(r"[\x00-\x1f\x7f-\x9f]")
UNSAFE_PATTERN = re.compile(r"[^a-zA-Z0-9_-]")

DEFAULT_BASENAME = "image"


def file_extension(filename: str) -> str:
    """Lower-cased extension including the dot, or an empty string."""
    return os.path.splitext(filename or "")[1].lower()


def validate_file(data: bytes, filename: str, mime_type: str):
    """
    Validate an uploaded file before any processing.

    Rules are checked in order: size, mime_type, extension.

    Raises:
        ValidationFailed: Naming the first rule that failed
    """
    size = len(data)
    if size == 0:
        raise ValidationFailed("size", "File is empty")
    if size > settings.MAX_FILE_SIZE:
        raise ValidationFailed(
            "size", f"File size exceeds maximum limit of {settings.max_file_size_mb:g}MB"
        )

    if (mime_type or "").strip().lower() not in settings.allowed_mime_types:
        raise ValidationFailed("mime_type", "Invalid file type. Allowed types: JPEG, PNG")

    if file_extension(filename) not in ALLOWED_FILE_TYPES:
        raise ValidationFailed(
            "extension",
            f"Invalid file extension. Allowed extensions: {', '.join(settings.allowed_extensions)}",
        )


def sanitize_filename(filename: str) -> str:
    """
    Reduce a user-supplied filename to a safe base name without extension.

    >>> sanitize_filename("../../My Photo (1).JPG")
    'My_Photo__1_'
    """
    sanitized = TRAVERSAL_PATTERN.sub("", filename or "")
    sanitized = SEPARATOR_PATTERN.sub("", sanitized)
    sanitized = FORBIDDEN_PATTERN.sub("", sanitized)
    sanitized = CONTROL_PATTERN.sub("", sanitized).strip()

    last_dot = sanitized.rfind(".")
    name = sanitized[:last_dot] if last_dot > 0 else sanitized

    name = UNSAFE_PATTERN.sub("_", name)[: settings.FILENAME_MAX_LENGTH]
    return name or DEFAULT_BASENAME


def generate_unique_filename(filename: str) -> str:
    """Sanitized name plus millisecond timestamp and a short random suffix."""
    timestamp = int(time.time() * 1000)
    suffix = uuid.uuid4().hex[:8]
    return f"{sanitize_filename(filename)}_{timestamp}_{suffix}"
