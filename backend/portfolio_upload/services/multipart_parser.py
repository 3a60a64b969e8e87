"""
Multipart form-data parser.

Responsibilities:
- Extract the boundary from a Content-Type header
- Split a raw request body into parts and classify them as files or fields
- Build multipart bodies for clients and round-trip checks

The upload functions receive the raw body, so parsing is done here
instead of by the web framework.
"""

import re
import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from portfolio_upload.core.errors import MalformedRequest

CRLF = b"\r\n"
HEADER_SEPARATOR = b"\r\n\r\n"

BOUNDARY_PATTERN = re.compile(r'boundary=(?:"([^"]+)"|([^;\s]+))')


@dataclass
class ParsedFile:
    field_name: Optional[str]
    filename: str
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ParsedFormData:
    files: List[ParsedFile] = field(default_factory=list)
    fields: Dict[str, str] = field(default_factory=dict)

    def first_file(self, preferred: str = "file") -> Optional[ParsedFile]:
        """Return the file posted under ``preferred``, else the first file found."""
        for parsed in self.files:
            if parsed.field_name == preferred:
                return parsed
        return self.files[0] if self.files else None


def extract_boundary(content_type: str) -> str:
    """
    Extract the boundary token from a multipart Content-Type header.

    Raises:
        MalformedRequest: If the header is not multipart/form-data or has no boundary
    """
    if "multipart/form-data" not in (content_type or ""):
        raise MalformedRequest("Content-Type must be multipart/form-data")

    match = BOUNDARY_PATTERN.search(content_type)
    if not match:
        raise MalformedRequest("No boundary found in Content-Type header")
    return match.group(1) or match.group(2)


def _split(body: bytes, delimiter: bytes) -> List[bytes]:
    parts = []
    start = 0

    while start < len(body):
        index = body.find(delimiter, start)
        if index == -1:
            parts.append(body[start:])
            break
        if index > start:
            parts.append(body[start:index])
        start = index + len(delimiter)

    return parts


def _header(headers: str, name: str) -> Optional[str]:
    match = re.search(rf"^{re.escape(name)}:[ \t]*([^\r\n]+)", headers, re.IGNORECASE | re.MULTILINE)
    return match.group(1).strip() if match else None


def _attribute(header: str, name: str) -> Optional[str]:
    # Anchored so that name="..." does not match inside filename="..."
    match = re.search(rf'(?:^|[;\s]){re.escape(name)}="([^"]*)"', header, re.IGNORECASE)
    return match.group(1) if match else None


def _strip_crlf(data: bytes) -> bytes:
    return data[:-2] if data.endswith(CRLF) else data


def parse_multipart(body: bytes, content_type: str) -> ParsedFormData:
    """
    Parse a multipart/form-data body.

    Parts with a filename and a Content-Type header become files, parts with
    only a name become text fields (last value wins), anything else is
    dropped. Parts without a header block are skipped.

    Args:
        body: Raw request body
        content_type: Value of the request's Content-Type header

    Returns:
        ParsedFormData with files in body order and fields by name

    Raises:
        MalformedRequest: If the content type is wrong or has no boundary
    """
    boundary = extract_boundary(content_type)
    result = ParsedFormData()

    for part in _split(body or b"", b"--" + boundary.encode("utf-8")):
        header_end = part.find(HEADER_SEPARATOR)
        if header_end == -1:
            continue

        headers = part[:header_end].decode("utf-8", errors="replace")
        content = part[header_end + len(HEADER_SEPARATOR):]

        # Residue of the closing boundary marker
        if content.strip() == b"--":
            continue

        disposition = _header(headers, "content-disposition")
        if not disposition:
            continue

        part_type = _header(headers, "content-type")
        name = _attribute(disposition, "name")
        filename = _attribute(disposition, "filename")

        if filename and part_type:
            result.files.append(
                ParsedFile(
                    field_name=name,
                    filename=filename,
                    mime_type=part_type,
                    data=_strip_crlf(content),
                )
            )
        elif name:
            result.fields[name] = _strip_crlf(content).decode("utf-8", errors="replace")

    return result


def encode_multipart(
    fields: Optional[Dict[str, str]] = None,
    files: Iterable[ParsedFile] = (),
    boundary: Optional[str] = None,
) -> Tuple[bytes, str]:
    """
    Build a multipart/form-data body.

    Returns:
        (body, content_type) ready to send as a request
    """
    boundary = boundary or f"----PortfolioBoundary{uuid.uuid4().hex}"
    delimiter = b"--" + boundary.encode("utf-8")
    chunks = []

    for name, value in (fields or {}).items():
        chunks += [
            delimiter,
            CRLF,
            f'Content-Disposition: form-data; name="{name}"'.encode("utf-8"),
            HEADER_SEPARATOR,
            value.encode("utf-8"),
            CRLF,
        ]

    for parsed in files:
        chunks += [
            delimiter,
            CRLF,
            (
                f'Content-Disposition: form-data; name="{parsed.field_name or "file"}"; '
                f'filename="{parsed.filename}"'
            ).encode("utf-8"),
            CRLF,
            f"Content-Type: {parsed.mime_type}".encode("utf-8"),
            HEADER_SEPARATOR,
            parsed.data,
            CRLF,
        ]

    chunks += [delimiter, b"--", CRLF]
    return b"".join(chunks), f"multipart/form-data; boundary={boundary}"
