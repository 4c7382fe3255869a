"""multipart/form-data body construction.

Layout for every field, in caller order:
  --{boundary}\\r\\n
  Content-Disposition: form-data; name="..."[; filename="..."]\\r\\n
  [Content-Type: ...\\r\\n]
  \\r\\n
  {content}\\r\\n
followed by a single --{boundary}--\\r\\n terminator.

The boundary is not checked against field content by ``encode``. Callers
should draw one with ``make_boundary`` and reject collisions with
``boundary_conflicts``.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

CRLF = b"\r\n"


@dataclass(frozen=True)
class TextField:
    name: str
    value: str


@dataclass(frozen=True)
class FileField:
    name: str
    filename: str
    data: bytes
    content_type: str


MultipartField = Union[TextField, FileField]


def make_boundary() -> str:
    """Return a fresh random boundary."""
    return uuid.uuid4().hex


def content_type(boundary: str) -> str:
    """Content-Type header value for a body encoded with ``boundary``."""
    return f"multipart/form-data; boundary={boundary}"


def boundary_conflicts(boundary: str, fields: Sequence[MultipartField]) -> bool:
    """True if ``boundary`` occurs anywhere inside the fields' content."""
    marker = boundary.encode()
    for field in fields:
        if marker in field.name.encode():
            return True
        if isinstance(field, TextField):
            if marker in field.value.encode():
                return True
        else:
            if marker in field.filename.encode() or marker in field.data:
                return True
    return False


def encode(boundary: str, fields: Sequence[MultipartField]) -> bytes:
    """Serialize ``fields`` into a multipart/form-data body."""
    delimiter = f"--{boundary}".encode()
    body = bytearray()

    for field in fields:
        body += delimiter + CRLF
        if isinstance(field, FileField):
            body += (
                f'Content-Disposition: form-data; name="{field.name}"; '
                f'filename="{field.filename}"'
            ).encode() + CRLF
            body += f"Content-Type: {field.content_type}".encode() + CRLF + CRLF
            body += field.data
        else:
            body += f'Content-Disposition: form-data; name="{field.name}"'.encode() + CRLF + CRLF
            body += field.value.encode()
        body += CRLF

    body += delimiter + b"--" + CRLF
    return bytes(body)
