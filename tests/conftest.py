"""Shared pytest fixtures."""

import email.parser
import email.policy

import pytest
from pydantic import SecretStr


@pytest.fixture
def api_key() -> SecretStr:
    return SecretStr("sk-test-key")


@pytest.fixture
def parse_multipart():
    """Parse a multipart/form-data body with the stdlib email parser.

    Returns a list of ``(name, filename, content_type, payload)`` tuples.
    """

    def _parse(boundary: str, body: bytes):
        head = f"Content-Type: multipart/form-data; boundary={boundary}\r\n\r\n".encode()
        message = email.parser.BytesParser(policy=email.policy.HTTP).parsebytes(head + body)
        assert message.is_multipart()
        parts = []
        for part in message.iter_parts():
            parts.append(
                (
                    part.get_param("name", header="content-disposition"),
                    part.get_filename(),
                    part.get_content_type(),
                    part.get_payload(decode=True),
                )
            )
        return parts

    return _parse
