"""
Decoding and cheap validation of fetched source files.

The contents endpoint returns file bodies base64-encoded, with newlines
inserted every few dozen characters. `decode_content` strips that whitespace
and decodes strictly. `validate_content` is a shallow relevance gate that
short-circuits parsing of files that are clearly not holiday definitions (or
were truncated); passing it says nothing about what extraction will find.
"""

import base64
import binascii
import re

from constants import REGISTRATION_MARKERS
from core.exceptions import ContentValidationError, DecodeError

_EMBEDDED_WHITESPACE = re.compile(r"[\n\r\t ]+")
_CLASS_DECLARATION = re.compile(r"^\s*class\s+[A-Za-z_]\w*\s*[(:]", re.MULTILINE)


def decode_content(body: str, encoding: str = "base64") -> str:
    """
    Decode a transport-encoded file body into source text.

    Args:
        body: The encoded body, possibly containing newlines, spaces or tabs.
        encoding: The transport encoding reported alongside the body.

    Returns:
        The decoded UTF-8 text.

    Raises:
        DecodeError: If the encoding is not base64, or the body is not valid
            base64 or not valid UTF-8. Decoding never partially succeeds.
    """
    if encoding != "base64":
        raise DecodeError(message=f"Unexpected encoding: {encoding}")

    compact = _EMBEDDED_WHITESPACE.sub("", body)
    try:
        raw = base64.b64decode(compact, validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise DecodeError(
            message="Failed to decode base64 content", original_exception=e
        ) from e


def validate_content(text: str) -> None:
    """
    Reject text lacking a class declaration or any registration call.

    Raises:
        ContentValidationError: With the reason of the first failed check.
    """
    if not _CLASS_DECLARATION.search(text):
        raise ContentValidationError("no class definition found")

    if not any(marker in text for marker in REGISTRATION_MARKERS):
        raise ContentValidationError("no holiday definitions found")
