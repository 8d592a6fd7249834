"""
Utility functions for request signing

This module provides header name handling, timestamp generation and the
base64 helpers used by the signature header codec.
"""

import base64
import binascii
import re
import time

from ..exceptions import MalformedHeaderError

# RFC 7230 token characters, plus parentheses for pseudo-headers
_HEADER_NAME_PATTERN = re.compile(r"^[!#$%&'*+\-.0-9A-Z^_`a-z|~()]+$")


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for consistent processing.

    Args:
        name: Header name to normalize

    Returns:
        str: Lowercase header name
    """
    return name.lower().strip()


def validate_header_name(name: str) -> bool:
    """
    Validate header name for inclusion in a signature.

    Args:
        name: Header name to validate

    Returns:
        bool: True if header name is valid
    """
    if not isinstance(name, str):
        return False

    return bool(_HEADER_NAME_PATTERN.match(name))


def generate_timestamp() -> int:
    """
    Generate current Unix timestamp.

    Returns:
        int: Current Unix timestamp (seconds since epoch)
    """
    return int(time.time())


def encode_signature(signature: bytes) -> str:
    """Encode raw signature bytes as standard base64."""
    return base64.b64encode(signature).decode("ascii")


def decode_signature(value: str) -> bytes:
    """
    Decode a standard base64 signature value.

    Args:
        value: Base64 text from the signature header

    Returns:
        bytes: Raw signature bytes

    Raises:
        MalformedHeaderError: If the value is empty or not valid base64
    """
    if not value:
        raise MalformedHeaderError("Signature value cannot be empty", details={"field": "signature"})

    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedHeaderError(
            f"Signature is not valid base64: {e}",
            details={"field": "signature"}
        ) from e
