"""
HTTP Signatures - Request Signing Module

Signing string construction, signature header codec and the signer.
"""

from .types import (
    REQUEST_TARGET,
    RequestView,
    HttpRequestView,
    SignatureParams,
)

from .signing_string import (
    SigningStringBuilder,
    build_signing_string,
)

from .header_codec import (
    SIGNATURE_SCHEME,
    DEFAULT_HEADERS,
    SignatureHeaderCodec,
    parse_signature_header,
    serialize_signature_header,
    parse_authorization_header,
    serialize_authorization_header,
)

from .signer import (
    Signer,
    sign,
)

from .utils import (
    normalize_header_name,
    validate_header_name,
    generate_timestamp,
)

__all__ = [
    # Types
    'REQUEST_TARGET',
    'RequestView',
    'HttpRequestView',
    'SignatureParams',
    # Signing string
    'SigningStringBuilder',
    'build_signing_string',
    # Header codec
    'SIGNATURE_SCHEME',
    'DEFAULT_HEADERS',
    'SignatureHeaderCodec',
    'parse_signature_header',
    'serialize_signature_header',
    'parse_authorization_header',
    'serialize_authorization_header',
    # Signer
    'Signer',
    'sign',
    # Utilities
    'normalize_header_name',
    'validate_header_name',
    'generate_timestamp',
]
