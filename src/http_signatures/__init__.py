"""
HTTP Signatures for Python
Sign outgoing HTTP requests and verify incoming ones
"""

from .version import __version__
from .crypto import (
    SignatureAlgorithm,
    SigningKey,
    VerifyingKey,
    get_algorithm,
    supported_algorithms,
    hmac_signing_key,
    load_signing_key,
    load_verifying_key,
    generate_signing_key,
)
from .exceptions import (
    HttpSignaturesError,
    MalformedHeaderError,
    UnsupportedAlgorithmError,
    KeyAlgorithmMismatchError,
    MissingHeaderError,
    KeyNotFoundError,
    KeyResolutionError,
    SignatureMismatchError,
    ExpiredSignatureError,
    NotYetValidError,
    InvalidConfigurationError,
    KeyFormatError,
    ConfigError,
)
from .signing import (
    REQUEST_TARGET,
    RequestView,
    HttpRequestView,
    SignatureParams,
    build_signing_string,
    parse_signature_header,
    serialize_signature_header,
    Signer,
    sign,
)
from .verification import (
    VerificationState,
    RejectionReason,
    KeyResolver,
    VerificationOutcome,
    Verifier,
    verify,
    StaticKeyResolver,
    CallableKeyResolver,
    CachingKeyResolver,
    KeyringKeyResolver,
)

__all__ = [
    '__version__',
    # Keys and algorithms
    'SignatureAlgorithm',
    'SigningKey',
    'VerifyingKey',
    'get_algorithm',
    'supported_algorithms',
    'hmac_signing_key',
    'load_signing_key',
    'load_verifying_key',
    'generate_signing_key',
    # Exceptions
    'HttpSignaturesError',
    'MalformedHeaderError',
    'UnsupportedAlgorithmError',
    'KeyAlgorithmMismatchError',
    'MissingHeaderError',
    'KeyNotFoundError',
    'KeyResolutionError',
    'SignatureMismatchError',
    'ExpiredSignatureError',
    'NotYetValidError',
    'InvalidConfigurationError',
    'KeyFormatError',
    'ConfigError',
    # Signing
    'REQUEST_TARGET',
    'RequestView',
    'HttpRequestView',
    'SignatureParams',
    'build_signing_string',
    'parse_signature_header',
    'serialize_signature_header',
    'Signer',
    'sign',
    # Verification
    'VerificationState',
    'RejectionReason',
    'KeyResolver',
    'VerificationOutcome',
    'Verifier',
    'verify',
    'StaticKeyResolver',
    'CallableKeyResolver',
    'CachingKeyResolver',
    'KeyringKeyResolver',
]
