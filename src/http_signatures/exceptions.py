"""
Exception classes for HTTP Signatures
"""

from typing import Optional, Dict, Any


class HttpSignaturesError(Exception):
    """Base exception for all HTTP Signatures errors"""

    default_code = "UNKNOWN_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.error_code}, details: {self.details})"
        return f"{self.message} (code: {self.error_code})"


class MalformedHeaderError(HttpSignaturesError):
    """Exception raised when a signature header violates the wire grammar"""
    default_code = "MALFORMED_HEADER"


class UnsupportedAlgorithmError(HttpSignaturesError):
    """Exception raised when an algorithm token has no registered provider"""
    default_code = "UNSUPPORTED_ALGORITHM"


class KeyAlgorithmMismatchError(HttpSignaturesError):
    """Exception raised when key material is tagged for a different algorithm"""
    default_code = "KEY_ALGORITHM_MISMATCH"


class MissingHeaderError(HttpSignaturesError):
    """Exception raised when a header named in the signed list is absent"""
    default_code = "MISSING_HEADER"

    def __init__(self, header_name: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Required header not found: {header_name}", details=details)
        self.header_name = header_name


class KeyNotFoundError(HttpSignaturesError):
    """Exception raised by key resolvers when no key exists for a key ID"""
    default_code = "KEY_NOT_FOUND"

    def __init__(self, key_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"No key found for key ID: {key_id}", details=details)
        self.key_id = key_id


class KeyResolutionError(HttpSignaturesError):
    """Exception raised when a key resolver fails for a reason other than a miss"""
    default_code = "KEY_RESOLUTION_FAILED"


class SignatureMismatchError(HttpSignaturesError):
    """Exception raised when signature bytes do not verify"""
    default_code = "SIGNATURE_MISMATCH"


class ExpiredSignatureError(HttpSignaturesError):
    """Exception raised when a signature is past its expires time"""
    default_code = "EXPIRED"


class NotYetValidError(HttpSignaturesError):
    """Exception raised when a signature's created time is in the future"""
    default_code = "NOT_YET_VALID"


class InvalidConfigurationError(HttpSignaturesError):
    """Exception raised for signing inputs that cannot produce a meaningful signature"""
    default_code = "INVALID_CONFIGURATION"


class KeyFormatError(HttpSignaturesError):
    """Exception raised when key material cannot be loaded or has the wrong type"""
    default_code = "INVALID_KEY_FORMAT"


class ConfigError(HttpSignaturesError):
    """Exception raised for configuration loading and validation errors"""
    default_code = "CONFIG_ERROR"
