"""
Configuration loading for HTTP Signatures

Settings are plain dataclasses that can be built in code or loaded from a
JSON document of the form:

    {
        "signer": {"key_id": "client-1", "headers": ["(request-target)", "host", "date"]},
        "verifier": {"clock_skew_seconds": 30, "required_headers": ["host"]},
        "logging": {"level": "INFO"}
    }

Every section and field is optional.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..crypto.algorithms import get_algorithm
from ..crypto.types import SigningKey
from ..exceptions import ConfigError, UnsupportedAlgorithmError
from ..signing.signer import Signer
from ..signing.utils import normalize_header_name
from ..verification.types import KeyResolver
from ..verification.verifier import DEFAULT_CLOCK_SKEW, Verifier

HEADER_MODES = ("signature", "authorization")

PACKAGE_LOGGER = "http_signatures"


def _default_signed_headers() -> List[str]:
    return ["(request-target)", "host", "date"]


@dataclass
class SignerSettings:
    """Signing configuration"""
    key_id: Optional[str] = None
    headers: List[str] = field(default_factory=_default_signed_headers)
    header_mode: str = "signature"
    include_created: bool = False
    expires_in: Optional[int] = None


@dataclass
class VerifierSettings:
    """Verification configuration"""
    clock_skew_seconds: int = DEFAULT_CLOCK_SKEW
    required_headers: List[str] = field(default_factory=list)
    header_mode: str = "signature"
    allowed_algorithms: Optional[List[str]] = None


@dataclass
class LoggingSettings:
    """Logging configuration"""
    level: str = "WARNING"


@dataclass
class HttpSignaturesConfig:
    """Complete configuration"""
    signer: SignerSettings = field(default_factory=SignerSettings)
    verifier: VerifierSettings = field(default_factory=VerifierSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    def __post_init__(self):
        self._validate()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HttpSignaturesConfig':
        """Build configuration from a parsed JSON object"""
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a JSON object", "INVALID_FORMAT")
        try:
            return cls(
                signer=SignerSettings(**data.get('signer', {})),
                verifier=VerifierSettings(**data.get('verifier', {})),
                logging=LoggingSettings(**data.get('logging', {})),
            )
        except TypeError as e:
            raise ConfigError(f"Invalid configuration format: {e}", "INVALID_FORMAT")

    @classmethod
    def from_json(cls, json_string: str) -> 'HttpSignaturesConfig':
        """Load configuration from a JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'HttpSignaturesConfig':
        """Load configuration from a JSON file"""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file: {e}", "FILE_ERROR")
        return cls.from_json(json_string)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def build_signer(self, key: SigningKey, **kwargs) -> Signer:
        """
        Create a Signer from the signer settings.

        Args:
            key: Signing key
            **kwargs: Overrides passed through to Signer (e.g. clock)

        Returns:
            Signer: Configured signer
        """
        if not self.signer.key_id:
            raise ConfigError("signer.key_id is required to build a signer", "INVALID_FORMAT")
        return Signer(
            key,
            self.signer.key_id,
            self.signer.headers,
            include_created=self.signer.include_created,
            expires_in=self.signer.expires_in,
            **kwargs
        )

    def build_verifier(self, resolver: KeyResolver, **kwargs) -> Verifier:
        """Create a Verifier from the verifier settings"""
        return Verifier(
            resolver,
            self.verifier.clock_skew_seconds,
            allowed_algorithms=self.verifier.allowed_algorithms,
            **kwargs
        )

    def _validate(self) -> None:
        for section, mode in (('signer', self.signer.header_mode), ('verifier', self.verifier.header_mode)):
            if mode not in HEADER_MODES:
                raise ConfigError(
                    f"{section}.header_mode must be one of {', '.join(HEADER_MODES)}, got '{mode}'",
                    "INVALID_FORMAT"
                )

        if self.signer.key_id is not None and not isinstance(self.signer.key_id, str):
            raise ConfigError("signer.key_id must be a string", "INVALID_FORMAT")

        self.signer.headers = _header_list("signer.headers", self.signer.headers)
        if not self.signer.headers:
            raise ConfigError("signer.headers must be a non-empty list", "INVALID_FORMAT")

        expires_in = self.signer.expires_in
        if expires_in is not None and (not isinstance(expires_in, int) or expires_in <= 0):
            raise ConfigError("signer.expires_in must be positive", "INVALID_FORMAT")

        if not isinstance(self.verifier.clock_skew_seconds, int) or self.verifier.clock_skew_seconds < 0:
            raise ConfigError("verifier.clock_skew_seconds must be a non-negative integer", "INVALID_FORMAT")
        self.verifier.required_headers = _header_list("verifier.required_headers", self.verifier.required_headers)

        if self.verifier.allowed_algorithms is not None:
            _string_list("verifier.allowed_algorithms", self.verifier.allowed_algorithms)
            try:
                self.verifier.allowed_algorithms = [
                    get_algorithm(token).identifier() for token in self.verifier.allowed_algorithms
                ]
            except UnsupportedAlgorithmError as e:
                raise ConfigError(e.message, "INVALID_FORMAT")

        level = self.logging.level
        if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
            raise ConfigError(f"Unknown logging level '{self.logging.level}'", "INVALID_FORMAT")


def _string_list(name: str, value: Any) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{name} must be a list of strings", "INVALID_FORMAT")
    return value


def _header_list(name: str, value: Any) -> List[str]:
    return [normalize_header_name(header) for header in _string_list(name, value)]


def load_config(source: Union[str, Path, Dict[str, Any], None] = None) -> HttpSignaturesConfig:
    """
    Load configuration from a file path, a dict, or defaults.

    Args:
        source: Path to a JSON file, an already parsed dict, or None for defaults

    Returns:
        HttpSignaturesConfig: Loaded configuration
    """
    if source is None:
        return HttpSignaturesConfig()
    if isinstance(source, dict):
        return HttpSignaturesConfig.from_dict(source)
    return HttpSignaturesConfig.from_file(source)


def configure_logging(settings: Union[LoggingSettings, str]) -> logging.Logger:
    """
    Apply a log level to the package logger hierarchy.

    Handlers are left to the application.

    Returns:
        logging.Logger: The package logger
    """
    level = settings.level if isinstance(settings, LoggingSettings) else settings
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(str(level).upper())
    return logger
