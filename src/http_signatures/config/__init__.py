"""
Configuration management for HTTP Signatures
"""

from .settings import (
    HEADER_MODES,
    SignerSettings,
    VerifierSettings,
    LoggingSettings,
    HttpSignaturesConfig,
    load_config,
    configure_logging,
)

__all__ = [
    'HEADER_MODES',
    'SignerSettings',
    'VerifierSettings',
    'LoggingSettings',
    'HttpSignaturesConfig',
    'load_config',
    'configure_logging',
]
