"""
HTTP Signatures - Signature Verification Module

The verifier state machine, its outcome types and key resolvers.
"""

from .types import (
    VerificationState,
    RejectionReason,
    KeyResolver,
    VerificationOutcome,
)

from .verifier import (
    DEFAULT_CLOCK_SKEW,
    Verifier,
    verify,
)

from .resolvers import (
    KEYRING_SERVICE_NAME,
    StaticKeyResolver,
    CallableKeyResolver,
    CachingKeyResolver,
    KeyringKeyResolver,
)

__all__ = [
    # Types
    'VerificationState',
    'RejectionReason',
    'KeyResolver',
    'VerificationOutcome',
    # Verifier
    'DEFAULT_CLOCK_SKEW',
    'Verifier',
    'verify',
    # Resolvers
    'KEYRING_SERVICE_NAME',
    'StaticKeyResolver',
    'CallableKeyResolver',
    'CachingKeyResolver',
    'KeyringKeyResolver',
]
