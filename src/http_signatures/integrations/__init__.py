"""
Transport adapters for HTTP Signatures

The adapters sit outside the signing and verification core; each one maps
its transport's request object onto a RequestView.
"""

from .requests_auth import (
    PreparedRequestView,
    HttpSignatureAuth,
    sign_prepared_request,
)
from .wsgi import (
    OUTCOME_ENVIRON_KEY,
    WsgiRequestView,
    SignatureVerificationMiddleware,
    create_skip_patterns,
)

__all__ = [
    'PreparedRequestView',
    'HttpSignatureAuth',
    'sign_prepared_request',
    'OUTCOME_ENVIRON_KEY',
    'WsgiRequestView',
    'SignatureVerificationMiddleware',
    'create_skip_patterns',
]
