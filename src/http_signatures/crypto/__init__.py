"""
Cryptographic primitives for HTTP Signatures
"""

from .types import (
    KeyFamily,
    SignatureAlgorithm,
    SigningKey,
    VerifyingKey,
    coerce_algorithm,
)
from .algorithms import (
    AlgorithmProvider,
    RsaPkcs1Provider,
    HmacProvider,
    EcdsaProvider,
    ALGORITHM_PROVIDERS,
    get_algorithm,
    supported_algorithms,
)
from .keys import (
    hmac_signing_key,
    load_signing_key,
    load_verifying_key,
    serialize_signing_key,
    serialize_verifying_key,
    generate_signing_key,
)

__all__ = [
    'KeyFamily',
    'SignatureAlgorithm',
    'SigningKey',
    'VerifyingKey',
    'coerce_algorithm',
    'AlgorithmProvider',
    'RsaPkcs1Provider',
    'HmacProvider',
    'EcdsaProvider',
    'ALGORITHM_PROVIDERS',
    'get_algorithm',
    'supported_algorithms',
    'hmac_signing_key',
    'load_signing_key',
    'load_verifying_key',
    'serialize_signing_key',
    'serialize_verifying_key',
    'generate_signing_key',
]
