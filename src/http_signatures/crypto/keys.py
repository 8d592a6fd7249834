"""
Key loading, serialization and generation

Asymmetric keys are read from PEM or DER. HMAC secrets are serialized as
base64 text so they can live in the same files and keychains as PEM keys.
"""

import base64
import binascii
import secrets
from typing import Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from ..exceptions import KeyFormatError
from .types import (
    AlgorithmLike,
    KeyFamily,
    SigningKey,
    VerifyingKey,
    coerce_algorithm,
)

DEFAULT_RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537
HMAC_SECRET_LENGTH = 32

_PEM_MARKER = b"-----BEGIN"


def _as_bytes(data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if not isinstance(data, (bytes, bytearray)):
        raise KeyFormatError("Key data must be bytes or str", "INVALID_KEY_DATA_TYPE")
    return bytes(data)


def _decode_hmac_secret(data: bytes) -> bytes:
    try:
        secret = base64.b64decode(data.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError(f"HMAC secret is not valid base64: {e}", "INVALID_HMAC_SECRET") from e
    if not secret:
        raise KeyFormatError("HMAC secret cannot be empty", "INVALID_HMAC_SECRET")
    return secret


def hmac_signing_key(secret: bytes, algorithm: AlgorithmLike = "hmac-sha256") -> SigningKey:
    """
    Build an HMAC key from a raw shared secret.

    Args:
        secret: Raw secret bytes shared by signer and verifier
        algorithm: One of the hmac-* algorithms

    Returns:
        SigningKey: Key usable for signing; call verifying_key() for the receiver side
    """
    alg = coerce_algorithm(algorithm)
    if alg.family is not KeyFamily.HMAC:
        raise KeyFormatError(f"{alg.value} is not an HMAC algorithm", "KEY_TYPE_MISMATCH")
    return SigningKey(alg, bytes(secret))


def load_signing_key(data, algorithm: AlgorithmLike, password: Optional[bytes] = None) -> SigningKey:
    """
    Load a signing key as produced by serialize_signing_key().

    Args:
        data: PEM or DER private key, or base64 secret for HMAC
        algorithm: Algorithm the key will sign with
        password: Optional password for encrypted private keys

    Returns:
        SigningKey: Loaded key

    Raises:
        KeyFormatError: If the data cannot be parsed or is the wrong key type
    """
    alg = coerce_algorithm(algorithm)
    raw = _as_bytes(data)

    if alg.family is KeyFamily.HMAC:
        return SigningKey(alg, _decode_hmac_secret(raw))

    try:
        if raw.lstrip().startswith(_PEM_MARKER):
            material = serialization.load_pem_private_key(raw, password=password)
        else:
            material = serialization.load_der_private_key(raw, password=password)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyFormatError(f"Failed to load private key: {e}", "PRIVATE_KEY_LOAD_FAILED") from e

    return SigningKey(alg, material)


def load_verifying_key(data, algorithm: AlgorithmLike) -> VerifyingKey:
    """
    Load a verifying key as produced by serialize_verifying_key().

    Args:
        data: PEM or DER public key, or base64 secret for HMAC
        algorithm: Algorithm the key will verify

    Returns:
        VerifyingKey: Loaded key

    Raises:
        KeyFormatError: If the data cannot be parsed or is the wrong key type
    """
    alg = coerce_algorithm(algorithm)
    raw = _as_bytes(data)

    if alg.family is KeyFamily.HMAC:
        return VerifyingKey(alg, _decode_hmac_secret(raw))

    try:
        if raw.lstrip().startswith(_PEM_MARKER):
            material = serialization.load_pem_public_key(raw)
        else:
            material = serialization.load_der_public_key(raw)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyFormatError(f"Failed to load public key: {e}", "PUBLIC_KEY_LOAD_FAILED") from e

    return VerifyingKey(alg, material)


def serialize_signing_key(key: SigningKey, password: Optional[bytes] = None) -> bytes:
    """
    Serialize a signing key to PEM (PKCS#8), or base64 for HMAC secrets.

    Args:
        key: Key to serialize
        password: Optional password to encrypt the PEM with

    Returns:
        bytes: Serialized key
    """
    if key.algorithm.family is KeyFamily.HMAC:
        return base64.b64encode(key.material)

    if password:
        encryption = serialization.BestAvailableEncryption(password)
    else:
        encryption = serialization.NoEncryption()

    return key.material.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption
    )


def serialize_verifying_key(key: VerifyingKey) -> bytes:
    """Serialize a verifying key to PEM SubjectPublicKeyInfo, or base64 for HMAC secrets."""
    if key.algorithm.family is KeyFamily.HMAC:
        return base64.b64encode(key.material)

    return key.material.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )


def generate_signing_key(algorithm: AlgorithmLike, *, key_size: int = DEFAULT_RSA_KEY_SIZE) -> SigningKey:
    """
    Generate fresh key material for an algorithm.

    Args:
        algorithm: Algorithm the key will sign with
        key_size: RSA modulus size in bits (ignored for other families)

    Returns:
        SigningKey: Newly generated key
    """
    alg = coerce_algorithm(algorithm)

    if alg.family is KeyFamily.RSA:
        if key_size < 2048:
            raise KeyFormatError("RSA keys must be at least 2048 bits", "KEY_TOO_SMALL")
        material = rsa.generate_private_key(public_exponent=RSA_PUBLIC_EXPONENT, key_size=key_size)
    elif alg.family is KeyFamily.ECDSA:
        material = ec.generate_private_key(ec.SECP256R1())
    else:
        material = secrets.token_bytes(HMAC_SECRET_LENGTH)

    return SigningKey(alg, material)
