"""
Type definitions for signature algorithms and key material

Keys are tagged with the algorithm they are meant for, so that a key loaded
for one algorithm can never silently be used with another.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from cryptography.hazmat.primitives.asymmetric import ec, rsa

from ..exceptions import KeyFormatError, UnsupportedAlgorithmError


class KeyFamily(str, Enum):
    """Key families, one per kind of key material"""
    RSA = "rsa"
    HMAC = "hmac"
    ECDSA = "ecdsa"


class SignatureAlgorithm(str, Enum):
    """Signature algorithm tokens as they appear on the wire"""
    RSA_SHA256 = "rsa-sha256"
    RSA_SHA384 = "rsa-sha384"
    RSA_SHA512 = "rsa-sha512"
    HMAC_SHA256 = "hmac-sha256"
    HMAC_SHA384 = "hmac-sha384"
    HMAC_SHA512 = "hmac-sha512"
    ECDSA_SHA256 = "ecdsa-sha256"

    @property
    def family(self) -> KeyFamily:
        return KeyFamily(self.value.split("-", 1)[0])


AlgorithmLike = Union[SignatureAlgorithm, str]

SigningMaterial = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey, bytes]
VerifyingMaterial = Union[rsa.RSAPublicKey, ec.EllipticCurvePublicKey, bytes]


def coerce_algorithm(algorithm: AlgorithmLike) -> SignatureAlgorithm:
    """
    Convert an algorithm token to a SignatureAlgorithm.

    Args:
        algorithm: Enum member or wire token (case-insensitive)

    Returns:
        SignatureAlgorithm: Matching algorithm

    Raises:
        UnsupportedAlgorithmError: If the token is not a known algorithm
    """
    if isinstance(algorithm, SignatureAlgorithm):
        return algorithm
    try:
        return SignatureAlgorithm(str(algorithm).strip().lower())
    except ValueError:
        raise UnsupportedAlgorithmError(
            f"Unsupported signature algorithm: {algorithm}",
            details={"algorithm": str(algorithm)}
        ) from None


def _check_material(algorithm: SignatureAlgorithm, material, private: bool) -> None:
    family = algorithm.family
    if family is KeyFamily.HMAC:
        if not isinstance(material, bytes) or not material:
            raise KeyFormatError("HMAC key material must be non-empty bytes", "INVALID_HMAC_SECRET")
        return

    if family is KeyFamily.RSA:
        expected = rsa.RSAPrivateKey if private else rsa.RSAPublicKey
    else:
        expected = ec.EllipticCurvePrivateKey if private else ec.EllipticCurvePublicKey

    if not isinstance(material, expected):
        raise KeyFormatError(
            f"Key material is not a {'private' if private else 'public'} {family.value} key",
            "KEY_TYPE_MISMATCH",
            {"algorithm": algorithm.value, "material_type": type(material).__name__}
        )

    if family is KeyFamily.ECDSA and not isinstance(material.curve, ec.SECP256R1):
        raise KeyFormatError(
            f"{algorithm.value} requires a P-256 key, got {material.curve.name}",
            "UNSUPPORTED_CURVE"
        )


@dataclass(frozen=True)
class SigningKey:
    """
    Private (or shared secret) key material tagged with its algorithm

    Attributes:
        algorithm: Algorithm this key signs with
        material: cryptography private key object, or secret bytes for HMAC
    """
    algorithm: SignatureAlgorithm
    material: SigningMaterial = field(repr=False)

    def __post_init__(self):
        object.__setattr__(self, "algorithm", coerce_algorithm(self.algorithm))
        _check_material(self.algorithm, self.material, private=True)

    def verifying_key(self) -> "VerifyingKey":
        """Derive the key a receiver uses to verify signatures made with this key."""
        if self.algorithm.family is KeyFamily.HMAC:
            return VerifyingKey(self.algorithm, self.material)
        return VerifyingKey(self.algorithm, self.material.public_key())


@dataclass(frozen=True)
class VerifyingKey:
    """
    Public (or shared secret) key material tagged with its algorithm

    Attributes:
        algorithm: Algorithm this key verifies
        material: cryptography public key object, or secret bytes for HMAC
    """
    algorithm: SignatureAlgorithm
    material: VerifyingMaterial = field(repr=False)

    def __post_init__(self):
        object.__setattr__(self, "algorithm", coerce_algorithm(self.algorithm))
        _check_material(self.algorithm, self.material, private=False)
