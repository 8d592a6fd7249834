"""
Signing and verification algorithm providers

Each supported SignatureAlgorithm maps to exactly one provider in a fixed
table. Adding an algorithm means adding an enum member and a table entry;
providers are never discovered dynamically.
"""

import hmac
from abc import ABC, abstractmethod
from typing import Dict, List, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac
from cryptography.hazmat.primitives.asymmetric import ec, padding

from ..exceptions import KeyAlgorithmMismatchError, UnsupportedAlgorithmError
from .types import (
    AlgorithmLike,
    KeyFamily,
    SignatureAlgorithm,
    SigningKey,
    VerifyingKey,
    coerce_algorithm,
)


class AlgorithmProvider(ABC):
    """
    Capability set for one signature algorithm.

    Providers are stateless and safe to share between threads.
    """

    def __init__(self, algorithm: SignatureAlgorithm, hash_algorithm: hashes.HashAlgorithm):
        self.algorithm = algorithm
        self.hash_algorithm = hash_algorithm

    def identifier(self) -> str:
        """Wire token for this algorithm."""
        return self.algorithm.value

    @abstractmethod
    def sign(self, message: bytes, key: SigningKey) -> bytes:
        """
        Sign message bytes.

        Args:
            message: Bytes to sign
            key: Signing key tagged with this provider's algorithm

        Returns:
            bytes: Raw signature bytes

        Raises:
            KeyAlgorithmMismatchError: If the key is tagged for another algorithm
        """

    @abstractmethod
    def verify(self, message: bytes, signature: bytes, key: VerifyingKey) -> bool:
        """
        Check signature bytes over message bytes.

        Args:
            message: Bytes that were signed
            signature: Raw signature bytes
            key: Verifying key tagged with this provider's algorithm

        Returns:
            bool: True if the signature is valid

        Raises:
            KeyAlgorithmMismatchError: If the key is tagged for another algorithm
        """

    def _check_key(self, key: Union[SigningKey, VerifyingKey]) -> None:
        if key.algorithm is not self.algorithm:
            raise KeyAlgorithmMismatchError(
                f"Key is for {key.algorithm.value}, not {self.algorithm.value}",
                details={"key_algorithm": key.algorithm.value, "algorithm": self.algorithm.value}
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.algorithm.value!r})"


class RsaPkcs1Provider(AlgorithmProvider):
    """RSASSA-PKCS1-v1_5 signatures"""

    def sign(self, message: bytes, key: SigningKey) -> bytes:
        self._check_key(key)
        return key.material.sign(message, padding.PKCS1v15(), self.hash_algorithm)

    def verify(self, message: bytes, signature: bytes, key: VerifyingKey) -> bool:
        self._check_key(key)
        try:
            key.material.verify(signature, message, padding.PKCS1v15(), self.hash_algorithm)
        except InvalidSignature:
            return False
        return True


class HmacProvider(AlgorithmProvider):
    """HMAC message authentication codes"""

    def _mac(self, message: bytes, secret: bytes) -> bytes:
        mac = crypto_hmac.HMAC(secret, self.hash_algorithm)
        mac.update(message)
        return mac.finalize()

    def sign(self, message: bytes, key: SigningKey) -> bytes:
        self._check_key(key)
        return self._mac(message, key.material)

    def verify(self, message: bytes, signature: bytes, key: VerifyingKey) -> bool:
        self._check_key(key)
        expected = self._mac(message, key.material)
        # constant time
        return hmac.compare_digest(expected, signature)


class EcdsaProvider(AlgorithmProvider):
    """ECDSA signatures, DER encoded"""

    def sign(self, message: bytes, key: SigningKey) -> bytes:
        self._check_key(key)
        return key.material.sign(message, ec.ECDSA(self.hash_algorithm))

    def verify(self, message: bytes, signature: bytes, key: VerifyingKey) -> bool:
        self._check_key(key)
        try:
            key.material.verify(signature, message, ec.ECDSA(self.hash_algorithm))
        except InvalidSignature:
            return False
        return True


_PROVIDER_CLASSES = {
    KeyFamily.RSA: RsaPkcs1Provider,
    KeyFamily.HMAC: HmacProvider,
    KeyFamily.ECDSA: EcdsaProvider,
}

_HASHES = {
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


def _build_provider_table() -> Dict[SignatureAlgorithm, AlgorithmProvider]:
    table = {}
    for algorithm in SignatureAlgorithm:
        hash_name = algorithm.value.rsplit("-", 1)[1]
        provider_class = _PROVIDER_CLASSES[algorithm.family]
        table[algorithm] = provider_class(algorithm, _HASHES[hash_name]())
    return table


ALGORITHM_PROVIDERS: Dict[SignatureAlgorithm, AlgorithmProvider] = _build_provider_table()


def get_algorithm(algorithm: AlgorithmLike) -> AlgorithmProvider:
    """
    Look up the provider for an algorithm token.

    Args:
        algorithm: SignatureAlgorithm or wire token such as "rsa-sha256"

    Returns:
        AlgorithmProvider: Provider for the algorithm

    Raises:
        UnsupportedAlgorithmError: If the token does not map to a provider
    """
    resolved = coerce_algorithm(algorithm)
    provider = ALGORITHM_PROVIDERS.get(resolved)
    if provider is None:
        raise UnsupportedAlgorithmError(
            f"No provider registered for {resolved.value}",
            details={"algorithm": resolved.value}
        )
    return provider


def supported_algorithms() -> List[str]:
    """Wire tokens of every registered algorithm."""
    return [algorithm.value for algorithm in ALGORITHM_PROVIDERS]
