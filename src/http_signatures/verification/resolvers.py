"""
Key resolvers for signature verification

A resolver maps the keyId of an incoming signature to a VerifyingKey. The
verifier treats resolvers as opaque; these implementations cover in-memory
tables, user callables, caching, and the OS keychain via keyring.
"""

import inspect
import logging
import threading
import time
from typing import Callable, Dict, Mapping, Optional, Tuple

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ..crypto.keys import load_verifying_key, serialize_verifying_key
from ..crypto.types import VerifyingKey
from ..exceptions import HttpSignaturesError, KeyNotFoundError, KeyResolutionError
from .types import KeyResolver

logger = logging.getLogger(__name__)

KEYRING_SERVICE_NAME = "http-signatures"
DEFAULT_CACHE_TTL = 300


class StaticKeyResolver:
    """Resolves keys from a fixed in-memory table"""

    def __init__(self, keys: Optional[Mapping[str, VerifyingKey]] = None):
        self._keys: Dict[str, VerifyingKey] = dict(keys or {})
        self._lock = threading.Lock()

    def add_key(self, key_id: str, key: VerifyingKey) -> None:
        if not isinstance(key, VerifyingKey):
            raise TypeError("key must be a VerifyingKey")
        with self._lock:
            self._keys[key_id] = key

    def remove_key(self, key_id: str) -> bool:
        with self._lock:
            return self._keys.pop(key_id, None) is not None

    def resolve(self, key_id: str) -> VerifyingKey:
        with self._lock:
            key = self._keys.get(key_id)
        if key is None:
            raise KeyNotFoundError(key_id)
        return key

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key_id: str) -> bool:
        return key_id in self._keys


class CallableKeyResolver:
    """
    Adapts a plain function to the resolver protocol.

    The function may return None for an unknown key; that is reported as
    KeyNotFoundError. Async callables are supported by Verifier.verify_async,
    which awaits the value returned here.
    """

    def __init__(self, func: Callable[[str], Optional[VerifyingKey]]):
        if not callable(func):
            raise TypeError("func must be callable")
        self._func = func

    def resolve(self, key_id: str):
        result = self._func(key_id)
        if result is None:
            raise KeyNotFoundError(key_id)
        return result


class CachingKeyResolver:
    """
    Caches successful lookups of another resolver for a fixed time.

    Misses and failures are never cached.
    """

    def __init__(
        self,
        inner: KeyResolver,
        ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic
    ):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.inner = inner
        self.ttl = ttl
        self._clock = clock
        self._cache: Dict[str, Tuple[VerifyingKey, float]] = {}
        self._lock = threading.Lock()

    def resolve(self, key_id: str) -> VerifyingKey:
        now = self._clock()
        key = self._cached(key_id, now)
        if key is not None:
            return key

        key = self.inner.resolve(key_id)
        if inspect.isawaitable(key):
            close = getattr(key, "close", None)
            if close is not None:
                close()
            raise KeyResolutionError(
                "Inner resolver is asynchronous; use resolve_async",
                "ASYNC_RESOLVER",
                {"key_id": key_id}
            )
        return self._store(key_id, key, now)

    async def resolve_async(self, key_id: str) -> VerifyingKey:
        """Resolve through the cache, awaiting the inner resolver on a miss."""
        now = self._clock()
        key = self._cached(key_id, now)
        if key is not None:
            return key

        inner_async = getattr(self.inner, "resolve_async", None)
        if inspect.iscoroutinefunction(inner_async):
            key = await inner_async(key_id)
        else:
            key = self.inner.resolve(key_id)
            if inspect.isawaitable(key):
                key = await key
        return self._store(key_id, key, now)

    def _cached(self, key_id: str, now: float) -> Optional[VerifyingKey]:
        with self._lock:
            entry = self._cache.get(key_id)
            if entry is not None and entry[1] > now:
                logger.debug(f"Key cache hit for {key_id}")
                return entry[0]
        logger.debug(f"Key cache miss for {key_id}")
        return None

    def _store(self, key_id: str, key: Optional[VerifyingKey], now: float) -> VerifyingKey:
        if key is None:
            raise KeyNotFoundError(key_id)
        with self._lock:
            self._cache[key_id] = (key, now + self.ttl)
        return key

    def invalidate(self, key_id: Optional[str] = None) -> None:
        """Drop one cached key, or the whole cache when key_id is None."""
        with self._lock:
            if key_id is None:
                self._cache.clear()
            else:
                self._cache.pop(key_id, None)

    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)


class KeyringKeyResolver:
    """
    Resolves verifying keys stored in the OS keychain.

    Entries are stored under the key ID as "<algorithm>:<serialized key>",
    where the serialized key is PEM for asymmetric keys and base64 for HMAC
    secrets.
    """

    def __init__(self, service_name: str = KEYRING_SERVICE_NAME):
        self.service_name = service_name

    def store_key(self, key_id: str, key: VerifyingKey) -> None:
        """
        Store a verifying key in the keychain.

        Raises:
            KeyResolutionError: If the keychain rejects the write
        """
        entry = f"{key.algorithm.value}:{serialize_verifying_key(key).decode('ascii')}"
        try:
            keyring.set_password(self.service_name, key_id, entry)
        except KeyringError as e:
            raise KeyResolutionError(
                f"Keyring storage failed: {e}",
                "KEYRING_STORAGE_FAILED",
                {"key_id": key_id}
            ) from e
        logger.info(f"Stored verifying key {key_id} in keyring service {self.service_name}")

    def resolve(self, key_id: str) -> VerifyingKey:
        try:
            entry = keyring.get_password(self.service_name, key_id)
        except KeyringError as e:
            logger.warning(f"Keyring lookup failed for {key_id}: {e}")
            raise KeyResolutionError(
                f"Keyring retrieval failed: {e}",
                "KEYRING_RETRIEVAL_FAILED",
                {"key_id": key_id}
            ) from e

        if entry is None:
            raise KeyNotFoundError(key_id, details={"service": self.service_name})

        algorithm, separator, data = entry.partition(":")
        if not separator or not data:
            raise KeyResolutionError(
                f"Keyring entry for {key_id} is not in '<algorithm>:<key>' form",
                "KEYRING_ENTRY_INVALID",
                {"key_id": key_id}
            )

        try:
            return load_verifying_key(data, algorithm)
        except HttpSignaturesError as e:
            raise KeyResolutionError(
                f"Keyring entry for {key_id} could not be loaded: {e.message}",
                "KEYRING_ENTRY_INVALID",
                {"key_id": key_id}
            ) from e

    def delete_key(self, key_id: str) -> bool:
        """Remove a stored key. Returns False if there was nothing to delete."""
        try:
            keyring.delete_password(self.service_name, key_id)
        except PasswordDeleteError:
            return False
        except KeyringError as e:
            raise KeyResolutionError(
                f"Keyring deletion failed: {e}",
                "KEYRING_DELETE_FAILED",
                {"key_id": key_id}
            ) from e
        return True
