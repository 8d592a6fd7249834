"""
Unit tests for key resolvers
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from keyring.errors import KeyringError, PasswordDeleteError

from http_signatures.crypto import serialize_verifying_key
from http_signatures.exceptions import KeyNotFoundError, KeyResolutionError
from http_signatures.verification import (
    CachingKeyResolver,
    CallableKeyResolver,
    KeyResolver,
    KeyringKeyResolver,
    StaticKeyResolver,
)


class TestStaticKeyResolver:
    """Test the in-memory resolver"""

    def test_resolve(self, hmac_key):
        """Test known keys are returned"""
        resolver = StaticKeyResolver({"k": hmac_key.verifying_key()})

        assert resolver.resolve("k") == hmac_key.verifying_key()
        assert isinstance(resolver, KeyResolver)

    def test_unknown(self):
        """Test unknown key IDs raise KeyNotFoundError"""
        with pytest.raises(KeyNotFoundError) as exc_info:
            StaticKeyResolver().resolve("missing")

        assert exc_info.value.key_id == "missing"

    def test_add_and_remove(self, hmac_key):
        """Test keys can be added and removed"""
        resolver = StaticKeyResolver()
        resolver.add_key("k", hmac_key.verifying_key())

        assert "k" in resolver
        assert len(resolver) == 1
        assert resolver.remove_key("k") is True
        assert resolver.remove_key("k") is False

    def test_add_rejects_signing_key(self, hmac_key):
        """Test only verifying keys can be registered"""
        with pytest.raises(TypeError):
            StaticKeyResolver().add_key("k", hmac_key)


class TestCallableKeyResolver:
    """Test the function adapter"""

    def test_resolve(self, hmac_key):
        """Test the function result is returned"""
        resolver = CallableKeyResolver(lambda key_id: hmac_key.verifying_key())

        assert resolver.resolve("any") == hmac_key.verifying_key()

    def test_none_is_not_found(self):
        """Test None from the function means not found"""
        with pytest.raises(KeyNotFoundError):
            CallableKeyResolver(lambda key_id: None).resolve("k")

    def test_not_callable(self):
        """Test a non-callable is rejected"""
        with pytest.raises(TypeError):
            CallableKeyResolver("not callable")


class TestCachingKeyResolver:
    """Test the caching wrapper"""

    def test_caches_hits(self, hmac_key):
        """Test a second lookup inside the TTL skips the inner resolver"""
        inner = Mock()
        inner.resolve.return_value = hmac_key.verifying_key()
        resolver = CachingKeyResolver(inner, ttl=60, clock=lambda: 100.0)

        resolver.resolve("k")
        resolver.resolve("k")

        inner.resolve.assert_called_once_with("k")
        assert resolver.cache_size() == 1

    def test_entries_expire(self, hmac_key):
        """Test entries are refreshed after the TTL"""
        now = [100.0]
        inner = Mock()
        inner.resolve.return_value = hmac_key.verifying_key()
        resolver = CachingKeyResolver(inner, ttl=60, clock=lambda: now[0])

        resolver.resolve("k")
        now[0] = 161.0
        resolver.resolve("k")

        assert inner.resolve.call_count == 2

    def test_misses_not_cached(self, hmac_key):
        """Test failures are retried on the next lookup"""
        inner = Mock()
        inner.resolve.side_effect = [KeyNotFoundError("k"), hmac_key.verifying_key()]
        resolver = CachingKeyResolver(inner, ttl=60)

        with pytest.raises(KeyNotFoundError):
            resolver.resolve("k")
        assert resolver.resolve("k") == hmac_key.verifying_key()

    def test_inner_none_is_not_found(self):
        """Test an inner resolver returning None is not cached"""
        inner = Mock()
        inner.resolve.return_value = None
        resolver = CachingKeyResolver(inner)

        with pytest.raises(KeyNotFoundError):
            resolver.resolve("k")
        assert resolver.cache_size() == 0

    def test_invalidate(self, hmac_key):
        """Test explicit invalidation of one key or all keys"""
        inner = Mock()
        inner.resolve.return_value = hmac_key.verifying_key()
        resolver = CachingKeyResolver(inner, ttl=60)

        resolver.resolve("a")
        resolver.resolve("b")
        resolver.invalidate("a")
        assert resolver.cache_size() == 1

        resolver.invalidate()
        assert resolver.cache_size() == 0

    def test_invalid_ttl(self):
        """Test the TTL must be positive"""
        with pytest.raises(ValueError):
            CachingKeyResolver(Mock(), ttl=0)

    @pytest.mark.asyncio
    async def test_async_inner_cached(self, hmac_key):
        """Test resolve_async caches the awaited key, not the coroutine"""
        inner = Mock()
        inner.resolve = AsyncMock(return_value=hmac_key.verifying_key())
        resolver = CachingKeyResolver(inner, ttl=60)

        assert await resolver.resolve_async("k") == hmac_key.verifying_key()
        assert await resolver.resolve_async("k") == hmac_key.verifying_key()
        inner.resolve.assert_awaited_once_with("k")

    @pytest.mark.asyncio
    async def test_async_inner_none(self):
        """Test an awaited None is not found and not cached"""
        inner = Mock()
        inner.resolve = AsyncMock(return_value=None)
        resolver = CachingKeyResolver(inner)

        with pytest.raises(KeyNotFoundError):
            await resolver.resolve_async("k")
        assert resolver.cache_size() == 0

    def test_sync_resolve_rejects_async_inner(self, hmac_key):
        """Test resolve() refuses an async inner resolver without caching"""
        inner = Mock()
        inner.resolve = AsyncMock(return_value=hmac_key.verifying_key())
        resolver = CachingKeyResolver(inner)

        with pytest.raises(KeyResolutionError) as exc_info:
            resolver.resolve("k")

        assert exc_info.value.error_code == "ASYNC_RESOLVER"
        assert resolver.cache_size() == 0


class TestKeyringKeyResolver:
    """Test the OS keychain resolver with keyring mocked out"""

    @patch("http_signatures.verification.resolvers.keyring")
    def test_resolve_rsa(self, mock_keyring, rsa_key):
        """Test PEM entries are loaded with their algorithm"""
        pem = serialize_verifying_key(rsa_key.verifying_key()).decode("ascii")
        mock_keyring.get_password.return_value = f"rsa-sha256:{pem}"

        key = KeyringKeyResolver("svc").resolve("rsa-key-1")

        assert key.material.public_numbers() == rsa_key.material.public_key().public_numbers()
        mock_keyring.get_password.assert_called_once_with("svc", "rsa-key-1")

    @patch("http_signatures.verification.resolvers.keyring")
    def test_store_then_resolve(self, mock_keyring, hmac_key):
        """Test stored entries resolve to the same key"""
        store = {}
        mock_keyring.set_password.side_effect = lambda service, key_id, value: store.__setitem__(key_id, value)
        mock_keyring.get_password.side_effect = lambda service, key_id: store.get(key_id)
        resolver = KeyringKeyResolver()

        resolver.store_key("hmac-key-1", hmac_key.verifying_key())

        assert store["hmac-key-1"].startswith("hmac-sha256:")
        assert resolver.resolve("hmac-key-1") == hmac_key.verifying_key()

    @patch("http_signatures.verification.resolvers.keyring")
    def test_missing_entry(self, mock_keyring):
        """Test a missing entry raises KeyNotFoundError"""
        mock_keyring.get_password.return_value = None

        with pytest.raises(KeyNotFoundError):
            KeyringKeyResolver().resolve("nobody")

    @patch("http_signatures.verification.resolvers.keyring")
    def test_keyring_failure(self, mock_keyring):
        """Test keyring backend errors raise KeyResolutionError"""
        mock_keyring.get_password.side_effect = KeyringError("locked")

        with pytest.raises(KeyResolutionError):
            KeyringKeyResolver().resolve("k")

    @pytest.mark.parametrize("entry", ["no-separator", "rsa-sha256:", "rsa-md5:abc", "hmac-sha256:!!!"])
    @patch("http_signatures.verification.resolvers.keyring")
    def test_invalid_entry(self, mock_keyring, entry):
        """Test unreadable entries raise KeyResolutionError"""
        mock_keyring.get_password.return_value = entry

        with pytest.raises(KeyResolutionError):
            KeyringKeyResolver().resolve("k")

    @patch("http_signatures.verification.resolvers.keyring")
    def test_delete(self, mock_keyring):
        """Test deletion reports whether an entry existed"""
        resolver = KeyringKeyResolver()

        assert resolver.delete_key("k") is True

        mock_keyring.delete_password.side_effect = PasswordDeleteError("not found")
        assert resolver.delete_key("k") is False
