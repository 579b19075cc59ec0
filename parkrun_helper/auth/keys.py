"""Signing key discovery from a remote JSON Web Key Set."""

import asyncio
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, Optional

import httpx
import jwt
from jwt.exceptions import InvalidKeyError, PyJWKError

from .._utils import logger
from .exceptions import KeyNotFoundError, RateLimitExceededError
from .models import CachedKey, SigningKey


class KeyCache:
    """Time-to-live cache of resolved signing keys.

    Entries older than ``ttl`` seconds are treated as absent and dropped on
    lookup. Only successful resolutions are ever stored.
    """

    def __init__(self, ttl: float = 86400.0, now: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._now = now
        self._entries: Dict[str, CachedKey] = {}

    def get(self, key_id: str) -> Optional[SigningKey]:
        entry = self._entries.get(key_id)
        if entry is None:
            return None
        if self._now() - entry.fetched_at >= self.ttl:
            del self._entries[key_id]
            return None
        return entry.key

    def put(self, key: SigningKey) -> None:
        self._entries[key.key_id] = CachedKey(key=key, fetched_at=self._now())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RequestRateLimiter:
    """Sliding-window limiter for outbound key set requests.

    A caller over the per-window budget is suspended until a slot frees up,
    but never longer than ``max_wait`` seconds.
    """

    def __init__(
        self,
        max_requests: int = 10,
        period: float = 60.0,
        max_wait: float = 5.0,
        now: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.max_requests = max_requests
        self.period = period
        self.max_wait = max_wait
        self._now = now
        self._sleep = sleep
        self._timestamps: Deque[float] = deque()
        self._lock = asyncio.Lock()

    def _evict(self, current: float) -> None:
        while self._timestamps and current - self._timestamps[0] >= self.period:
            self._timestamps.popleft()

    async def acquire(self) -> None:
        # Time spent queued behind other callers counts against max_wait
        deadline = self._now() + self.max_wait
        async with self._lock:
            while True:
                current = self._now()
                self._evict(current)
                if len(self._timestamps) < self.max_requests:
                    self._timestamps.append(current)
                    return

                wait = self._timestamps[0] + self.period - current
                if current + wait > deadline:
                    raise RateLimitExceededError(
                        f"JWKS request limit of {self.max_requests} per {self.period:.0f}s exceeded"
                    )
                logger.debug(f"JWKS rate limit reached, waiting {wait:.2f}s")
                await self._sleep(wait)


class SigningKeyResolver:
    """Resolve key ids to RSA public keys, caching the remote key set."""

    def __init__(
        self,
        jwks_uri: str,
        cache: Optional[KeyCache] = None,
        rate_limiter: Optional[RequestRateLimiter] = None,
        timeout: float = 10.0,
    ):
        self.jwks_uri = jwks_uri
        self.cache = cache or KeyCache()
        self.rate_limiter = rate_limiter or RequestRateLimiter()
        self.timeout = timeout

    async def get_signing_key(self, key_id: str) -> SigningKey:
        """Return the signing key for ``key_id``.

        Raises:
            KeyNotFoundError: If the key cannot be fetched or is not in the key set
        """
        cached = self.cache.get(key_id)
        if cached is not None:
            return cached

        keys = await self._fetch_keys(key_id)
        for key in keys.values():
            self.cache.put(key)

        if key_id not in keys:
            logger.warning(f"Signing key {key_id} not found in key set ({len(keys)} keys)")
            raise KeyNotFoundError(key_id)

        return keys[key_id]

    async def _fetch_keys(self, key_id: str) -> Dict[str, SigningKey]:
        try:
            await self.rate_limiter.acquire()
        except RateLimitExceededError as e:
            logger.warning(f"Refusing JWKS fetch for {key_id}: {e}")
            raise KeyNotFoundError(key_id, str(e))

        logger.info(f"Fetching signing keys from {self.jwks_uri}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.jwks_uri)
                response.raise_for_status()
                payload = response.json()

        except httpx.TimeoutException:
            logger.error(f"JWKS request timed out after {self.timeout}s")
            raise KeyNotFoundError(key_id, "key set request timed out")

        except httpx.HTTPStatusError as e:
            logger.error(f"JWKS endpoint returned HTTP {e.response.status_code}")
            raise KeyNotFoundError(key_id, f"key set request failed with HTTP {e.response.status_code}")

        except httpx.HTTPError as e:
            logger.error(f"JWKS request failed: {e}")
            raise KeyNotFoundError(key_id, "key set request failed")

        except ValueError as e:
            logger.error(f"JWKS response is not valid JSON: {e}")
            raise KeyNotFoundError(key_id, "malformed key set response")

        return self._parse_key_set(payload, key_id)

    def _parse_key_set(self, payload, key_id: str) -> Dict[str, SigningKey]:
        if not isinstance(payload, dict) or not isinstance(payload.get("keys"), list):
            raise KeyNotFoundError(key_id, "malformed key set response")

        keys: Dict[str, SigningKey] = {}
        for jwk in payload["keys"]:
            if not isinstance(jwk, dict) or not jwk.get("kid"):
                continue
            if jwk.get("kty") != "RSA" or jwk.get("use", "sig") != "sig":
                continue
            try:
                public_key = jwt.PyJWK(jwk, algorithm="RS256").key
            except (PyJWKError, InvalidKeyError, KeyError, ValueError) as e:
                logger.warning(f"Skipping unusable key {jwk.get('kid')}: {e}")
                continue
            keys[jwk["kid"]] = SigningKey(key_id=jwk["kid"], public_key=public_key)

        logger.debug(f"Parsed {len(keys)} signing keys from key set")
        return keys
