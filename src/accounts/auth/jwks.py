"""Google JWKS fetching and caching for ID token verification."""

import logging
from datetime import UTC, datetime

import httpx
from jose import jwk
from jose.backends.base import Key

logger = logging.getLogger(__name__)


class JWKSCache:
    """
    Caches Google's OAuth signing keys in-memory with a TTL.

    Keys are fetched lazily on first use, refreshed once the TTL has elapsed
    and refreshed again whenever a token names a key ID the cache has never
    seen (Google rotates its signing keys every few days).

    Attributes:
        jwks_url: URL of the JWKS document (https://www.googleapis.com/oauth2/v3/certs)
        cache_ttl: Cache time-to-live in seconds
        _keys: Cached public keys (kid -> key)
        _last_refresh: Timestamp of last successful fetch
        _http_client: HTTP client used for fetching the JWKS document

    Example:
        >>> cache = JWKSCache("https://www.googleapis.com/oauth2/v3/certs")
        >>> key = await cache.get_signing_key("a1b2c3")
    """

    def __init__(
        self,
        jwks_url: str,
        cache_ttl: int = 3600,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize JWKS cache.

        Args:
            jwks_url: URL to fetch JWKS from
            cache_ttl: Cache TTL in seconds (default: 1 hour)
            timeout: Timeout in seconds for the JWKS fetch
            http_client: Optional pre-built client (owned by the caller)
        """
        self.jwks_url = jwks_url
        self.cache_ttl = cache_ttl
        self._keys: dict[str, Key] = {}
        self._last_refresh: datetime | None = None
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def get_signing_key(self, kid: str) -> Key:
        """
        Get public key by key ID, refreshing the cache when stale or on a miss.

        Raises:
            ValueError: If key ID not found after refresh
            httpx.HTTPError: If JWKS fetch fails
        """
        if self._needs_refresh():
            await self.refresh_keys()

        key = self._keys.get(kid)

        # Unknown kid usually means Google rotated keys since our last fetch
        if key is None:
            logger.warning(
                f"Key ID '{kid}' not found in cache, refreshing JWKS",
                extra={"kid": kid, "cached_kids": list(self._keys.keys())},
            )
            await self.refresh_keys()
            key = self._keys.get(kid)

        if key is None:
            raise ValueError(
                f"Key ID '{kid}' not found in JWKS. Available keys: {list(self._keys.keys())}"
            )

        return key

    async def refresh_keys(self) -> None:
        """
        Fetch the JWKS document and replace the cached keys.

        Raises:
            httpx.HTTPError: If HTTP request fails
            ValueError: If a key in the response cannot be parsed
        """
        try:
            logger.info(f"Fetching JWKS from {self.jwks_url}")
            response = await self._http_client.get(self.jwks_url)
            response.raise_for_status()

            keys_list = response.json().get("keys", [])
            if not keys_list:
                logger.warning(
                    "JWKS response contains no keys, ID token verification will fail",
                    extra={"jwks_url": self.jwks_url},
                )

            new_keys: dict[str, Key] = {}
            for key_data in keys_list:
                kid = key_data.get("kid")
                if not kid:
                    logger.warning("JWKS key missing 'kid', skipping")
                    continue

                # Google publishes RSA keys only
                algorithm = key_data.get("alg", "RS256")
                new_keys[kid] = jwk.construct(key_data, algorithm=algorithm)
                logger.debug(f"Loaded key {kid} ({algorithm})", extra={"kid": kid})

            self._keys = new_keys
            self._last_refresh = datetime.now(UTC)

            logger.info(
                "JWKS cache refreshed",
                extra={"key_count": len(new_keys), "ttl_seconds": self.cache_ttl},
            )

        except httpx.HTTPError as e:
            logger.error(
                f"Failed to fetch JWKS from {self.jwks_url}: {e}",
                extra={"error_type": "jwks_fetch_failed"},
            )
            raise

        except Exception as e:
            logger.error(
                f"Failed to parse JWKS: {e}",
                exc_info=True,
                extra={"error_type": "jwks_parse_failed"},
            )
            raise

    def _needs_refresh(self) -> bool:
        if self._last_refresh is None:
            return True

        age = (datetime.now(UTC) - self._last_refresh).total_seconds()
        return age >= self.cache_ttl

    async def close(self) -> None:
        """Close the HTTP client if this cache created it."""
        if self._owns_client:
            await self._http_client.aclose()
        logger.info("JWKS cache closed")
