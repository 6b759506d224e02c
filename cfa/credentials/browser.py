"""
Interactive browser credential that remembers the tokens it acquires.
"""

import logging
import threading
import time

from azure.core.credentials import AccessToken, AccessTokenInfo
from azure.identity import InteractiveBrowserCredential, TokenCachePersistenceOptions

import cfa.credentials.defaults as d

logger = logging.getLogger(__name__)


class CachedInteractiveBrowserCredential(InteractiveBrowserCredential):
    """InteractiveBrowserCredential with an in-memory access token cache.

    Tokens are cached per requested scope tuple and CAE setting, and reused
    until they are within ``refresh_margin`` seconds of expiry, so repeated
    requests do not go back through the interactive flow. Both ``get_token``
    and ``get_token_info`` (used by azure-core's BearerTokenCredentialPolicy)
    share the cache. Requests carrying ``claims`` or a ``tenant_id`` bypass it.

    Args:
        persist_token_cache: Also persist MSAL's token cache to disk so a login
            survives process restarts. Requires platform secret storage.
        refresh_margin: Seconds before expiry at which a cached token is
            considered stale.
        **kwargs: Passed to ``InteractiveBrowserCredential``.

    Example:
        >>> credential = CachedInteractiveBrowserCredential()
        >>> token = credential.get_token("https://vault.azure.net/.default")
    """

    def __init__(
        self,
        persist_token_cache: bool = False,
        refresh_margin: int = d.default_token_refresh_margin_seconds,
        **kwargs,
    ):
        if persist_token_cache:
            logger.debug("Enabling persistent token cache for browser credential.")
            kwargs.setdefault(
                "cache_persistence_options",
                TokenCachePersistenceOptions(name=d.default_token_cache_name),
            )
        super().__init__(**kwargs)
        self.refresh_margin = refresh_margin
        self._tokens: dict[tuple, AccessTokenInfo] = {}
        self._lock = threading.Lock()

    def get_cached_token(self, key: tuple) -> AccessTokenInfo | None:
        with self._lock:
            token = self._tokens.get(key)
        if token is None or token.expires_on - self.refresh_margin <= time.time():
            return None
        return token

    def store_cached_token(self, key: tuple, token: AccessTokenInfo):
        with self._lock:
            self._tokens[key] = token

    def get_token(
        self, *scopes: str, claims=None, tenant_id=None, enable_cae=False, **kwargs
    ) -> AccessToken:
        if claims is not None or tenant_id is not None:
            return super().get_token(
                *scopes,
                claims=claims,
                tenant_id=tenant_id,
                enable_cae=enable_cae,
                **kwargs,
            )

        key = (scopes, bool(enable_cae))
        cached = self.get_cached_token(key)
        if cached is not None:
            logger.debug(f"Using cached browser token for scopes {scopes}.")
            return AccessToken(cached.token, cached.expires_on)

        logger.debug(f"Requesting browser token for scopes {scopes}.")
        token = super().get_token(*scopes, enable_cae=enable_cae, **kwargs)
        self.store_cached_token(key, AccessTokenInfo(token.token, token.expires_on))
        return token

    def get_token_info(self, *scopes: str, options=None) -> AccessTokenInfo:
        request = options or {}
        if request.get("claims") is not None or request.get("tenant_id") is not None:
            return super().get_token_info(*scopes, options=options)

        key = (scopes, bool(request.get("enable_cae", False)))
        cached = self.get_cached_token(key)
        if cached is not None:
            logger.debug(f"Using cached browser token info for scopes {scopes}.")
            return cached

        logger.debug(f"Requesting browser token info for scopes {scopes}.")
        token = super().get_token_info(*scopes, options=options)
        self.store_cached_token(key, token)
        return token
