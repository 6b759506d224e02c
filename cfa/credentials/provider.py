"""
Selection and caching of the Azure token credential for the current environment.

Azure SDK maintainers recommend sharing a single credential instance: the only
reason to use a different instance is to discover a different credential in the
chain. See https://github.com/Azure/azure-sdk-for-net/issues/31202#issuecomment-1284543516

Credentials are therefore created once per environment name and kept for the
lifetime of the process.
"""

import logging
import os
import threading
from enum import Enum
from typing import Callable

from azure.core.credentials import TokenCredential
from azure.identity import (
    AzureCliCredential,
    ChainedTokenCredential,
    DefaultAzureCredential,
)

import cfa.credentials.defaults as d
from cfa.credentials.browser import CachedInteractiveBrowserCredential
from cfa.credentials.config import EnvHostEnvironment, StaticHostEnvironment
from cfa.credentials.helpers import is_blank
from cfa.credentials.proxy import is_fiddler_active

logger = logging.getLogger(__name__)

# Keyed by case-folded environment name. Written only via _get_or_create.
_cached_token_credentials: dict[str, TokenCredential] = {}
_cache_lock = threading.Lock()


class CredentialStrategy(Enum):
    """The kinds of credential handed out by ``TokenCredentialProvider``."""

    DISCOVERY = "discovery"
    CLI_SESSION_FIRST = "cli_session_first"
    INTERACTIVE_BROWSER = "interactive_browser"


def is_cli_compatible_environment(environment_name: str | None) -> bool:
    """Is ``environment_name`` one where a developer may be logged in with the Azure CLI?

    Matching is exact and case-insensitive. None and blank names are not compatible.

    Example:
        >>> is_cli_compatible_environment("development")
        True
        >>> is_cli_compatible_environment("Production")
        False
    """
    if is_blank(environment_name):
        return False
    return environment_name.casefold() in d.cli_compatible_environments


def is_running_on_build_agent() -> bool:
    """Check whether any known CI server environment variable holds a non-blank value."""
    for name in d.ci_environment_variables:
        if not is_blank(os.environ.get(name)):
            logger.debug(f"CI environment variable {name} is set.")
            return True
    return False


def select_credential_strategy(
    environment_name: str | None,
    proxy_active: Callable[[], bool] = is_fiddler_active,
    on_build_agent: Callable[[], bool] = is_running_on_build_agent,
) -> CredentialStrategy:
    """Decide which credential strategy suits an environment.

    Non CLI-compatible environments always get the discovery chain. In
    CLI-compatible environments:

    * an active Fiddler proxy breaks Azure CLI authentication, so the
      interactive browser flow is used;
    * on a build agent, the discovery chain is used so managed identity is
      tried before the Azure CLI;
    * otherwise the Azure CLI is tried first, since it is usually faster than
      the full discovery chain, falling back to discovery.

    The probes are only invoked when needed, in that order.

    Args:
        environment_name: The host environment name.
        proxy_active: Zero-argument callable reporting an active debugging proxy.
        on_build_agent: Zero-argument callable reporting a CI build agent.

    Returns:
        CredentialStrategy: The selected strategy.
    """
    if not is_cli_compatible_environment(environment_name):
        return CredentialStrategy.DISCOVERY
    if proxy_active():
        return CredentialStrategy.INTERACTIVE_BROWSER
    if on_build_agent():
        return CredentialStrategy.DISCOVERY
    return CredentialStrategy.CLI_SESSION_FIRST


def build_token_credential(strategy: CredentialStrategy) -> TokenCredential:
    """Create a new credential instance for ``strategy``.

    See https://learn.microsoft.com/python/api/azure-identity/azure.identity.defaultazurecredential
    for the mechanisms tried by the discovery chain.
    """
    match strategy:
        case CredentialStrategy.INTERACTIVE_BROWSER:
            return CachedInteractiveBrowserCredential()
        case CredentialStrategy.CLI_SESSION_FIRST:
            return ChainedTokenCredential(
                AzureCliCredential(), DefaultAzureCredential()
            )
        case CredentialStrategy.DISCOVERY:
            return DefaultAzureCredential()
    raise ValueError(f"Unknown credential strategy {strategy!r}")


def _get_or_create(
    environment_name: str | None,
    factory: Callable[[str | None], TokenCredential],
) -> TokenCredential:
    key = (environment_name or "").casefold()
    cached = _cached_token_credentials.get(key)
    if cached is not None:
        logger.debug(f"Using cached credential for environment '{environment_name}'.")
        return cached

    candidate = factory(environment_name)
    with _cache_lock:
        winner = _cached_token_credentials.setdefault(key, candidate)

    if winner is not candidate:
        logger.debug(
            f"Credential for environment '{environment_name}' was created concurrently. "
            "Discarding the duplicate."
        )
        close = getattr(candidate, "close", None)
        if close is not None:
            close()
    return winner


class TokenCredentialProvider:
    """Provide the shared Azure token credential for the host environment.

    The environment name is read from ``environment`` on every call, but a
    credential is only created the first time a given (case-insensitive) name is
    seen. All providers in the process share the same cache.

    Args:
        environment: Object exposing an ``environment_name`` attribute. Defaults
            to an ``EnvHostEnvironment``.
        proxy_detector: Zero-argument callable reporting whether a local
            debugging proxy is active. Defaults to ``is_fiddler_active``.

    Example:
        >>> provider = TokenCredentialProvider(StaticHostEnvironment("Local"))
        >>> credential = provider.get_token_credential()
        >>> credential is provider.get_token_credential()
        True
    """

    def __init__(
        self,
        environment=None,
        proxy_detector: Callable[[], bool] = None,
    ):
        self.environment = (
            environment if environment is not None else EnvHostEnvironment()
        )
        self.proxy_detector = (
            proxy_detector if proxy_detector is not None else is_fiddler_active
        )

    def get_token_credential(self) -> TokenCredential:
        """Get the cached credential for the current environment, creating it if needed.

        Returns:
            TokenCredential: A credential shared by every caller asking for the
                same environment name.
        """
        return _get_or_create(self.environment.environment_name, self._create)

    def _create(self, environment_name: str | None) -> TokenCredential:
        strategy = select_credential_strategy(
            environment_name, proxy_active=self._proxy_active
        )
        logger.info(
            f"Using {strategy.value} credential for environment '{environment_name}'."
        )
        return build_token_credential(strategy)

    def _proxy_active(self) -> bool:
        try:
            return bool(self.proxy_detector())
        except Exception as e:
            logger.debug(f"Proxy detection failed, assuming inactive: {e}")
            return False


def get_token_credential(environment_name: str = None) -> TokenCredential:
    """Get the shared Azure token credential.

    Args:
        environment_name: Environment to select a credential for. If None, the
            name is read from environment variables (see ``EnvHostEnvironment``).

    Returns:
        TokenCredential: The cached credential for that environment.

    Example:
        >>> from azure.keyvault.secrets import SecretClient
        >>> client = SecretClient("https://myvault.vault.azure.net", get_token_credential())
    """
    environment = (
        StaticHostEnvironment(environment_name)
        if environment_name is not None
        else None
    )
    return TokenCredentialProvider(environment).get_token_credential()
