"""
Helper functions for loading Azure Key Vault secrets with the shared credential.
"""

import logging
import os

from azure.keyvault.secrets import SecretClient

import cfa.credentials.defaults as d
from cfa.credentials.config import get_config_val
from cfa.credentials.provider import get_token_credential

logger = logging.getLogger(__name__)


def get_secret_client(keyvault: str, credential: object = None) -> SecretClient:
    """Get an Azure Key Vault SecretClient.

    Args:
        keyvault: Name of the Azure Key Vault to connect to.
        credential: Token credential to authenticate with. If None, use the
            shared credential from ``get_token_credential()``.

    Returns:
        SecretClient: A SecretClient for the specified Key Vault.

    Example:
        >>> secret_client = get_secret_client("myvault")
    """
    if credential is None:
        credential = get_token_credential()
    vault_url = f"https://{keyvault}.{d.default_azure_keyvault_endpoint_subdomain}"
    logger.debug(f"Creating SecretClient for {vault_url}.")
    return SecretClient(vault_url=vault_url, credential=credential)


def secret_name_to_env_var(name: str) -> str:
    """Convert a Key Vault secret name to an environment variable name.

    Example:
        >>> secret_name_to_env_var("azure-client-id")
        'AZURE_CLIENT_ID'
    """
    return name.replace("-", "_").upper()


def load_keyvault_secrets(
    secret_client: SecretClient,
    secret_names: list[str] = None,
    force: bool = False,
    to_environ: bool = True,
) -> dict[str, str]:
    """Load secrets from an Azure Key Vault.

    Secrets whose environment variable is already set are skipped unless
    ``force`` is True. A secret that cannot be read is logged and skipped.

    Args:
        secret_client: SecretClient for accessing the Azure Key Vault.
        secret_names: Names of the secrets to load. If None, load every enabled
            secret in the vault.
        force: Load secrets even when the environment variable is already set.
        to_environ: Save the loaded values to ``os.environ``.

    Returns:
        dict[str, str]: Loaded values keyed by environment variable name.
    """
    if secret_names is None:
        logger.debug("Listing secrets in Key Vault.")
        secret_names = [
            prop.name
            for prop in secret_client.list_properties_of_secrets()
            if prop.enabled is not False
        ]

    loaded = {}
    for name in secret_names:
        env_name = secret_name_to_env_var(name)
        if env_name in os.environ and not force:
            logger.debug(
                f"Environment variable '{env_name}' already set; skipping Key Vault load."
            )
            continue
        try:
            loaded[env_name] = secret_client.get_secret(name).value
        except Exception as e:
            logger.warning(f"Could not load secret '{name}' from Key Vault: {e}")
            continue
        logger.debug(f"Loaded secret '{name}' from Key Vault.")

    if to_environ:
        os.environ.update(loaded)
    logger.info(f"Loaded {len(loaded)} secret(s) from Key Vault.")
    return loaded


def get_keyvault_vars(
    keyvault_name: str = None,
    credential: object = None,
    secret_names: list[str] = None,
    force: bool = False,
    config_dict: dict = None,
) -> dict[str, str] | None:
    """Retrieve secrets from an Azure Key Vault and save them to the environment.

    Args:
        keyvault_name: Name of the Azure Key Vault. If None, it is looked up as
            ``azure_keyvault_name`` in ``config_dict`` and then in the
            ``AZURE_KEYVAULT_NAME`` environment variable. If none is found,
            nothing is loaded.
        credential: Token credential. If None, use the shared credential.
        secret_names: Names of the secrets to load. If None, load all of them.
        force: Overwrite environment variables that are already set.
        config_dict: Configuration dictionary consulted for the vault name.

    Returns:
        dict[str, str] | None: The loaded values, or None if no vault was named.
    """
    if keyvault_name is None:
        keyvault_name = get_config_val(
            "azure_keyvault_name", config_dict=config_dict, value_name="Key Vault name"
        )
    if keyvault_name is None:
        logger.debug("No Key Vault name found; skipping Key Vault variable loading.")
        return None
    secret_client = get_secret_client(keyvault_name, credential=credential)
    return load_keyvault_secrets(secret_client, secret_names=secret_names, force=force)
