"""
Default configurations for credential selection.
"""

import logging

logger = logging.getLogger(__name__)

# Mostly local, development and test environments, or any environment
# where a developer could be logged in with the Azure CLI.
# Stored case-folded; compare against ``name.casefold()``.
cli_compatible_environments = frozenset(
    name.casefold()
    for name in (
        "Local",
        "LocalDocker",
        "Test",
        "Tests",
        "CI",
        "Development",
        "DevelopmentDocker",
    )
)

# Environment variables defined by continuous integration servers.
# Adapted from https://github.com/watson/ci-info/blob/v3.3.1/vendors.json
ci_environment_variables = (
    "SYSTEM_TEAMFOUNDATIONCOLLECTIONURI",  # Azure Pipelines
    "GITHUB_ACTIONS",  # GitHub Actions
    "TEAMCITY",  # TeamCity
)

# Variables consulted, in order, for the host environment name.
default_environment_name_variables = (
    "CFA_ENVIRONMENT",
    "APP_ENVIRONMENT",
    "ENVIRONMENT",
)
default_environment_name = "Production"

# Fiddler Classic listens on 8888, Fiddler Everywhere on 8866.
default_fiddler_proxy_ports = (8888, 8866)
default_proxy_environment_variables = (
    "HTTP_PROXY",
    "HTTPS_PROXY",
    "ALL_PROXY",
    "http_proxy",
    "https_proxy",
    "all_proxy",
)
loopback_hosts = frozenset({"localhost", "127.0.0.1", "::1"})
wininet_settings_key = r"Software\Microsoft\Windows\CurrentVersion\Internet Settings"

default_token_cache_name = "cfa-credentials"
default_token_refresh_margin_seconds = 300

default_azure_keyvault_endpoint_subdomain = "vault.azure.net"
