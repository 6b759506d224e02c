from unittest.mock import MagicMock

import pytest

import cfa.credentials.defaults as d


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove CI, proxy and environment-name variables and start with an empty credential cache."""
    for name in (
        *d.ci_environment_variables,
        *d.default_proxy_environment_variables,
        *d.default_environment_name_variables,
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("cfa.credentials.provider._cached_token_credentials", {})


@pytest.fixture
def mock_credentials(mocker):
    """Replace the azure-identity credential classes used by the provider.

    Every instantiation returns a distinct MagicMock, tagged with the class name
    in its ``kind`` attribute, so identity checks are meaningful.
    """

    def make(name):
        def instantiate(*args, **kwargs):
            credential = MagicMock()
            credential.kind = name
            credential.args = args
            return credential

        return mocker.patch(f"cfa.credentials.provider.{name}", side_effect=instantiate)

    return {
        name: make(name)
        for name in (
            "DefaultAzureCredential",
            "AzureCliCredential",
            "ChainedTokenCredential",
            "CachedInteractiveBrowserCredential",
        )
    }
