import pytest
from azure.core.credentials import AccessTokenInfo
from azure.core.pipeline import PipelineContext, PipelineRequest
from azure.core.pipeline.policies import BearerTokenCredentialPolicy
from azure.core.rest import HttpRequest
from azure.identity import InteractiveBrowserCredential
from shared_fixtures import FAKE_SCOPE, fake_access_token

from cfa.credentials.browser import CachedInteractiveBrowserCredential


@pytest.fixture
def mock_browser_get_token(mocker):
    return mocker.patch.object(
        InteractiveBrowserCredential,
        "get_token",
        side_effect=lambda *scopes, **kwargs: fake_access_token(),
    )


@pytest.fixture
def mock_browser_get_token_info(mocker):
    def token_info(*scopes, **kwargs):
        token = fake_access_token()
        return AccessTokenInfo(token.token, token.expires_on)

    return mocker.patch.object(
        InteractiveBrowserCredential, "get_token_info", side_effect=token_info
    )


def make_request():
    return PipelineRequest(
        HttpRequest("GET", "https://myvault.vault.azure.net/secrets/my-secret"),
        PipelineContext(None),
    )


def test_token_is_cached_per_scope(mock_browser_get_token):
    credential = CachedInteractiveBrowserCredential()
    first = credential.get_token(FAKE_SCOPE)
    second = credential.get_token(FAKE_SCOPE)
    assert first == second
    mock_browser_get_token.assert_called_once_with(FAKE_SCOPE, enable_cae=False)


def test_different_scopes_are_cached_separately(mock_browser_get_token):
    credential = CachedInteractiveBrowserCredential()
    vault = credential.get_token(FAKE_SCOPE)
    credential.get_token("https://storage.azure.com/.default")
    assert mock_browser_get_token.call_count == 2
    assert credential.get_token(FAKE_SCOPE) == vault
    assert mock_browser_get_token.call_count == 2


def test_cae_tokens_are_cached_separately(mock_browser_get_token):
    credential = CachedInteractiveBrowserCredential()
    credential.get_token(FAKE_SCOPE)
    credential.get_token(FAKE_SCOPE, enable_cae=True)
    credential.get_token(FAKE_SCOPE, enable_cae=True)
    assert mock_browser_get_token.call_count == 2
    mock_browser_get_token.assert_called_with(FAKE_SCOPE, enable_cae=True)


def test_token_near_expiry_is_refreshed(mocker):
    get_token = mocker.patch.object(
        InteractiveBrowserCredential,
        "get_token",
        side_effect=lambda *scopes, **kwargs: fake_access_token(lifetime_seconds=60),
    )
    credential = CachedInteractiveBrowserCredential(refresh_margin=300)
    credential.get_token(FAKE_SCOPE)
    credential.get_token(FAKE_SCOPE)
    assert get_token.call_count == 2


def test_claims_bypass_cache(mock_browser_get_token):
    credential = CachedInteractiveBrowserCredential()
    credential.get_token(FAKE_SCOPE)
    credential.get_token(FAKE_SCOPE, claims='{"access_token": {}}')
    assert mock_browser_get_token.call_count == 2
    mock_browser_get_token.assert_called_with(
        FAKE_SCOPE, claims='{"access_token": {}}', tenant_id=None, enable_cae=False
    )


def test_tenant_bypasses_cache(mock_browser_get_token):
    credential = CachedInteractiveBrowserCredential()
    credential.get_token(FAKE_SCOPE, tenant_id="other-tenant")
    credential.get_token(FAKE_SCOPE, tenant_id="other-tenant")
    assert mock_browser_get_token.call_count == 2


def test_token_info_is_cached(mock_browser_get_token_info):
    credential = CachedInteractiveBrowserCredential()
    first = credential.get_token_info(FAKE_SCOPE)
    second = credential.get_token_info(FAKE_SCOPE, options={"enable_cae": False})
    assert first is second
    mock_browser_get_token_info.assert_called_once_with(FAKE_SCOPE, options=None)


def test_token_info_cae_and_claims(mock_browser_get_token_info):
    credential = CachedInteractiveBrowserCredential()
    credential.get_token_info(FAKE_SCOPE)
    credential.get_token_info(FAKE_SCOPE, options={"enable_cae": True})
    credential.get_token_info(FAKE_SCOPE, options={"enable_cae": True})
    assert mock_browser_get_token_info.call_count == 2
    credential.get_token_info(FAKE_SCOPE, options={"claims": "{}"})
    credential.get_token_info(FAKE_SCOPE, options={"tenant_id": "other-tenant"})
    assert mock_browser_get_token_info.call_count == 4


def test_get_token_and_get_token_info_share_cache(
    mock_browser_get_token, mock_browser_get_token_info
):
    credential = CachedInteractiveBrowserCredential()
    info = credential.get_token_info(FAKE_SCOPE)
    token = credential.get_token(FAKE_SCOPE)
    assert (token.token, token.expires_on) == (info.token, info.expires_on)
    mock_browser_get_token.assert_not_called()


def test_sdk_clients_use_token_cache(mock_browser_get_token_info):
    credential = CachedInteractiveBrowserCredential()
    # each SDK client builds its own policy around the shared credential
    for _ in range(2):
        policy = BearerTokenCredentialPolicy(credential, FAKE_SCOPE)
        request = make_request()
        policy.on_request(request)
        assert request.http_request.headers["Authorization"] == "Bearer fake-token"
    assert mock_browser_get_token_info.call_count == 1


def test_persistent_cache_option(mocker):
    init = mocker.patch.object(
        InteractiveBrowserCredential, "__init__", return_value=None
    )
    options = mocker.patch("cfa.credentials.browser.TokenCachePersistenceOptions")
    CachedInteractiveBrowserCredential(persist_token_cache=True, client_id="abc")
    options.assert_called_once_with(name="cfa-credentials")
    init.assert_called_once_with(
        client_id="abc", cache_persistence_options=options.return_value
    )


def test_no_persistent_cache_by_default(mocker):
    init = mocker.patch.object(
        InteractiveBrowserCredential, "__init__", return_value=None
    )
    CachedInteractiveBrowserCredential()
    init.assert_called_once_with()
