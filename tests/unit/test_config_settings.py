import pytest

from okta_api_client.config import settings
from okta_api_client.config.settings import Connection, OktaSettings, load_settings
from okta_api_client.core.exceptions import ConfigurationError
from tests.conftest import BASE_URL, TOKEN


@pytest.fixture(autouse=True)
def empty_secrets_dir(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "SECRETS_DIR", tmp_path)
    return tmp_path


def test_defaults_without_environment():
    cfg = load_settings({})
    assert cfg.default_connection == "prod"
    assert cfg.connections == {}
    assert cfg.exceptions is False
    assert cfg.rate_limit_threshold == 20
    assert cfg.rate_limit_sleep == 10
    assert cfg.max_pages is None
    assert cfg.log_channels == ["okta_api_client"]


def test_loads_connections_by_key():
    cfg = load_settings({
        "OKTA_DEFAULT_CONNECTION": "preview",
        "OKTA_PROD_BASE_URL": BASE_URL,
        "OKTA_PROD_API_TOKEN": TOKEN,
        "OKTA_PREVIEW_BASE_URL": "https://mycompany.oktapreview.com",
        "OKTA_PREVIEW_API_TOKEN": TOKEN,
        "OKTA_PREVIEW_LOG_CHANNELS": "okta_api_client,okta.preview",
    })
    assert set(cfg.connections) == {"prod", "preview"}
    assert cfg.connection().base_url == "https://mycompany.oktapreview.com"
    assert cfg.connection("preview").log_channels == ("okta_api_client", "okta.preview")
    assert cfg.connection("prod") == Connection(BASE_URL, TOKEN)


def test_custom_connection_keys():
    cfg = load_settings({
        "OKTA_CONNECTIONS": "sandbox",
        "OKTA_SANDBOX_BASE_URL": BASE_URL,
        "OKTA_SANDBOX_API_TOKEN": TOKEN,
        "OKTA_PROD_BASE_URL": BASE_URL,
    })
    assert list(cfg.connections) == ["sandbox"]


def test_token_from_run_secrets_wins(empty_secrets_dir):
    (empty_secrets_dir / "okta_prod_api_token").write_text(TOKEN + "\n")
    cfg = load_settings({"OKTA_PROD_BASE_URL": BASE_URL, "OKTA_PROD_API_TOKEN": "from-env"})
    assert cfg.connection("prod").token == TOKEN


def test_partial_connection_is_kept_for_validation():
    cfg = load_settings({"OKTA_PROD_BASE_URL": BASE_URL})
    assert cfg.connection("prod").token == ""


def test_numeric_and_boolean_options():
    cfg = load_settings({
        "OKTA_API_EXCEPTIONS": "true",
        "OKTA_RATE_LIMIT_THRESHOLD": "10",
        "OKTA_RATE_LIMIT_SLEEP": "2.5",
        "OKTA_MAX_PAGES": "50",
        "OKTA_REQUEST_TIMEOUT": "15",
    })
    assert cfg.exceptions is True
    assert cfg.rate_limit_threshold == 10
    assert cfg.rate_limit_sleep == 2.5
    assert cfg.max_pages == 50
    assert cfg.request_timeout == 15


@pytest.mark.parametrize(
    "environ, message",
    [
        ({"OKTA_RATE_LIMIT_THRESHOLD": "twenty"}, "OKTA_RATE_LIMIT_THRESHOLD must be a number"),
        ({"OKTA_MAX_PAGES": "0"}, "OKTA_MAX_PAGES must be at least 1"),
    ],
)
def test_malformed_values(environ, message):
    with pytest.raises(ConfigurationError, match=message):
        load_settings(environ)


def test_unknown_connection_key():
    with pytest.raises(ConfigurationError, match="Okta connection 'dev' is not configured"):
        OktaSettings(connections={"prod": Connection(BASE_URL, TOKEN)}).connection("dev")
