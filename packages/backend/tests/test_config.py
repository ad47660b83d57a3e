"""Settings tests — env loading and credential defaults."""

from relayboard.config import DEFAULT_CREDENTIAL, Settings


def test_missing_credentials_fall_back_to_default(monkeypatch):
    monkeypatch.delenv("RELAYBOARD_DASHBOARD_USERNAME", raising=False)
    monkeypatch.delenv("RELAYBOARD_DASHBOARD_PASSWORD", raising=False)
    s = Settings()
    assert s.dashboard_username == DEFAULT_CREDENTIAL
    assert s.dashboard_password == DEFAULT_CREDENTIAL


def test_credentials_from_env(monkeypatch):
    monkeypatch.setenv("RELAYBOARD_DASHBOARD_USERNAME", "ops")
    monkeypatch.setenv("RELAYBOARD_DASHBOARD_PASSWORD", "hunter2")
    monkeypatch.setenv("RELAYBOARD_API_KEY", "k-1")
    s = Settings()
    assert s.dashboard_username == "ops"
    assert s.dashboard_password == "hunter2"
    assert s.api_key == "k-1"


def test_empty_api_key_means_disabled(monkeypatch):
    monkeypatch.setenv("RELAYBOARD_API_KEY", "")
    assert Settings().api_key is None


def test_session_duration():
    s = Settings(dashboard_username="a", dashboard_password="b")
    assert s.session_duration_seconds == 24 * 60 * 60
    assert s.login_failure_delay_seconds == 1.0
