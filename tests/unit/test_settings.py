import pytest

from theme_switcher.settings import SettingsError, load_settings


def test_load_settings_uses_defaults(monkeypatch) -> None:
    for name in ("SITE_HOME_URL", "TTS_CAPABILITY", "TTS_COOKIE_LIFETIME_DAYS", "LOG_REQUESTS"):
        monkeypatch.delenv(name, raising=False)

    loaded = load_settings()

    assert loaded.site_home_url == "http://localhost:8000"
    assert loaded.capability == "switch_themes"
    assert loaded.cookie_lifetime_days == 365
    assert loaded.log_requests is True


def test_load_settings_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("SITE_HOME_URL", "https://example.com/blog/")
    monkeypatch.setenv("TTS_CAPABILITY", "edit_theme_options")
    monkeypatch.setenv("LOG_REQUESTS", "off")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    loaded = load_settings()

    assert loaded.site_home_url == "https://example.com/blog"
    assert loaded.capability == "edit_theme_options"
    assert loaded.log_requests is False
    assert loaded.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("SITE_HOME_URL", "example.com"),
        ("TTS_COOKIE_LIFETIME_DAYS", "soon"),
        ("TTS_COOKIE_LIFETIME_DAYS", "0"),
        ("SESSION_COOKIE_SECURE", "maybe"),
    ],
)
def test_load_settings_rejects_invalid_values(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(SettingsError):
        load_settings()
