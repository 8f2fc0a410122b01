from __future__ import annotations

from dataclasses import dataclass
import os
from urllib.parse import urlsplit


class SettingsError(ValueError):
    """Raised when the environment holds an unusable configuration value."""


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise SettingsError(f"{name} must be a boolean, got {value!r}.")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise SettingsError(f"{name} must be an integer, got {value!r}.") from exc


@dataclass(frozen=True)
class Settings:
    app_name: str
    site_home_url: str
    site_cookie_path: str
    cookie_prefix: str
    cookie_lifetime_days: int
    capability: str
    reset_param: str
    current_theme: str
    themes_file: str
    themes_root: str
    admin_themes_path: str
    admin_ajax_path: str
    session_secret_key: str
    session_cookie_secure: bool
    log_level: str
    log_format: str
    log_redact_fields: str
    log_requests: bool
    log_request_skip_paths: str
    log_uvicorn_access: bool


def validate_home_url(value: str) -> str:
    parts = urlsplit(value)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise SettingsError(f"SITE_HOME_URL must be an absolute http(s) URL, got {value!r}.")
    return value.rstrip("/")


def load_settings() -> Settings:
    cookie_lifetime_days = _env_int("TTS_COOKIE_LIFETIME_DAYS", 365)
    if cookie_lifetime_days < 1:
        raise SettingsError("TTS_COOKIE_LIFETIME_DAYS must be at least 1.")
    return Settings(
        app_name=_env_str("APP_NAME", "toolbar-theme-switcher"),
        site_home_url=validate_home_url(_env_str("SITE_HOME_URL", "http://localhost:8000")),
        site_cookie_path=_env_str("SITE_COOKIE_PATH", "/") or "/",
        cookie_prefix=_env_str("TTS_COOKIE_PREFIX", "wordpress_tts_theme_"),
        cookie_lifetime_days=cookie_lifetime_days,
        capability=_env_str("TTS_CAPABILITY", "switch_themes"),
        reset_param=_env_str("TTS_RESET_PARAM", "tts_reset"),
        current_theme=_env_str("CURRENT_THEME", "terracotta"),
        themes_file=_env_str("THEMES_FILE", ""),
        themes_root=_env_str("THEMES_ROOT", "/srv/site/themes"),
        admin_themes_path=_env_str("ADMIN_THEMES_PATH", "/admin/themes"),
        admin_ajax_path=_env_str("ADMIN_AJAX_PATH", "/admin/ajax"),
        session_secret_key=_env_str("SESSION_SECRET_KEY", "dev-only-change-me"),
        session_cookie_secure=_env_bool("SESSION_COOKIE_SECURE", False),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
        log_format=_env_str("LOG_FORMAT", "console").lower(),
        log_redact_fields=_env_str("LOG_REDACT_FIELDS", ""),
        log_requests=_env_bool("LOG_REQUESTS", True),
        log_request_skip_paths=_env_str("LOG_REQUEST_SKIP_PATHS", "/healthz"),
        log_uvicorn_access=_env_bool("LOG_UVICORN_ACCESS", False),
    )


settings = load_settings()
