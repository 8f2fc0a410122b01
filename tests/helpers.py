from __future__ import annotations

from datetime import datetime, timezone
import re

from fastapi.testclient import TestClient
from starlette.requests import Request

from theme_switcher.auth.permissions import PermissionPolicy
from theme_switcher.hooks import SwitcherHooks
from theme_switcher.main import create_app
from theme_switcher.switcher import SiteContext, ThemeSwitcher
from theme_switcher.theme import ThemeDescriptor, ThemeRegistry

HOME_URL = "http://testserver"
FIXED_NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)

THEME_A = ThemeDescriptor(name="Theme A", slug="a", template_slug="a", root_path="/a")
THEME_B = ThemeDescriptor(
    name="Theme B",
    slug="b",
    template_slug="a",
    root_path="/b",
    parent_template_slug="a",
)
THEME_D = ThemeDescriptor(name="Theme D", slug="d", template_slug="d", root_path="/d")
THEME_HIDDEN = ThemeDescriptor(
    name="Hidden",
    slug="hidden",
    template_slug="hidden",
    root_path="/hidden",
    allowed=False,
)
ALL_THEMES = (THEME_A, THEME_B, THEME_D, THEME_HIDDEN)


def make_switcher(
    *,
    themes: tuple[ThemeDescriptor, ...] = ALL_THEMES,
    current_theme: str = "a",
    can_switch: bool = True,
    hooks: SwitcherHooks | None = None,
    home_url: str = HOME_URL,
) -> ThemeSwitcher:
    return ThemeSwitcher(
        site=SiteContext(home_url=home_url, current_theme=current_theme),
        registry=ThemeRegistry(themes),
        permissions=PermissionPolicy(
            hooks=hooks,
            current_user_can=lambda _connection, _capability: can_switch,
        ),
        hooks=hooks,
        now=lambda: FIXED_NOW,
    )


def make_client(switcher: ThemeSwitcher | None = None, **kwargs) -> TestClient:
    return TestClient(create_app(switcher or make_switcher(**kwargs)))


def make_request(
    path: str = "/",
    *,
    query_string: str = "",
    headers: dict[str, str] | None = None,
) -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("testserver", 80),
            "root_path": "",
            "path": path,
            "query_string": query_string.encode("latin-1"),
            "headers": [
                (key.lower().encode("latin-1"), value.encode("latin-1"))
                for key, value in (headers or {}).items()
            ],
        }
    )


def cookie_value(set_cookie_header: str, name: str) -> str | None:
    match = re.search(rf"{re.escape(name)}=([^;]*)", set_cookie_header)
    if match is None:
        return None
    return match.group(1).strip('"')
