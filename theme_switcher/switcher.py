from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import cached_property
import hashlib
import logging
from urllib.parse import urlencode, urlsplit, urlunsplit

from fastapi import status
from fastapi.responses import RedirectResponse
from starlette.requests import HTTPConnection

from theme_switcher.auth.permissions import PermissionPolicy
from theme_switcher.hooks import SwitcherHooks
from theme_switcher.presentation.toolbar import ROOT_MENU_ID, MenuEntry
from theme_switcher.settings import Settings, SettingsError
from theme_switcher.theme import (
    FieldOverrideSet,
    SiteThemeOptions,
    ThemeDescriptor,
    ThemeRegistry,
    site_theme_options,
)

logger = logging.getLogger(__name__)

DEFAULT_COOKIE_PREFIX = "wordpress_tts_theme_"
SET_THEME_ACTION = "tts_set_theme"
COOKIE_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
NO_CACHE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache, must-revalidate, max-age=0, no-store, private",
    "Expires": "Wed, 11 Jan 1984 05:00:00 GMT",
}


def cookie_name_for(home_url: str, prefix: str = DEFAULT_COOKIE_PREFIX) -> str:
    """Cookie name for a site, derived from its home URL in the http scheme.

    Sites that share a browser but not a home URL never read each other's
    choice; https and http variants of the same site share one cookie.
    """
    parts = urlsplit(home_url.rstrip("/"))
    http_url = urlunsplit(("http", parts.netloc, parts.path, parts.query, parts.fragment))
    digest = hashlib.md5(http_url.encode("utf-8"), usedforsecurity=False).hexdigest()
    return f"{prefix}{digest}"


@dataclass(frozen=True)
class SiteContext:
    home_url: str
    current_theme: str
    cookie_path: str = "/"
    cookie_prefix: str = DEFAULT_COOKIE_PREFIX
    cookie_lifetime: timedelta = timedelta(days=365)
    reset_param: str = "tts_reset"
    admin_themes_path: str = "/admin/themes"
    admin_ajax_path: str = "/admin/ajax"

    # Memoized per site, so nothing is shared between sites in one process.
    @cached_property
    def cookie_name(self) -> str:
        return cookie_name_for(self.home_url, self.cookie_prefix)

    @property
    def home_host(self) -> str:
        return urlsplit(self.home_url).netloc.lower()


class ThemeSwitcher:
    """Per-site theme override: cookie handling, allow-list checks and overrides."""

    def __init__(
        self,
        *,
        site: SiteContext,
        registry: ThemeRegistry,
        permissions: PermissionPolicy,
        hooks: SwitcherHooks | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.site = site
        self.registry = registry
        self.permissions = permissions
        self._hooks = hooks or SwitcherHooks()
        self._now = now or (lambda: datetime.now(timezone.utc))
        if self.registry.get(site.current_theme) is None:
            raise SettingsError(f"Configured theme {site.current_theme!r} is not installed.")

    @cached_property
    def allowed_themes(self) -> dict[str, ThemeDescriptor]:
        themes = {theme.slug: theme for theme in self.registry.list_allowed()}
        if self._hooks.allowed_themes is not None:
            themes = dict(self._hooks.allowed_themes(themes))
        logger.debug(
            "theme_switcher.allow_list_built",
            extra={
                "event": "theme_switcher.allow_list_built",
                "site": self.site.home_url,
                "theme_slugs": list(themes),
            },
        )
        return themes

    @property
    def default_theme(self) -> ThemeDescriptor | None:
        return self.registry.get(self.site.current_theme)

    @property
    def current_theme_name(self) -> str | None:
        theme = self.default_theme
        return theme.name if theme is not None else None

    def is_allowed(self, theme: ThemeDescriptor) -> bool:
        """Allow-list membership by display name, for older callers."""
        return any(candidate.name == theme.name for candidate in self.allowed_themes.values())

    def can_switch_themes(self, connection: HTTPConnection) -> bool:
        return self.permissions.can_switch_themes(connection)

    def should_bypass(self, connection: HTTPConnection) -> bool:
        path = connection.url.path.rstrip("/") or "/"
        if path == self.site.admin_themes_path.rstrip("/"):
            return True
        return not self.can_switch_themes(connection)

    def handle_reset_request(self, connection: HTTPConnection) -> RedirectResponse | None:
        if self.site.reset_param not in connection.query_params:
            return None
        response = RedirectResponse(self.site.home_url, status_code=status.HTTP_303_SEE_OTHER)
        response.set_cookie(
            self.site.cookie_name,
            "",
            max_age=0,
            expires=COOKIE_EPOCH,
            path=self.site.cookie_path,
        )
        response.headers.update(NO_CACHE_HEADERS)
        logger.info(
            "theme_switcher.reset",
            extra={
                "event": "theme_switcher.reset",
                "site": self.site.home_url,
            },
        )
        return response

    def load_active_override(self, cookies: Mapping[str, str]) -> ThemeDescriptor | None:
        slug = cookies.get(self.site.cookie_name)
        if not slug:
            return None

        theme = self.registry.get(slug)
        if theme is None:
            logger.debug(
                "theme_switcher.cookie_ignored",
                extra={
                    "event": "theme_switcher.cookie_ignored",
                    "reason": "unknown_theme",
                    "theme": slug,
                },
            )
            return None
        # Compared by display name, the way existing cookies were matched.
        if theme.name == self.current_theme_name:
            return None
        if not self.registry.is_allowed(theme.slug) or theme.slug not in self.allowed_themes:
            logger.debug(
                "theme_switcher.cookie_ignored",
                extra={
                    "event": "theme_switcher.cookie_ignored",
                    "reason": "not_allowed",
                    "theme": slug,
                },
            )
            return None
        return theme

    def compute_field_overrides(self, override: ThemeDescriptor | None) -> FieldOverrideSet | None:
        if override is None:
            return None
        parent = self.registry.parent_of(override)
        return FieldOverrideSet(
            template=override.template_slug,
            stylesheet=override.slug,
            stylesheet_root=override.root_path,
            template_root=(parent or override).root_path,
        )

    def theme_options(self, field_overrides: FieldOverrideSet | None) -> SiteThemeOptions:
        options = site_theme_options(self.registry, self.site.current_theme)
        if field_overrides is None:
            return options
        return field_overrides.apply(options)

    def get_theme_field(
        self,
        override: ThemeDescriptor | None,
        field_name: str,
        default: str | None = None,
    ) -> str | None:
        if override is None:
            return default
        return override.get(field_name)

    def effective_theme(self, override: ThemeDescriptor | None) -> ThemeDescriptor | None:
        return override if override is not None else self.default_theme

    def set_theme_url(self, theme: ThemeDescriptor) -> str:
        query = urlencode({"action": SET_THEME_ACTION, "theme": theme.slug})
        return f"{self.site.admin_ajax_path}?{query}"

    def list_menu_entries(self, override: ThemeDescriptor | None) -> list[MenuEntry]:
        current = self.effective_theme(override)
        current_name = current.name if current is not None else self.site.current_theme
        title = f"Theme: {current_name}"
        if self._hooks.root_title is not None and current is not None:
            title = self._hooks.root_title(title, current)

        entries = [
            MenuEntry(
                id=ROOT_MENU_ID,
                title=title,
                href=self.site.admin_themes_path,
            )
        ]
        current_slug = current.slug if current is not None else None
        for theme in self.allowed_themes.values():
            entries.append(
                MenuEntry(
                    id=theme.slug,
                    title=theme.name,
                    href=None if theme.slug == current_slug else self.set_theme_url(theme),
                    parent=ROOT_MENU_ID,
                )
            )
        return entries

    def safe_redirect_target(self, referer: str | None) -> str:
        if not referer:
            return self.site.home_url
        parts = urlsplit(referer)
        if not parts.scheme and not parts.netloc:
            if referer.startswith("/") and not referer.startswith("//"):
                return referer
            return self.site.home_url
        if parts.scheme in {"http", "https"} and parts.netloc.lower() == self.site.home_host:
            return referer
        return self.site.home_url

    def set_theme_from_request(
        self,
        requested_slug: str | None,
        referer: str | None,
    ) -> RedirectResponse:
        response = RedirectResponse(
            self.safe_redirect_target(referer),
            status_code=status.HTTP_303_SEE_OTHER,
        )
        if self.registry.exists(requested_slug) and self.registry.is_allowed(requested_slug):
            response.set_cookie(
                self.site.cookie_name,
                requested_slug,
                expires=self._now() + self.site.cookie_lifetime,
                path=self.site.cookie_path,
            )
            logger.info(
                "theme_switcher.theme_set",
                extra={
                    "event": "theme_switcher.theme_set",
                    "site": self.site.home_url,
                    "theme": requested_slug,
                },
            )
        else:
            logger.info(
                "theme_switcher.theme_rejected",
                extra={
                    "event": "theme_switcher.theme_rejected",
                    "site": self.site.home_url,
                    "theme": requested_slug,
                },
            )
        return response


def build_theme_switcher(
    settings: Settings,
    *,
    registry: ThemeRegistry,
    hooks: SwitcherHooks | None = None,
) -> ThemeSwitcher:
    site = SiteContext(
        home_url=settings.site_home_url,
        current_theme=settings.current_theme,
        cookie_path=settings.site_cookie_path,
        cookie_prefix=settings.cookie_prefix,
        cookie_lifetime=timedelta(days=settings.cookie_lifetime_days),
        reset_param=settings.reset_param,
        admin_themes_path=settings.admin_themes_path,
        admin_ajax_path=settings.admin_ajax_path,
    )
    return ThemeSwitcher(
        site=site,
        registry=registry,
        permissions=PermissionPolicy(capability=settings.capability, hooks=hooks),
        hooks=hooks,
    )
