from __future__ import annotations

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from theme_switcher.api.errors import register_api_exception_handlers
from theme_switcher.api.router import router as api_router
from theme_switcher.logging_config import configure_logging, parse_redact_fields
from theme_switcher.settings import settings
from theme_switcher.switcher import ThemeSwitcher, build_theme_switcher
from theme_switcher.theme import build_theme_registry
from theme_switcher.web.middleware import (
    RequestLoggingMiddleware,
    ThemeOverrideMiddleware,
    parse_skip_paths,
)
from theme_switcher.web.routers import health
from theme_switcher.web.routers.ajax import build_ajax_router
from theme_switcher.web.routers.pages import build_pages_router

configure_logging(
    level=settings.log_level,
    log_format=settings.log_format,
    redact_fields=parse_redact_fields(settings.log_redact_fields),
    include_uvicorn_access=settings.log_uvicorn_access,
)


def create_app(theme_switcher: ThemeSwitcher | None = None) -> FastAPI:
    if theme_switcher is None:
        theme_switcher = build_theme_switcher(
            settings,
            registry=build_theme_registry(
                themes_file=settings.themes_file,
                themes_root=settings.themes_root,
            ),
        )

    app = FastAPI(title=settings.app_name)
    app.state.theme_switcher = theme_switcher
    register_api_exception_handlers(app)

    # Last added runs first: logging, then session, then the theme override.
    app.add_middleware(ThemeOverrideMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        same_site="lax",
        https_only=settings.session_cookie_secure,
    )
    app.add_middleware(
        RequestLoggingMiddleware,
        log_requests=settings.log_requests,
        skip_paths=parse_skip_paths(settings.log_request_skip_paths),
    )

    app.include_router(health.router)
    app.include_router(api_router)
    app.include_router(build_ajax_router(admin_ajax_path=theme_switcher.site.admin_ajax_path))
    app.include_router(build_pages_router(admin_themes_path=theme_switcher.site.admin_themes_path))
    return app


app = create_app()
