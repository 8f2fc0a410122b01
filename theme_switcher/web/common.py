from __future__ import annotations

from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from theme_switcher.presentation.toolbar import build_toolbar_view_model
from theme_switcher.switcher import ThemeSwitcher
from theme_switcher.theme import ThemeDescriptor
from theme_switcher.web.deps import get_theme_fields

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def build_template_context(
    request: Request,
    *,
    page_title: str,
    active_nav: str,
    switcher: ThemeSwitcher,
    override: ThemeDescriptor | None,
) -> dict[str, object]:
    toolbar = None
    if switcher.can_switch_themes(request):
        toolbar = build_toolbar_view_model(switcher.list_menu_entries(override))
    effective = switcher.effective_theme(override)
    return {
        "active_nav": active_nav,
        "page_title": page_title,
        "theme_name": effective.slug if effective is not None else switcher.site.current_theme,
        "theme_options": switcher.theme_options(get_theme_fields(request)),
        "theme_override": override,
        "toolbar": toolbar,
        "reset_param": switcher.site.reset_param,
    }
