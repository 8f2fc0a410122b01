from __future__ import annotations

from fastapi import Request

from theme_switcher.switcher import ThemeSwitcher
from theme_switcher.theme import FieldOverrideSet, ThemeDescriptor


def get_theme_switcher(request: Request) -> ThemeSwitcher:
    return request.app.state.theme_switcher


def get_theme_override(request: Request) -> ThemeDescriptor | None:
    return getattr(request.state, "theme_override", None)


def get_theme_fields(request: Request) -> FieldOverrideSet | None:
    return getattr(request.state, "theme_fields", None)
