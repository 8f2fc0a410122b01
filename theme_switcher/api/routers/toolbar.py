from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from theme_switcher.api.errors import ApiException
from theme_switcher.api.responses import success_payload
from theme_switcher.presentation.toolbar import serialize_menu_entries
from theme_switcher.switcher import ThemeSwitcher
from theme_switcher.theme import ThemeDescriptor
from theme_switcher.web.deps import get_theme_override, get_theme_switcher

router = APIRouter(prefix="/toolbar", tags=["api-toolbar"])


@router.get("")
async def get_toolbar(
    request: Request,
    switcher: ThemeSwitcher = Depends(get_theme_switcher),
    override: ThemeDescriptor | None = Depends(get_theme_override),
):
    if not switcher.can_switch_themes(request):
        raise ApiException(
            status_code=403,
            code="forbidden",
            message="Switching themes is not allowed.",
        )
    effective = switcher.effective_theme(override)
    return success_payload(
        request,
        data={
            "active_theme": effective.slug if effective is not None else None,
            "override_active": override is not None,
            "entries": serialize_menu_entries(switcher.list_menu_entries(override)),
        },
    )
