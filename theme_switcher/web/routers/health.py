from __future__ import annotations

from fastapi import APIRouter, Depends

from theme_switcher.switcher import ThemeSwitcher
from theme_switcher.web.deps import get_theme_switcher

router = APIRouter()


@router.get("/healthz")
async def healthz(switcher: ThemeSwitcher = Depends(get_theme_switcher)) -> dict[str, str | int]:
    return {
        "status": "ok",
        "allowed_themes": len(switcher.allowed_themes),
    }
