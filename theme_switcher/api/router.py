from __future__ import annotations

from fastapi import APIRouter

from theme_switcher.api.routers import toolbar

router = APIRouter(prefix="/api/v1")
router.include_router(toolbar.router)
