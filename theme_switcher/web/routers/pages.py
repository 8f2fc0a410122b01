from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from theme_switcher.switcher import ThemeSwitcher
from theme_switcher.theme import ThemeDescriptor
from theme_switcher.web import common
from theme_switcher.web.deps import get_theme_override, get_theme_switcher


async def home_page(
    request: Request,
    switcher: ThemeSwitcher = Depends(get_theme_switcher),
    override: ThemeDescriptor | None = Depends(get_theme_override),
) -> HTMLResponse:
    context = common.build_template_context(
        request,
        page_title="Home",
        active_nav="home",
        switcher=switcher,
        override=override,
    )
    return common.templates.TemplateResponse(
        request=request,
        name="index.html",
        context=context,
    )


async def themes_page(
    request: Request,
    switcher: ThemeSwitcher = Depends(get_theme_switcher),
) -> HTMLResponse:
    context = common.build_template_context(
        request,
        page_title="Themes",
        active_nav="themes",
        switcher=switcher,
        override=None,
    )
    context["installed_themes"] = switcher.registry.list_allowed()
    return common.templates.TemplateResponse(
        request=request,
        name="themes.html",
        context=context,
    )


def build_pages_router(*, admin_themes_path: str) -> APIRouter:
    router = APIRouter()
    router.add_api_route("/", home_page, methods=["GET"], response_class=HTMLResponse)
    router.add_api_route(
        admin_themes_path,
        themes_page,
        methods=["GET"],
        response_class=HTMLResponse,
    )
    return router
