from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse, Response

from theme_switcher.switcher import SET_THEME_ACTION, ThemeSwitcher
from theme_switcher.web.deps import get_theme_switcher

logger = logging.getLogger(__name__)


def _unknown_action() -> Response:
    return PlainTextResponse("0", status_code=status.HTTP_400_BAD_REQUEST)


async def admin_ajax(
    request: Request,
    switcher: ThemeSwitcher = Depends(get_theme_switcher),
) -> Response:
    if request.method == "POST":
        form = await request.form()
        params = {**request.query_params, **{key: str(value) for key, value in form.items()}}
    else:
        params = dict(request.query_params)

    action = params.get("action")
    # Actions are only registered for visitors allowed to switch themes.
    if action != SET_THEME_ACTION or not switcher.can_switch_themes(request):
        logger.info(
            "ajax.unknown_action",
            extra={
                "event": "ajax.unknown_action",
                "action": action,
            },
        )
        return _unknown_action()

    return switcher.set_theme_from_request(
        params.get("theme"),
        request.headers.get("referer"),
    )


def build_ajax_router(*, admin_ajax_path: str) -> APIRouter:
    router = APIRouter()
    router.add_api_route(admin_ajax_path, admin_ajax, methods=["GET", "POST"])
    return router
