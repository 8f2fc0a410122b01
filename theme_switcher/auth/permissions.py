from __future__ import annotations

from collections.abc import Callable

from starlette.requests import HTTPConnection

from theme_switcher.auth.session import get_session_user
from theme_switcher.hooks import SwitcherHooks

CapabilityCheck = Callable[[HTTPConnection, str], bool]


def session_user_can(connection: HTTPConnection, capability: str) -> bool:
    user = get_session_user(connection)
    return user is not None and user.can(capability)


class PermissionPolicy:
    def __init__(
        self,
        *,
        capability: str = "switch_themes",
        hooks: SwitcherHooks | None = None,
        current_user_can: CapabilityCheck = session_user_can,
    ) -> None:
        self._capability = capability
        self._hooks = hooks or SwitcherHooks()
        self._current_user_can = current_user_can

    @property
    def capability(self) -> str:
        if self._hooks.capability is not None:
            return self._hooks.capability(self._capability)
        return self._capability

    def can_switch_themes(self, connection: HTTPConnection) -> bool:
        allowed = bool(self._current_user_can(connection, self.capability))
        if self._hooks.can_switch_themes is not None:
            allowed = bool(self._hooks.can_switch_themes(allowed, connection))
        return allowed
