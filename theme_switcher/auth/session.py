from __future__ import annotations

from dataclasses import dataclass

from starlette.requests import HTTPConnection

SESSION_USER_KEY = "user"


@dataclass(frozen=True)
class SessionUser:
    id: int
    email: str
    capabilities: frozenset[str]

    def can(self, capability: str) -> bool:
        return capability in self.capabilities


def _session(connection: HTTPConnection) -> dict | None:
    if "session" not in connection.scope:
        return None
    return connection.session


def get_session_user(connection: HTTPConnection) -> SessionUser | None:
    session = _session(connection)
    if session is None:
        return None
    raw = session.get(SESSION_USER_KEY)
    if not isinstance(raw, dict):
        return None
    try:
        return SessionUser(
            id=int(raw["id"]),
            email=str(raw["email"]),
            capabilities=frozenset(str(item) for item in raw.get("capabilities", ())),
        )
    except (KeyError, TypeError, ValueError):
        return None

