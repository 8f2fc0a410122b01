from theme_switcher.auth.permissions import PermissionPolicy
from theme_switcher.auth.session import SESSION_USER_KEY, get_session_user
from theme_switcher.hooks import SwitcherHooks

from tests.helpers import make_request


def _request_with_session(session: dict | None):
    request = make_request("/")
    if session is not None:
        request.scope["session"] = session
    return request


def test_session_user_with_capability_can_switch_themes() -> None:
    policy = PermissionPolicy()
    request = _request_with_session(
        {SESSION_USER_KEY: {"id": 1, "email": "admin@example.com", "capabilities": ["switch_themes"]}}
    )

    assert policy.can_switch_themes(request)


def test_anonymous_or_unprivileged_visitor_cannot_switch_themes() -> None:
    policy = PermissionPolicy()

    assert not policy.can_switch_themes(_request_with_session(None))
    assert not policy.can_switch_themes(_request_with_session({}))
    assert not policy.can_switch_themes(
        _request_with_session(
            {SESSION_USER_KEY: {"id": 2, "email": "reader@example.com", "capabilities": ["read"]}}
        )
    )


def test_malformed_session_user_is_ignored() -> None:
    request = _request_with_session({SESSION_USER_KEY: {"email": "no-id@example.com"}})

    assert get_session_user(request) is None


def test_capability_name_is_configurable_and_filterable() -> None:
    request = _request_with_session(
        {SESSION_USER_KEY: {"id": 1, "email": "editor@example.com", "capabilities": ["preview_themes"]}}
    )

    assert PermissionPolicy(capability="preview_themes").can_switch_themes(request)
    hooks = SwitcherHooks(capability=lambda _capability: "preview_themes")
    policy = PermissionPolicy(hooks=hooks)
    assert policy.capability == "preview_themes"
    assert policy.can_switch_themes(request)


def test_can_switch_hook_has_final_say() -> None:
    seen = []

    def deny_all(allowed: bool, connection) -> bool:
        seen.append(allowed)
        return False

    policy = PermissionPolicy(
        hooks=SwitcherHooks(can_switch_themes=deny_all),
        current_user_can=lambda _connection, _capability: True,
    )

    assert not policy.can_switch_themes(make_request("/"))
    assert seen == [True]
