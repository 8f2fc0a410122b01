from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from starlette.requests import HTTPConnection

from theme_switcher.theme import ThemeDescriptor

CapabilityHook = Callable[[str], str]
CanSwitchHook = Callable[[bool, HTTPConnection], bool]
AllowedThemesHook = Callable[[dict[str, ThemeDescriptor]], Mapping[str, ThemeDescriptor]]
RootTitleHook = Callable[[str, ThemeDescriptor], str]


@dataclass(frozen=True)
class SwitcherHooks:
    """Site-supplied filters applied at the points the switcher exposes.

    - ``capability``: rewrites the capability name checked for switching.
    - ``can_switch_themes``: final say on the permission decision.
    - ``allowed_themes``: rewrites the allow-list once, before it is cached.
    - ``root_title``: rewrites the toolbar root label.
    """

    capability: CapabilityHook | None = None
    can_switch_themes: CanSwitchHook | None = None
    allowed_themes: AllowedThemesHook | None = None
    root_title: RootTitleHook | None = None
