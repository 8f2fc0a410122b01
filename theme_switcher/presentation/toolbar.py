from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Sequence

ROOT_MENU_ID = "toolbar_theme_switcher"


@dataclass(frozen=True)
class MenuEntry:
    id: str
    title: str
    href: str | None = None
    parent: str | None = None

    @property
    def is_current(self) -> bool:
        return self.parent is not None and self.href is None


@dataclass(frozen=True)
class ToolbarViewModel:
    root: MenuEntry
    children: list[MenuEntry]


def build_toolbar_view_model(entries: Sequence[MenuEntry]) -> ToolbarViewModel | None:
    if not entries:
        return None
    root, *children = entries
    return ToolbarViewModel(
        root=root,
        children=[entry for entry in children if entry.parent == root.id],
    )


def serialize_menu_entries(entries: Sequence[MenuEntry]) -> list[dict[str, object]]:
    return [asdict(entry) for entry in entries]
