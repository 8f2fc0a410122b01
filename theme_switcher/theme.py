from __future__ import annotations

from dataclasses import dataclass, replace
import json
import logging
from pathlib import Path
from typing import Final, Iterable

logger = logging.getLogger(__name__)


class ThemeManifestError(ValueError):
    """Raised when a theme manifest cannot be turned into descriptors."""


@dataclass(frozen=True)
class ThemeDescriptor:
    name: str
    slug: str
    template_slug: str
    root_path: str
    parent_template_slug: str | None = None
    allowed: bool = True

    @property
    def is_child(self) -> bool:
        return bool(self.parent_template_slug)

    def get(self, field_name: str) -> str | None:
        """Header-style field access (`Name`, `Template`, `Stylesheet`)."""
        return {
            "Name": self.name,
            "Template": self.template_slug,
            "Stylesheet": self.slug,
            "ThemeRoot": self.root_path,
        }.get(field_name)


def _sample_themes(themes_root: str) -> tuple[ThemeDescriptor, ...]:
    root = themes_root.rstrip("/")
    return (
        ThemeDescriptor(name="Terracotta", slug="terracotta", template_slug="terracotta", root_path=root),
        ThemeDescriptor(name="Fjord", slug="fjord", template_slug="fjord", root_path=root),
        ThemeDescriptor(
            name="Fjord Night",
            slug="fjord-night",
            template_slug="fjord",
            root_path=f"{root}/children",
            parent_template_slug="fjord",
        ),
        ThemeDescriptor(name="Spruce", slug="spruce", template_slug="spruce", root_path=root),
    )


DEFAULT_THEMES_ROOT: Final[str] = "/srv/site/themes"
THEMES: Final[tuple[ThemeDescriptor, ...]] = _sample_themes(DEFAULT_THEMES_ROOT)


def _descriptor_from_entry(entry: object, *, index: int, themes_root: str) -> ThemeDescriptor:
    if not isinstance(entry, dict):
        raise ThemeManifestError(f"Theme entry {index} must be an object.")
    slug = str(entry.get("slug") or "").strip()
    name = str(entry.get("name") or "").strip()
    if not slug or not name:
        raise ThemeManifestError(f"Theme entry {index} needs both 'name' and 'slug'.")
    parent = entry.get("parent")
    return ThemeDescriptor(
        name=name,
        slug=slug,
        template_slug=str(entry.get("template") or parent or slug),
        root_path=str(entry.get("root") or themes_root),
        parent_template_slug=str(parent) if parent else None,
        allowed=bool(entry.get("allowed", True)),
    )


def load_theme_manifest(path: str | Path, *, themes_root: str) -> tuple[ThemeDescriptor, ...]:
    manifest_path = Path(path)
    try:
        raw = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ThemeManifestError(f"Could not read theme manifest {manifest_path}: {exc}") from exc

    entries = raw.get("themes") if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise ThemeManifestError("Theme manifest must be a list or an object with a 'themes' list.")

    themes = tuple(
        _descriptor_from_entry(entry, index=index, themes_root=themes_root)
        for index, entry in enumerate(entries)
    )
    slugs = [theme.slug for theme in themes]
    if len(set(slugs)) != len(slugs):
        raise ThemeManifestError("Theme manifest contains duplicate slugs.")
    logger.info(
        "themes.manifest_loaded",
        extra={
            "event": "themes.manifest_loaded",
            "path": str(manifest_path),
            "theme_count": len(themes),
        },
    )
    return themes


class ThemeRegistry:
    """In-memory view of the themes installed on the site."""

    def __init__(self, themes: Iterable[ThemeDescriptor]) -> None:
        self._themes: dict[str, ThemeDescriptor] = {}
        for theme in themes:
            self._themes[theme.slug] = theme

    def exists(self, slug: str | None) -> bool:
        return bool(slug) and slug in self._themes

    def is_allowed(self, slug: str | None) -> bool:
        theme = self.get(slug)
        return theme is not None and theme.allowed

    def get(self, slug: str | None) -> ThemeDescriptor | None:
        if not slug:
            return None
        return self._themes.get(slug)

    def list_allowed(self) -> list[ThemeDescriptor]:
        return [theme for theme in self._themes.values() if theme.allowed]

    def parent_of(self, theme: ThemeDescriptor) -> ThemeDescriptor | None:
        if not theme.parent_template_slug:
            return None
        return self.get(theme.parent_template_slug)


def build_theme_registry(*, themes_file: str, themes_root: str) -> ThemeRegistry:
    if themes_file:
        return ThemeRegistry(load_theme_manifest(themes_file, themes_root=themes_root))
    return ThemeRegistry(_sample_themes(themes_root))


@dataclass(frozen=True)
class SiteThemeOptions:
    """Theme options as configured on the site, before any override."""

    template: str
    stylesheet: str
    stylesheet_root: str
    template_root: str
    current_theme: str | None


def site_theme_options(registry: ThemeRegistry, current_slug: str) -> SiteThemeOptions:
    theme = registry.get(current_slug)
    if theme is None:
        raise ThemeManifestError(f"Configured theme {current_slug!r} is not installed.")
    parent = registry.parent_of(theme)
    return SiteThemeOptions(
        template=theme.template_slug,
        stylesheet=theme.slug,
        stylesheet_root=theme.root_path,
        template_root=(parent or theme).root_path,
        current_theme=theme.name,
    )


@dataclass(frozen=True)
class FieldOverrideSet:
    template: str
    stylesheet: str
    stylesheet_root: str
    template_root: str
    current_theme_is_default: bool = False

    def apply(self, options: SiteThemeOptions) -> SiteThemeOptions:
        return replace(
            options,
            template=self.template,
            stylesheet=self.stylesheet,
            stylesheet_root=self.stylesheet_root,
            template_root=self.template_root,
            current_theme=options.current_theme if self.current_theme_is_default else None,
        )
