"""Page registration system for data-driven navigation.

Provides a decorator for registering pages with metadata, enabling
automatic navigation generation in the shared layout.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from nicegui import ui

if TYPE_CHECKING:
    from collections.abc import Callable

Category = Literal["main", "hidden"]


@dataclass
class PageMeta:
    """Metadata for a registered page."""

    route: str
    title: str
    icon: str
    category: Category = "main"
    order: int = field(default=100)


# Global registry of all pages
_page_registry: dict[str, PageMeta] = {}


def page_route(
    route: str,
    *,
    title: str,
    icon: str,
    category: Category = "main",
    order: int = 100,
) -> Callable:
    """Decorator to register a page with navigation metadata.

    Usage:
        @page_route("/", title="Home", icon="home", order=10)
        async def index_page():
            ...

    Args:
        route: URL path for the page.
        title: Display title in navigation.
        icon: Material icon name.
        category: ``main`` pages appear in the drawer, ``hidden`` ones don't.
        order: Sort order within category (lower = higher).

    Returns:
        Decorated function registered with NiceGUI and the page registry.
    """

    def decorator(func: Callable) -> Callable:
        _page_registry[route] = PageMeta(
            route=route,
            title=title,
            icon=icon,
            category=category,
            order=order,
        )
        return ui.page(route)(func)

    return decorator


def get_visible_pages() -> list[PageMeta]:
    """Get pages shown in navigation, sorted by order."""
    visible = [m for m in _page_registry.values() if m.category != "hidden"]
    visible.sort(key=lambda p: p.order)
    return visible
