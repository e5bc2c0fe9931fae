"""
Protocols for pluggable pipeline stages.
"""

from __future__ import annotations

from typing import Optional, Protocol, Tuple, runtime_checkable

from bs4 import Tag

from .models import LocatorStrategy


@runtime_checkable
class ContentLocator(Protocol):
    """Finds the element holding a page's main content."""

    def locate_with_strategy(self, root: Optional[Tag]) -> Tuple[Optional[Tag], Optional[LocatorStrategy]]:
        """Locate main content.

        Args:
            root: Document tree root

        Returns:
            The located element and the strategy that found it, or (None, None)
        """
        ...


@runtime_checkable
class Sanitizer(Protocol):
    """Turns a content element into clean markup without mutating it."""

    def sanitize(self, element: Optional[Tag]) -> str:
        ...
