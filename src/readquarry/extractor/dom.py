"""
Typed accessors over BeautifulSoup elements.

Every helper here is total: missing attributes, non-element nodes and
malformed values yield empty strings, zeros or ``None`` rather than errors.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

ARROW_GLYPHS = "←→↑↓↗↘↩"
ICON_GLYPHS = ARROW_GLYPHS + "◀▶▲▼"

_PIXELS = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:px)?\s*$", re.IGNORECASE)
_DIGITS_ONLY = re.compile(r"^[\d\s]+$")
_ARROWS_ONLY = re.compile(f"^[{ARROW_GLYPHS}]+$")
_ICON_GLYPH = re.compile(f"[{ICON_GLYPHS}]")


def is_element(node: object) -> bool:
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def tag_name(el: Optional[Tag]) -> str:
    if el is None or not isinstance(el, Tag):
        return ""
    return (el.name or "").lower()


def attr(el: Optional[Tag], name: str) -> str:
    """Attribute value as a string; multi-valued attributes are space-joined."""
    if el is None or not isinstance(el, Tag):
        return ""
    value = el.get(name)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def class_name(el: Optional[Tag]) -> str:
    return attr(el, "class")


def element_id(el: Optional[Tag]) -> str:
    return attr(el, "id")


def class_and_id(el: Optional[Tag]) -> str:
    """Lower-cased class and id, for substring pattern checks."""
    return f"{class_name(el)} {element_id(el)}".strip().lower()


def text_of(el: Optional[Tag]) -> str:
    if el is None:
        return ""
    return el.get_text().strip()


def inline_style(el: Optional[Tag]) -> Dict[str, str]:
    style: Dict[str, str] = {}
    for declaration in attr(el, "style").split(";"):
        prop, sep, value = declaration.partition(":")
        if sep:
            style[prop.strip().lower()] = value.strip().lower()
    return style


def parse_pixels(value: Optional[str]) -> Optional[int]:
    """Parse ``"300"`` or ``"300px"``; anything else is ``None``."""
    if not value:
        return None
    match = _PIXELS.match(value)
    if not match:
        return None
    return int(float(match.group(1)))


def declared_size(el: Optional[Tag]) -> Tuple[Optional[int], Optional[int]]:
    """Declared (width, height) from attributes, falling back to inline style."""
    style = inline_style(el)
    width = parse_pixels(attr(el, "width"))
    if width is None:
        width = parse_pixels(style.get("width"))
    height = parse_pixels(attr(el, "height"))
    if height is None:
        height = parse_pixels(style.get("height"))
    return width, height


def dimensions(el: Optional[Tag]) -> Tuple[int, int]:
    """Declared size with unknown sides as 0, the way an unloaded image reports itself."""
    width, height = declared_size(el)
    return width or 0, height or 0


def is_hidden(el: Optional[Tag]) -> bool:
    if el is None:
        return False
    style = inline_style(el)
    return (
        el.has_attr("hidden")
        or attr(el, "aria-hidden").lower() == "true"
        or style.get("display", "").startswith("none")
        or style.get("visibility", "").startswith("hidden")
    )


def ancestors(el: Optional[Tag], max_depth: Optional[int] = None) -> Iterator[Tag]:
    """Yield element ancestors nearest first, stopping below the document object."""
    if el is None:
        return
    depth = 0
    parent = el.parent
    while parent is not None and is_element(parent):
        if max_depth is not None and depth >= max_depth:
            return
        yield parent
        depth += 1
        parent = parent.parent


def closest(
    el: Optional[Tag],
    predicate: Callable[[Tag], bool],
    max_depth: Optional[int] = None,
    include_self: bool = True,
) -> Optional[Tag]:
    if el is None:
        return None
    if include_self and predicate(el):
        return el
    for parent in ancestors(el, max_depth):
        if predicate(parent):
            return parent
    return None


def closest_tag(el: Optional[Tag], names: Iterable[str], max_depth: Optional[int] = None) -> Optional[Tag]:
    wanted = set(names)
    return closest(el, lambda node: tag_name(node) in wanted, max_depth)


def select_one(root: Optional[Tag], selector: str) -> Optional[Tag]:
    if root is None:
        return None
    try:
        return root.select_one(selector)
    except (SelectorSyntaxError, ValueError, NotImplementedError):
        return None


def select(root: Optional[Tag], selector: str) -> List[Tag]:
    if root is None:
        return []
    try:
        return list(root.select(selector))
    except (SelectorSyntaxError, ValueError, NotImplementedError):
        return []


def contains_pattern(haystack: str, patterns: Iterable[str]) -> bool:
    return any(pattern in haystack for pattern in patterns)


def is_footnote_link(el: Optional[Tag]) -> bool:
    """An in-page anchor whose visible content is only a number, an arrow or an emoji arrow image."""
    if tag_name(el) != "a":
        return False
    href = attr(el, "href")
    if not (href.startswith("#") or "#note" in href):
        return False

    text = text_of(el)
    if text and (_DIGITS_ONLY.match(text) or _ARROWS_ONLY.match(text)):
        return True

    for img in el.find_all("img"):
        if attr(img, "alt") == "↩":
            return True
        if "emoji" in attr(img, "src").lower() or "emoji" in class_name(img).lower():
            return True
    return False


def is_icon(el: Optional[Tag]) -> bool:
    name = tag_name(el)
    if not name:
        return False
    if name == "svg":
        return True
    if "icon" in class_and_id(el):
        return True

    text = text_of(el)
    if name in ("span", "i", "em", "sup") and len(text) <= 3 and _ICON_GLYPH.search(text):
        return True
    if name == "sup" and "open these" in text.lower():
        return True

    if name == "img":
        alt = attr(el, "alt")
        if alt and _ARROWS_ONLY.match(alt.strip()):
            return True
        if "emoji" in attr(el, "src").lower() and "arrow" in alt.lower():
            return True
    return False


def is_arrow_sup(el: Optional[Tag]) -> bool:
    if tag_name(el) != "sup":
        return False
    text = text_of(el)
    return (len(text) <= 3 and bool(_ICON_GLYPH.search(text))) or "open these" in text.lower()


def normalize_image_url(url: str) -> str:
    """Origin plus path, so size and cache-busting variants compare equal."""
    if not url or url.startswith("data:"):
        return url
    parsed = urlparse(url)
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
    return url.split("?", 1)[0].split("#", 1)[0]


def to_absolute_url(url: str, base_url: Optional[str]) -> str:
    url = (url or "").strip()
    if not url:
        return ""
    if url.startswith(("http://", "https://", "data:")):
        return url
    if url.startswith("//"):
        scheme = urlparse(base_url).scheme if base_url else ""
        return f"{scheme or 'https'}:{url}"
    if not base_url:
        return url
    try:
        return urljoin(base_url, url)
    except ValueError:
        return url
