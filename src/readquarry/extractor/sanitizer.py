"""
Content sanitizer.

Produces clean markup from a located content element without touching the
caller's tree: the element is cloned, walked once with one decision per
node, serialized, and given a textual post-pass for leftovers the tree walk
cannot see.
"""

from __future__ import annotations

import copy
import re
from typing import Optional

import structlog
from bs4 import Comment, NavigableString, Tag

from readquarry.extractor import dom

logger = structlog.get_logger(__name__)

ALLOWED_ATTRIBUTES = frozenset({"href", "src", "alt", "title", "class", "id", "target", "rel"})
DROPPED_TAGS = frozenset({"object", "embed", "script", "style", "noscript", "template"})
EMPTY_DROPPABLE_TAGS = frozenset({"span", "div"})

OBJECT_REPLACEMENT = "\ufffc"

# "OBJ" / "[OBJ]" markers left behind by copy-paste of embedded objects
_MARKER = re.compile(r"\[?\bobj\b\]?", re.IGNORECASE)
_MARKER_ONLY = re.compile(r"^\s*\[?obj\]?\s*$", re.IGNORECASE)
_MARKER_TAG = re.compile(r"<(\w+)(?:\s[^>]*)?>\s*\[?obj\]?\s*</\1>", re.IGNORECASE)
_EMPTY_WRAPPER = re.compile(r"<(span|div)(?:\s[^>]*)?>\s*</\1>", re.IGNORECASE)
_TEXT_SEGMENT = re.compile(r">([^<]+)<")
_WHITESPACE = re.compile(r"\s+")


def strip_markers(text: str) -> str:
    return _MARKER.sub("", text).replace(OBJECT_REPLACEMENT, "")


def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace and drop object markers from display text."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", strip_markers(text)).strip()


def clean_heading_text(text: Optional[str]) -> str:
    """Heading text without trailing anchor glyphs and permalink symbols."""
    cleaned = clean_text(text)
    return cleaned.rstrip("#¶§🔗" + dom.ICON_GLYPHS).strip()


class ContentSanitizer:
    def sanitize(self, element: Optional[Tag]) -> str:
        """Return cleaned inner markup of ``element``; ``""`` for a missing element."""
        if element is None:
            return ""
        clone = copy.copy(element)
        dropped = self._walk(clone)
        html = self._post_process(clone.decode_contents()).strip()
        logger.debug("content sanitized", dropped=dropped, length=len(html))
        return html

    def _walk(self, node: Tag) -> int:
        """Clean ``node`` in place and return the number of elements dropped."""
        dropped = 0
        for child in list(node.children):
            if isinstance(child, Comment):
                child.extract()
            elif isinstance(child, NavigableString):
                self._clean_text_node(child)
            elif isinstance(child, Tag):
                if self._should_drop(child):
                    child.decompose()
                    dropped += 1
                    continue
                self._strip_attributes(child)
                dropped += self._walk(child)
                if self._is_empty_wrapper(child):
                    child.decompose()
                    dropped += 1
        return dropped

    def _should_drop(self, el: Tag) -> bool:
        name = dom.tag_name(el)
        if name in DROPPED_TAGS:
            return True
        if dom.is_footnote_link(el) or dom.is_icon(el) or dom.is_arrow_sup(el):
            return True
        return bool(_MARKER_ONLY.match(el.get_text())) and el.find("img") is None

    def _strip_attributes(self, el: Tag) -> None:
        for name in list(el.attrs):
            lowered = name.lower()
            if lowered.startswith("on") or lowered == "style" or lowered not in ALLOWED_ATTRIBUTES:
                del el.attrs[name]

    def _is_empty_wrapper(self, el: Tag) -> bool:
        if dom.tag_name(el) not in EMPTY_DROPPABLE_TAGS:
            return False
        return not el.get_text().strip() and el.find("img") is None

    def _clean_text_node(self, node: NavigableString) -> None:
        text = str(node)
        if _MARKER_ONLY.match(text) and text.strip():
            node.extract()
            return
        cleaned = strip_markers(text)
        if cleaned != text:
            node.replace_with(NavigableString(cleaned))

    def _post_process(self, html: str) -> str:
        html = _MARKER_TAG.sub("", html)
        html = _TEXT_SEGMENT.sub(lambda m: ">" + strip_markers(m.group(1)) + "<", html)
        html = _strip_markers_outside_tags(html)
        previous = None
        while previous != html:
            previous = html
            html = _EMPTY_WRAPPER.sub("", html)
        return html


def _strip_markers_outside_tags(html: str) -> str:
    """Strip markers from leading and trailing text that sits outside any tag."""
    head, sep, rest = html.partition("<")
    if not sep:
        return strip_markers(html)
    tail_index = rest.rfind(">")
    middle, tail = rest[: tail_index + 1], rest[tail_index + 1 :]
    return strip_markers(head) + "<" + middle + strip_markers(tail)
