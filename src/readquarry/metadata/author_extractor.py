"""
Author Extractor - Byline and Profile URL Author Identification

Extracts author names from meta tags, byline elements and author links.
When the only evidence is a profile URL such as ``/profile/jane-doe`` the
name is reconstructed from the URL slug.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from bs4 import Tag

from readquarry.config.config import ExtractionConfig
from readquarry.extractor import dom
from readquarry.extractor.sanitizer import clean_text

logger = logging.getLogger(__name__)

_PROFILE_SEGMENT = re.compile(r"/(?:profile|author)/([^/?#]+)", re.IGNORECASE)
_CAMEL_CASE = re.compile(r"^([a-z]+)([A-Z][a-z]*)$")
_URL_LIKE = re.compile(r"^(?:https?:)?//|^www\.|^/", re.IGNORECASE)
_BYLINE = re.compile(r"^\s*(?i:by)\s+([A-Z][\w'.-]+(?:\s+[A-Z][\w'.-]+){0,3})\b")

# Common given-name endings, tried in order when a lowercase slug has no separator
NAME_ENDINGS = ("ia", "na", "ra", "la", "sa", "a")


def _capitalize(token: str) -> str:
    return token[:1].upper() + token[1:].lower()


def _split_on_name_ending(token: str) -> Optional[List[str]]:
    for ending in NAME_ENDINGS:
        for cut in range(3, len(token) - 2):
            first, last = token[:cut], token[cut:]
            if first.endswith(ending) and 3 <= len(first) <= 15 and 3 <= len(last) <= 15:
                return [first, last]
    return None


def author_from_url(url: Optional[str]) -> Optional[str]:
    """
    Reconstruct a display name from a profile or author URL.

    Examples:
        "/profile/jane-doe" -> "Jane Doe"
        "/author/john_smith" -> "John Smith"
        "/profile/janeDoe" -> "Jane Doe"
        "/profile/susannarustin" -> "Susanna Rustin"
    """
    if not url:
        return None
    match = _PROFILE_SEGMENT.search(url)
    if not match:
        return None
    slug = match.group(1).strip()
    if not slug:
        return None

    parts = [part for part in re.split(r"[-_]+", slug) if part]
    if len(parts) > 1:
        name = " ".join(_capitalize(part) for part in parts)
    else:
        name = _name_from_token(slug)

    if 2 < len(name) < 100:
        return name
    return None


def _name_from_token(token: str) -> str:
    camel = _CAMEL_CASE.match(token)
    if camel:
        return " ".join(_capitalize(part) for part in camel.groups())

    lowered = token.lower()
    if token == lowered and len(token) > 6:
        split = _split_on_name_ending(lowered)
        if split:
            return " ".join(_capitalize(part) for part in split)

    if len(token) > 10:
        middle = len(token) // 2
        return f"{_capitalize(token[:middle])} {_capitalize(token[middle:])}"
    return _capitalize(token)


class AuthorExtractor:
    """
    Author lookup over a document tree.

    Walks the configured selectors in order. Meta tags contribute their
    ``content``; other elements their text. A missing or URL-like value
    falls back to the element's ``href`` read as a profile URL.
    """

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()
        prefixes = sorted(self.config.patterns.byline_prefixes, key=len, reverse=True)
        self._prefix = re.compile(
            r"^(?:" + "|".join(re.escape(p.rstrip(":")) for p in prefixes) + r")\s*:?\s+", re.IGNORECASE
        )

    def clean_name(self, raw: Optional[str]) -> Optional[str]:
        name = clean_text(raw)
        name = self._prefix.sub("", name).strip(" ,|·•-")
        if not name or _URL_LIKE.match(name) or len(name) >= 100:
            return None
        return name

    def extract(self, root: Optional[Tag]) -> Optional[str]:
        if root is None:
            return None

        for selector in self.config.selectors.author:
            for element in dom.select(root, selector):
                name = self._from_element(element)
                if name:
                    logger.debug("Author %r found via %s", name, selector)
                    return name

        article = root.find("article")
        if article is not None:
            for element in article.find_all(["p", "span", "div"], limit=100):
                text = dom.text_of(element)
                if len(text) > 80:
                    continue
                byline = _BYLINE.match(text)
                if byline:
                    return byline.group(1)
        return None

    def _from_element(self, element: Tag) -> Optional[str]:
        if dom.tag_name(element) == "meta":
            raw = dom.attr(element, "content")
        else:
            raw = dom.text_of(element) or dom.attr(element, "content")

        name = self.clean_name(raw)
        if name:
            return name

        href = dom.attr(element, "href") or (raw if raw and _URL_LIKE.match(raw.strip()) else "")
        if not href and dom.tag_name(element) != "a":
            link = element.find("a", href=True)
            href = dom.attr(link, "href")
        return author_from_url(href)
