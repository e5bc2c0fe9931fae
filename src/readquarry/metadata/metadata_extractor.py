"""
Metadata Extractor - Title, Author, Date and Standfirst

Coordinates the individual extractors into one ``MetadataRecord`` for a
document tree and its located content element.
"""

from __future__ import annotations

import logging
from typing import Optional

from bs4 import Tag

from readquarry.config.config import ExtractionConfig
from readquarry.extractor import dom
from readquarry.extractor.models import MetadataRecord
from readquarry.extractor.sanitizer import clean_heading_text, clean_text

from .author_extractor import AuthorExtractor
from .date_extractor import DateExtractor

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = ExtractionConfig()


def is_valid_title(text: Optional[str], config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    """A title is at least five characters and not a generic section name."""
    if not text:
        return False
    stripped = text.strip()
    if len(stripped) < 5:
        return False
    return stripped.lower() not in config.patterns.invalid_titles


class MetadataExtractor:
    """Extracts title, author, date and standfirst from a document tree."""

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()
        self.author_extractor = AuthorExtractor(self.config)
        self.date_extractor = DateExtractor(self.config)

    def extract(self, root: Optional[Tag], content: Optional[Tag] = None) -> MetadataRecord:
        if root is None:
            return MetadataRecord()
        standfirst = self.find_standfirst(content)
        return MetadataRecord(
            title=self.extract_title(root),
            author=self.author_extractor.extract(root),
            date=self.date_extractor.extract(root),
            standfirst=clean_text(dom.text_of(standfirst)) or None,
        )

    def extract_title(self, root: Optional[Tag]) -> Optional[str]:
        """
        Headline lookup: the article's h1, then main's h1, then the first
        valid h1 anywhere; failing those, the article's h1 even if it looks
        generic, and finally the document ``<title>``.
        """
        if root is None:
            return None

        article = root.find("article")
        main = root.find("main")
        article_h1 = article.find("h1") if article is not None else None
        main_h1 = main.find("h1") if main is not None else None

        for heading in (article_h1, main_h1):
            text = clean_heading_text(dom.text_of(heading))
            if is_valid_title(text, self.config):
                return text

        for heading in root.find_all("h1"):
            text = clean_heading_text(dom.text_of(heading))
            if is_valid_title(text, self.config):
                return text

        fallback = clean_heading_text(dom.text_of(article_h1))
        if fallback:
            return fallback

        title = clean_text(dom.text_of(root.find("title")))
        return title or None

    def find_standfirst(self, content: Optional[Tag]) -> Optional[Tag]:
        """
        The element holding the article's standfirst, or None.

        Dedicated standfirst containers are preferred; otherwise the first
        short, link-free paragraph that does not read like body copy.
        """
        if content is None:
            return None
        thresholds = self.config.thresholds

        for selector in self.config.selectors.standfirst:
            element = dom.select_one(content, selector)
            if element is None:
                continue
            length = len(dom.text_of(element))
            if thresholds.standfirst_min_length <= length <= thresholds.standfirst_max_length:
                return element

        paragraph = content.find("p")
        if paragraph is None or paragraph.find("a") is not None:
            return None
        text = dom.text_of(paragraph)
        if not thresholds.standfirst_min_length <= len(text) <= thresholds.standfirst_paragraph_max_length:
            return None
        first_word = text.split(maxsplit=1)[0].lower() if text.split() else ""
        if first_word in self.config.patterns.standfirst_starters:
            return None
        logger.debug("Standfirst taken from first paragraph")
        return paragraph
