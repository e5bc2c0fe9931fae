"""
Date Extractor - Publication Date Detection and Normalization

Finds a page's publication date from meta tags, ``time`` elements, microdata
and date-classed elements, and normalizes free-form date text to one of
three granularities: ``YYYY-MM-DD``, ``YYYY-MM`` or ``YYYY``.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from enum import Enum
from typing import Optional

from bs4 import Tag
from dateutil import parser as dateutil_parser

from readquarry.config.config import ExtractionConfig
from readquarry.extractor import dom

logger = logging.getLogger(__name__)

MONTHS = {
    name: index
    for index, names in enumerate(
        [
            ("january", "jan"),
            ("february", "feb"),
            ("march", "mar"),
            ("april", "apr"),
            ("may",),
            ("june", "jun"),
            ("july", "jul"),
            ("august", "aug"),
            ("september", "sep", "sept"),
            ("october", "oct"),
            ("november", "nov"),
            ("december", "dec"),
        ],
        start=1,
    )
    for name in names
}

_ISO_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})")
_ISO_MONTH = re.compile(r"^(\d{4})-(\d{2})(?!\d)")
_ORDINAL_DAY = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)?\s+([A-Za-z]+)\.?,?\s+(\d{4})\b")
_MONTH_DAY_YEAR = re.compile(r"\b([A-Za-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})\b")
_MONTH_YEAR = re.compile(r"\b([A-Za-z]+)\.?,?\s+(\d{4})\b")
_YEAR_ONLY = re.compile(r"^\d{4}$")

# Two defaults that differ in every field; a component is present in the
# input only if both parses agree on it.
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


class DateSource(Enum):
    """Where a publication date was found, ordered by reliability."""

    META_TAG = "meta_tag"
    TIME_ELEMENT = "time_element"
    MICRODATA = "microdata"
    DATE_CLASS = "date_class"
    ARTICLE_TEXT = "article_text"


def _month_number(name: str) -> Optional[int]:
    return MONTHS.get(name.lower())


def _full_date_parse(text: str) -> Optional[str]:
    """Generic parse, accepted only when year, month and day all come from the input."""
    try:
        first = dateutil_parser.parse(text, default=_DEFAULT_A, fuzzy=False)
        second = dateutil_parser.parse(text, default=_DEFAULT_B, fuzzy=False)
    except (ValueError, OverflowError):
        return None
    if (first.year, first.month, first.day) != (second.year, second.month, second.day):
        return None
    return f"{first.year:04d}-{first.month:02d}-{first.day:02d}"


def normalize_date(text: Optional[str]) -> Optional[str]:
    """
    Normalize date text to ``YYYY-MM-DD``, ``YYYY-MM`` or ``YYYY``.

    Examples:
        "2025-12-01T10:00:00Z" -> "2025-12-01"
        "31st Jul 2007" -> "2007-07-31"
        "2025-12" -> "2025-12"
        "December 2025" -> "2025-12"
        "2025" -> "2025"
        "not a date" -> None
    """
    if not text:
        return None
    text = text.strip()
    if not text:
        return None

    iso = _ISO_PREFIX.match(text)
    if iso:
        return iso.group(1)

    # reduced-precision ISO, as in <time datetime="2025-12">
    iso_month = _ISO_MONTH.match(text)
    if iso_month and 1 <= int(iso_month.group(2)) <= 12:
        return f"{iso_month.group(1)}-{iso_month.group(2)}"

    if _YEAR_ONLY.match(text):
        return text

    parsed = _full_date_parse(text)
    if parsed:
        return parsed

    ordinal = _ORDINAL_DAY.search(text)
    if ordinal:
        day, month_name, year = ordinal.groups()
        month = _month_number(month_name)
        if month and 1 <= int(day) <= 31:
            return f"{year}-{month:02d}-{int(day):02d}"

    month_first = _MONTH_DAY_YEAR.search(text)
    if month_first:
        month_name, day, year = month_first.groups()
        month = _month_number(month_name)
        if month and 1 <= int(day) <= 31:
            return f"{year}-{month:02d}-{int(day):02d}"

    month_year = _MONTH_YEAR.search(text)
    if month_year:
        month = _month_number(month_year.group(1))
        if month:
            return f"{month_year.group(2)}-{month:02d}"

    return None


class DateExtractor:
    """
    Publication date lookup over a document tree.

    Selectors are tried in configured order; for each match the
    ``datetime`` attribute, then ``content``, then visible text is
    normalized, and the first value that normalizes wins.
    """

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()

    def extract(self, root: Optional[Tag]) -> Optional[str]:
        found = self.extract_with_source(root)
        return found[0] if found else None

    def extract_with_source(self, root: Optional[Tag]) -> Optional[tuple[str, DateSource]]:
        if root is None:
            return None

        for selector in self.config.selectors.date:
            for element in dom.select(root, selector):
                for raw in (dom.attr(element, "datetime"), dom.attr(element, "content"), dom.text_of(element)):
                    date = normalize_date(raw)
                    if date:
                        logger.debug("Date %s found via %s", date, selector)
                        return date, self._source_for(element)

        article = root.find("article")
        if article is not None:
            for element in article.find_all(["time", "span", "p", "div"], limit=200):
                text = dom.text_of(element)
                if not text or len(text) > 40:
                    continue
                date = normalize_date(text)
                if date and len(date) == 10:
                    logger.debug("Date %s found in article text", date)
                    return date, DateSource.ARTICLE_TEXT
        return None

    @staticmethod
    def _source_for(element: Tag) -> DateSource:
        name = dom.tag_name(element)
        if name == "meta":
            return DateSource.META_TAG
        if name == "time":
            return DateSource.TIME_ELEMENT
        if dom.attr(element, "itemprop"):
            return DateSource.MICRODATA
        return DateSource.DATE_CLASS
