"""
Element classification heuristics.

Each predicate is an ordered list of named rules. A rule answers MATCH,
NO_MATCH or INAPPLICABLE for one element; the predicate is true when any
rule matches. Keeping the order as data makes it inspectable
(``exclusion_reason``) and lets individual rules be tested in isolation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Pattern, Sequence

import structlog
from bs4 import Tag

from readquarry.config.config import ExtractionConfig
from readquarry.extractor import dom
from readquarry.extractor.images import best_image_url

logger = structlog.get_logger(__name__)

_NAME_SHAPED = re.compile(r"^[A-Z][a-z]+(\s+[A-Z][a-z]+){0,3}$")
_FULL_NAME_SHAPED = re.compile(r"^[A-Z][a-z]+(\s+[A-Z][a-z]+){1,3}$")
_HEADINGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
_SHORT_TEXT_TAGS = _HEADINGS | {"p", "span", "a", "li", "small", "strong", "em", "b", "i", "label", "button"}


class RuleOutcome(Enum):
    MATCH = "match"
    NO_MATCH = "no_match"
    INAPPLICABLE = "inapplicable"


@dataclass(frozen=True)
class Rule:
    name: str
    check: Callable[[Tag], RuleOutcome]


def first_match(rules: Sequence[Rule], element: Tag) -> Optional[str]:
    """Name of the first rule that matches ``element``, or None."""
    for rule in rules:
        if rule.check(element) is RuleOutcome.MATCH:
            return rule.name
    return None


def _outcome(matched: bool) -> RuleOutcome:
    return RuleOutcome.MATCH if matched else RuleOutcome.NO_MATCH


def _word_pattern(words: Iterable[str]) -> Optional[Pattern[str]]:
    words = sorted({w.lower() for w in words if w}, key=len, reverse=True)
    if not words:
        return None
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in words) + r")\b")


def _token_pattern(words: Iterable[str]) -> Optional[Pattern[str]]:
    """Match whole letter runs, so ``line`` hits ``line.png`` but not ``headline.png``."""
    words = sorted({w.lower() for w in words if w}, key=len, reverse=True)
    if not words:
        return None
    return re.compile(r"(?<![a-z])(?:" + "|".join(re.escape(w) for w in words) + r")(?![a-z])")


def _search(pattern: Optional[Pattern[str]], text: str) -> bool:
    return bool(pattern and pattern.search(text))


def _fits_within(img: Tag, limit: int, strict: bool = False) -> bool:
    """True only when both sides are declared and positive and within ``limit``."""
    width, height = dom.declared_size(img)
    if width is None or height is None or width <= 0 or height <= 0:
        return False
    if strict:
        return width < limit and height < limit
    return width <= limit and height <= limit


class ElementClassifier:
    """Total predicates over elements; missing attributes never raise."""

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()
        patterns = self.config.patterns

        self._excluded = _word_pattern(patterns.excluded_classes)
        self._related_ancestor = _word_pattern(patterns.related_ancestor_classes)
        self._logo_alt = _token_pattern(patterns.logo_alt_keywords)
        self._metadata_lines = [re.compile(p, re.IGNORECASE) for p in patterns.metadata_line_patterns]

        # table entries with punctuation (data URI prefixes, paths) match as plain substrings
        word_like = [p for p in patterns.logo_patterns if re.fullmatch(r"[a-z0-9-]+", p)]
        self._logo_tokens = _token_pattern(word_like)
        self._logo_substrings = [p for p in patterns.logo_patterns if p not in word_like]

        self.exclusion_rules: List[Rule] = [
            Rule("hidden", self._rule_hidden),
            Rule("iframe", lambda el: _outcome(dom.tag_name(el) == "iframe")),
            Rule("footnote_link", lambda el: _outcome(dom.is_footnote_link(el))),
            Rule("icon", lambda el: _outcome(dom.is_icon(el))),
            Rule("complementary", self._rule_complementary),
            Rule("newsletter_form", self._rule_newsletter_form),
            Rule("paywall_class", self._rule_paywall_class),
            Rule("excluded_class", self._rule_excluded_class),
            Rule("tab_control", self._rule_tab_control),
            Rule("separator", self._rule_separator),
            Rule("section_label", self._rule_section_label),
            Rule("metadata_line", self._rule_metadata_line),
            Rule("navigation_text", self._rule_navigation_text),
            Rule("excluded_ancestor", self._rule_excluded_ancestor),
        ]
        self.decorative_rules: List[Rule] = [
            Rule("author_photo", self._rule_author_photo),
            Rule("facepile_avatar", self._rule_facepile_avatar),
            Rule("logo_pattern", self._rule_logo_pattern),
            Rule("small_icon", self._rule_small_icon),
            Rule("background_image", self._rule_background_image),
            Rule("untagged_social_image", self._rule_untagged_social_image),
        ]

    # --- public predicates ---

    def looks_like_content(self, element: Optional[Tag]) -> bool:
        if element is None:
            return False
        marker = dom.class_and_id(element)
        return bool(marker) and dom.contains_pattern(marker, self.config.patterns.content_indicators)

    def is_excluded(self, element: Optional[Tag]) -> bool:
        return self.exclusion_reason(element) is not None

    def exclusion_reason(self, element: Optional[Tag]) -> Optional[str]:
        if not dom.is_element(element):
            return None
        return first_match(self.exclusion_rules, element)

    def is_decorative_image(self, element: Optional[Tag]) -> bool:
        return self.decorative_reason(element) is not None

    def decorative_reason(self, element: Optional[Tag]) -> Optional[str]:
        if dom.tag_name(element) != "img":
            return None
        return first_match(self.decorative_rules, element)

    def is_footnote_link(self, element: Optional[Tag]) -> bool:
        return dom.is_footnote_link(element)

    def is_icon(self, element: Optional[Tag]) -> bool:
        return dom.is_icon(element)

    def is_navigation_paragraph(self, element: Optional[Tag]) -> bool:
        """Short paragraph that reads like navigation, a link row, or a paywall notice."""
        if element is None:
            return False
        thresholds = self.config.thresholds
        text = dom.text_of(element)
        if len(text) > thresholds.navigation_text_max_length:
            return False
        if len(text) < thresholds.short_link_text_length and len(element.find_all("a")) >= 2:
            return True
        return self.is_navigation_text(text)

    def is_navigation_text(self, text: str) -> bool:
        lowered = (text or "").strip().lower()
        if not lowered or len(lowered) > self.config.thresholds.navigation_text_max_length:
            return False
        patterns = self.config.patterns
        if any(lowered.startswith(start) for start in patterns.navigation_starts):
            return True
        return any(phrase in lowered for phrase in patterns.paywall_phrases)

    def is_related_card(self, element: Optional[Tag]) -> bool:
        """Teaser card or an article sitting in a related-content rail."""
        if element is None:
            return False
        if dom.select_one(element, ".gc__image-placeholder") is not None:
            return True
        classes = dom.class_name(element).lower()
        if any(card in classes for card in self.config.patterns.related_card_classes):
            return True
        for parent in dom.ancestors(element):
            if dom.tag_name(parent) == "aside" or _search(self._related_ancestor, dom.class_and_id(parent)):
                return True
        return False

    # --- exclusion rules ---

    def _rule_hidden(self, el: Tag) -> RuleOutcome:
        if not dom.is_hidden(el):
            return RuleOutcome.NO_MATCH
        # lazy loaders hide images until they scroll into view
        if dom.tag_name(el) == "img" and any(dom.attr(el, name) for name in self.config.images.lazy_attributes):
            return RuleOutcome.NO_MATCH
        return RuleOutcome.MATCH

    def _rule_complementary(self, el: Tag) -> RuleOutcome:
        return _outcome(dom.tag_name(el) == "aside" or dom.attr(el, "role").lower() == "complementary")

    def _rule_newsletter_form(self, el: Tag) -> RuleOutcome:
        email = el if dom.attr(el, "type").lower() == "email" else dom.select_one(el, 'input[type="email"]')
        if email is None:
            return RuleOutcome.INAPPLICABLE
        text = dom.text_of(el).lower()
        # large containers are judged by the scorer, not excluded outright
        if len(text) >= self.config.thresholds.substantial_content_length:
            return RuleOutcome.INAPPLICABLE
        if any(phrase in text for phrase in self.config.patterns.subscribe_phrases):
            return RuleOutcome.MATCH
        return _outcome(dom.closest_tag(el, ["nav", "aside", "footer", "header"]) is not None)

    def _rule_paywall_class(self, el: Tag) -> RuleOutcome:
        marker = dom.class_and_id(el)
        if not marker:
            return RuleOutcome.INAPPLICABLE
        return _outcome(dom.contains_pattern(marker, self.config.patterns.paywall_classes))

    def _rule_excluded_class(self, el: Tag) -> RuleOutcome:
        marker = dom.class_and_id(el)
        if not marker:
            return RuleOutcome.INAPPLICABLE
        return _outcome(_search(self._excluded, marker))

    def _rule_tab_control(self, el: Tag) -> RuleOutcome:
        role = dom.attr(el, "role").lower()
        if role in ("tab", "tablist"):
            return RuleOutcome.MATCH
        return _outcome(dom.closest(el, lambda node: dom.attr(node, "role").lower() == "tablist") is not None)

    def _rule_separator(self, el: Tag) -> RuleOutcome:
        return _outcome(dom.tag_name(el) == "hr" or dom.attr(el, "role").lower() == "separator")

    def _rule_section_label(self, el: Tag) -> RuleOutcome:
        if dom.tag_name(el) not in _HEADINGS:
            return RuleOutcome.INAPPLICABLE
        label = dom.text_of(el).lower().rstrip(":").strip()
        return _outcome(label in self.config.patterns.section_heading_labels)

    def _rule_metadata_line(self, el: Tag) -> RuleOutcome:
        if dom.tag_name(el) not in _SHORT_TEXT_TAGS and dom.tag_name(el) != "div":
            return RuleOutcome.INAPPLICABLE
        text = dom.text_of(el)
        if not text or len(text) > self.config.thresholds.navigation_text_max_length:
            return RuleOutcome.INAPPLICABLE
        return _outcome(any(pattern.search(text) for pattern in self._metadata_lines))

    def _rule_navigation_text(self, el: Tag) -> RuleOutcome:
        if dom.tag_name(el) not in _SHORT_TEXT_TAGS:
            return RuleOutcome.INAPPLICABLE
        return _outcome(self.is_navigation_text(dom.text_of(el)))

    def _rule_excluded_ancestor(self, el: Tag) -> RuleOutcome:
        if dom.tag_name(el) == "img":
            ad_classes = self.config.patterns.ad_classes
            for parent in dom.ancestors(el):
                if dom.tag_name(parent) == "aside" or dom.contains_pattern(dom.class_and_id(parent), ad_classes):
                    return RuleOutcome.MATCH
            return RuleOutcome.NO_MATCH
        blocked = set(self.config.patterns.excluded_ancestor_tags)
        return _outcome(any(dom.tag_name(parent) in blocked for parent in dom.ancestors(el)))

    # --- decorative image rules ---

    def _author_container(self, img: Tag, depth: int) -> Optional[Tag]:
        keywords = self.config.patterns.author_containers
        return dom.closest(
            img,
            lambda node: dom.tag_name(node) == "address" or dom.contains_pattern(dom.class_and_id(node), keywords),
            max_depth=depth,
            include_self=False,
        )

    def _rule_author_photo(self, img: Tag) -> RuleOutcome:
        images = self.config.images
        marker = dom.class_and_id(img)
        if dom.contains_pattern(marker, self.config.patterns.author_photo_classes):
            return RuleOutcome.MATCH

        width, height = dom.dimensions(img)
        alt = dom.attr(img, "alt").strip()
        small = _fits_within(img, images.author_photo_small)
        near_author = self._author_container(img, 5) is not None
        if near_author and (small or not alt or _NAME_SHAPED.match(alt)):
            return RuleOutcome.MATCH

        square = (
            0 < width <= images.author_photo_max
            and 0 < height <= images.author_photo_max
            and abs(width - height) < images.author_square_tolerance
        )
        if square and (self._author_container(img, 3) is not None or _FULL_NAME_SHAPED.match(alt)):
            return RuleOutcome.MATCH
        return RuleOutcome.NO_MATCH

    def _rule_facepile_avatar(self, img: Tag) -> RuleOutcome:
        images = self.config.images
        keywords = self.config.patterns.facepile_containers
        if _fits_within(img, images.very_small_image):
            container = dom.closest(
                img,
                lambda node: dom.contains_pattern(dom.class_and_id(node), keywords),
                max_depth=6,
                include_self=False,
            )
            if container is not None:
                return RuleOutcome.MATCH
        alt = dom.attr(img, "alt").strip().lower()
        if alt.endswith("avatar") and _fits_within(img, images.small_icon_max):
            return RuleOutcome.MATCH
        return RuleOutcome.NO_MATCH

    def _rule_logo_pattern(self, img: Tag) -> RuleOutcome:
        # a lazy image's placeholder src says nothing about the picture itself
        src = (best_image_url(img, self.config) or dom.attr(img, "src")).lower()
        if src and (_search(self._logo_tokens, src) or dom.contains_pattern(src, self._logo_substrings)):
            return RuleOutcome.MATCH
        alt = dom.attr(img, "alt").strip().lower()
        # long alt text describes a real picture even when it mentions a brand
        if alt and len(alt) < 50 and _search(self._logo_alt, alt):
            return RuleOutcome.MATCH
        return _outcome(_search(self._logo_alt, dom.class_and_id(img)))

    def _rule_small_icon(self, img: Tag) -> RuleOutcome:
        limit = self.config.images.small_icon_max
        if not _fits_within(img, limit):
            return RuleOutcome.INAPPLICABLE
        marker = dom.class_and_id(img)
        if "author" in marker or "headshot" in marker:
            return RuleOutcome.NO_MATCH
        haystack = f"{dom.attr(img, 'src')} {dom.attr(img, 'alt')}".lower()
        return _outcome(any(word in haystack for word in ("icon", "logo", "social")))

    def _rule_background_image(self, img: Tag) -> RuleOutcome:
        src = dom.attr(img, "src")
        if not src:
            return RuleOutcome.INAPPLICABLE
        for node in [img, *dom.ancestors(img, 3)]:
            background = dom.inline_style(node).get("background-image", "") + dom.inline_style(node).get("background", "")
            if src.lower() in background:
                return RuleOutcome.MATCH
        return RuleOutcome.NO_MATCH

    def _rule_untagged_social_image(self, img: Tag) -> RuleOutcome:
        limit = self.config.images.very_small_image
        if not _fits_within(img, limit, strict=True) or dom.attr(img, "alt").strip():
            return RuleOutcome.INAPPLICABLE
        if dom.closest_tag(img, ["figure", "a"]) is not None:
            return RuleOutcome.NO_MATCH
        keywords = self.config.patterns.social_containers
        container = dom.closest(
            img,
            lambda node: dom.contains_pattern(dom.class_and_id(node), keywords),
            max_depth=3,
            include_self=False,
        )
        return _outcome(container is not None)
