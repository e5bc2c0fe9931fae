"""
Weighted content scoring.

The score is a pure function of an element's subtree. Terms are applied in
a fixed order; multiplicative terms therefore scale everything accumulated
before them and nothing after.
"""

from __future__ import annotations

import re
from typing import Dict, Optional

from bs4 import Tag

from readquarry.config.config import ExtractionConfig
from readquarry.extractor import dom
from readquarry.extractor.classifier import ElementClassifier
from readquarry.extractor.models import Candidate

_SENTENCE_END = re.compile(r"[.!?]+\s+")
_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


class TextLengthCache:
    """Trimmed text length per element, keyed by identity, for the span of one locate call."""

    def __init__(self) -> None:
        self._lengths: Dict[int, int] = {}
        # holding the elements keeps their ids from being reused mid-call
        self._elements: Dict[int, Tag] = {}

    def length(self, element: Tag) -> int:
        key = id(element)
        cached = self._lengths.get(key)
        if cached is None:
            cached = len(dom.text_of(element))
            self._lengths[key] = cached
            self._elements[key] = element
        return cached

    def __len__(self) -> int:
        return len(self._lengths)


class ContentScorer:
    def __init__(self, config: Optional[ExtractionConfig] = None, classifier: Optional[ElementClassifier] = None):
        self.config = config or ExtractionConfig()
        self.classifier = classifier or ElementClassifier(self.config)

    def score(self, element: Tag, text_cache: Optional[TextLengthCache] = None) -> float:
        return self.evaluate(element, text_cache).score

    def evaluate(self, element: Tag, text_cache: Optional[TextLengthCache] = None) -> Candidate:
        """Measure ``element`` and compute its score."""
        weights = self.config.scoring
        text = dom.text_of(element)
        text_length = text_cache.length(element) if text_cache is not None else len(text)

        paragraph_tags = element.find_all("p")
        candidate = Candidate(
            element=element,
            text_length=text_length,
            paragraphs=len(paragraph_tags),
            headings=len(element.find_all(_HEADING_TAGS)),
            links=len(element.find_all("a")),
            lists=len(element.find_all(["ul", "ol"])),
            images=len(element.find_all("img")),
        )
        paragraphs = candidate.paragraphs

        score = (
            weights.paragraph_weight * paragraphs
            + weights.heading_weight * candidate.headings
            + min(text_length / weights.text_length_divisor, weights.text_length_cap)
        )

        if paragraphs > 0:
            link_density = candidate.links / max(paragraphs, 1)
        else:
            link_density = candidate.links / max(text_length / weights.text_length_divisor, 1)
        for threshold, multiplier in weights.link_density_penalties:
            if link_density > threshold:
                score *= multiplier
                break

        commas = text.count(",")
        for threshold, multiplier in weights.comma_bonuses:
            if commas > threshold:
                score *= multiplier
                break

        sentences = len(_SENTENCE_END.findall(text))
        if sentences > weights.sentence_threshold:
            score += min(sentences * weights.sentence_weight, weights.sentence_cap)

        name = dom.tag_name(element)
        if name in weights.tag_multipliers:
            score *= weights.tag_multipliers[name]
        elif name == "section" and paragraphs >= weights.section_min_paragraphs:
            score *= weights.section_multiplier

        if self.classifier.looks_like_content(element):
            score += weights.content_like_bonus

        for threshold, multiplier in weights.short_text_penalties:
            if text_length < threshold:
                score *= multiplier
                break

        for ratio, paragraph_ceiling, multiplier in weights.list_penalties:
            if candidate.lists > ratio * paragraphs and paragraphs < paragraph_ceiling:
                score *= multiplier
                break

        score -= self._newsletter_penalty(element, text.lower())

        if 0 < candidate.images < weights.max_images:
            score += min(candidate.images * weights.image_weight, weights.image_bonus_cap)

        long_paragraphs = sum(
            1 for p in paragraph_tags if len(dom.text_of(p)) > weights.long_paragraph_length
        )
        if long_paragraphs > weights.long_paragraph_min_count:
            score += weights.long_paragraph_weight * long_paragraphs

        candidate.score = score
        return candidate

    def _newsletter_penalty(self, element: Tag, lowered: str) -> float:
        weights = self.config.scoring
        patterns = self.config.patterns
        penalty = 0.0

        if any(all(phrase in lowered for phrase in group) for group in patterns.newsletter_phrase_groups):
            penalty += weights.newsletter_penalty

        if dom.select_one(element, 'input[type="email"]') is not None:
            if any(phrase in lowered for phrase in patterns.subscribe_phrases):
                penalty += weights.newsletter_penalty
            else:
                penalty += weights.email_input_penalty

        if any(phrase in lowered for phrase in patterns.marketing_phrases):
            penalty += weights.marketing_penalty
        return penalty
