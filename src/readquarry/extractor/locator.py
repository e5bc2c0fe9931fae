"""
Main content location.

Strategies run from most to least specific and the first acceptable hit
wins: the page's ``article``, its ``main``, a list of well-known content
selectors, and finally a scored search over every block container.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import structlog
from bs4 import Tag

from readquarry.config.config import ExtractionConfig
from readquarry.exceptions import PreconditionError
from readquarry.extractor import dom
from readquarry.extractor.classifier import ElementClassifier
from readquarry.extractor.models import LocatorStrategy
from readquarry.extractor.scorer import ContentScorer, TextLengthCache

logger = structlog.get_logger(__name__)

Located = Tuple[Optional[Tag], Optional[LocatorStrategy]]


class MainContentLocator:
    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        classifier: Optional[ElementClassifier] = None,
        scorer: Optional[ContentScorer] = None,
    ):
        self.config = config or ExtractionConfig()
        self.classifier = classifier or ElementClassifier(self.config)
        self.scorer = scorer or ContentScorer(self.config, self.classifier)

    def locate(self, root: Optional[Tag]) -> Optional[Tag]:
        """Return the element holding the page's primary content, or None."""
        return self.locate_with_strategy(root)[0]

    def locate_with_strategy(self, root: Optional[Tag]) -> Located:
        if root is None:
            raise PreconditionError("document root is required")

        cache = TextLengthCache()
        strategies = (
            (LocatorStrategy.ARTICLE, self._from_article),
            (LocatorStrategy.MAIN, self._from_main),
            (LocatorStrategy.SELECTOR, self._from_selectors),
            (LocatorStrategy.SCORED, self._from_scored_search),
        )
        for strategy, find in strategies:
            element = find(root, cache)
            if element is not None:
                logger.debug(
                    "main content located",
                    strategy=strategy.value,
                    tag=dom.tag_name(element),
                    classes=dom.class_name(element),
                    text_length=cache.length(element),
                )
                return element, strategy

        logger.debug("no main content found", measured=len(cache))
        return None, None

    def _acceptable(self, element: Tag) -> bool:
        return not self.classifier.is_excluded(element) or self.classifier.looks_like_content(element)

    def _nested_container(self, element: Tag, selectors: List[str], cache: TextLengthCache) -> Optional[Tag]:
        # one grouped query, so the earliest container in document order is the one considered
        nested = dom.select_one(element, ", ".join(selectors))
        if nested is None or self.classifier.is_excluded(nested):
            return None
        return nested if cache.length(nested) > self.config.thresholds.substantial_content_length else None

    def _from_article(self, root: Tag, cache: TextLengthCache) -> Optional[Tag]:
        article = root.find("article")
        if article is None:
            return None
        if cache.length(article) < self.config.thresholds.substantial_content_length:
            return None
        if self.classifier.is_related_card(article):
            return None
        return article if self._acceptable(article) else None

    def _from_main(self, root: Tag, cache: TextLengthCache) -> Optional[Tag]:
        main = root.find("main")
        if main is None or cache.length(main) <= self.config.thresholds.min_content_length:
            return None
        nested = self._nested_container(main, self.config.selectors.nested_in_main, cache)
        if nested is not None:
            return nested
        return main if self._acceptable(main) else None

    def _from_selectors(self, root: Tag, cache: TextLengthCache) -> Optional[Tag]:
        thresholds = self.config.thresholds
        for selector in self.config.selectors.content:
            element = dom.select_one(root, selector)
            if element is None or cache.length(element) <= thresholds.min_content_length:
                continue
            if not self._acceptable(element):
                continue
            if dom.tag_name(element) in ("main", "article") and cache.length(element) > thresholds.substantial_content_length:
                nested = self._nested_container(element, self.config.selectors.nested_in_match, cache)
                if nested is not None:
                    return nested
            return element
        return None

    def _candidates(self, root: Tag) -> List[Tag]:
        """Block containers in document order, then app mount points not already among them."""
        candidates = root.find_all(self.config.locator.candidate_tags)
        seen = {id(element) for element in candidates}
        for selector in self.config.selectors.spa_roots:
            element = dom.select_one(root, selector)
            if element is not None and id(element) not in seen:
                seen.add(id(element))
                candidates.append(element)
        return candidates

    def _from_scored_search(self, root: Tag, cache: TextLengthCache) -> Optional[Tag]:
        locator = self.config.locator
        min_length = self.config.thresholds.min_content_length

        best: Optional[Tag] = None
        best_score = float("-inf")
        for index, element in enumerate(self._candidates(root)):
            if index >= locator.max_candidates:
                logger.debug("candidate cap reached", max_candidates=locator.max_candidates)
                break
            if self.classifier.is_excluded(element) and not self.classifier.looks_like_content(element):
                continue
            if cache.length(element) < min_length:
                continue
            score = self.scorer.score(element, cache)
            if score > locator.early_exit_score:
                return element
            if score > best_score:
                best, best_score = element, score

        if best is not None and best_score > locator.min_score:
            return best
        return None
