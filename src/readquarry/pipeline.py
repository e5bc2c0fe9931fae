"""
Pipeline orchestration for ReadQuarry.
"""

from __future__ import annotations

import time
from typing import Optional

import structlog
from bs4 import BeautifulSoup, Tag
from structlog.contextvars import bound_contextvars

from readquarry.config.config import ExtractionConfig
from readquarry.exceptions import PreconditionError
from readquarry.extractor import dom
from readquarry.extractor.blocks import BlockBuilder
from readquarry.extractor.classifier import ElementClassifier
from readquarry.extractor.images import collect_images, featured_image
from readquarry.extractor.locator import MainContentLocator
from readquarry.extractor.models import ExtractionResult, MetadataRecord
from readquarry.extractor.protocols import ContentLocator, Sanitizer
from readquarry.extractor.sanitizer import ContentSanitizer, clean_text
from readquarry.metadata.metadata_extractor import MetadataExtractor


class ExtractionPipeline:
    """
    Runs one extraction over a parsed document in a fixed order:
    metadata, content location, standfirst, featured image, image
    references, content blocks, and finally sanitization.

    The pipeline holds configuration and stateless collaborators only, so
    one instance can serve any number of documents.
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        locator: Optional[ContentLocator] = None,
        sanitizer: Optional[Sanitizer] = None,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.classifier = ElementClassifier(self.config)
        self.locator: ContentLocator = locator or MainContentLocator(self.config, self.classifier)
        self.sanitizer: Sanitizer = sanitizer or ContentSanitizer()
        self.metadata = MetadataExtractor(self.config)
        self.blocks = BlockBuilder(self.classifier)
        self.logger = structlog.get_logger(self.__class__.__name__)

    def extract(self, root: Optional[Tag], base_url: Optional[str] = None) -> ExtractionResult:
        """
        Extract content, metadata and images from a document tree.

        Raises:
            PreconditionError: if ``root`` is None.
        """
        if root is None:
            raise PreconditionError("document root is required")

        with bound_contextvars(document_url=base_url):
            started = time.perf_counter()

            title = self.metadata.extract_title(root)
            author = self.metadata.author_extractor.extract(root)
            date = self.metadata.date_extractor.extract(root)

            content, strategy = self.locator.locate_with_strategy(root)
            if content is None:
                self.logger.info("No main content found")

            standfirst_el = self.metadata.find_standfirst(content)
            standfirst = clean_text(dom.text_of(standfirst_el)) or None

            lead_image = featured_image(root, content, self.config, base_url)
            images = collect_images(content, self.classifier, base_url)
            blocks = self.blocks.build(content, title=title, skip=standfirst_el, base_url=base_url)
            html = self.sanitizer.sanitize(content)

            self.logger.info(
                "Extraction complete",
                strategy=strategy.value if strategy else None,
                blocks=len(blocks),
                images=len(images),
                has_title=title is not None,
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            )

        return ExtractionResult(
            content_html=html,
            metadata=MetadataRecord(title=title, author=author, date=date, standfirst=standfirst),
            images=tuple(images),
            blocks=tuple(blocks),
            featured_image=lead_image,
            strategy=strategy,
        )

    def extract_html(self, html: str, base_url: Optional[str] = None) -> ExtractionResult:
        """Parse ``html`` with BeautifulSoup's html.parser and extract from the result."""
        if html is None:
            raise PreconditionError("html is required")
        return self.extract(BeautifulSoup(html, "html.parser"), base_url)
