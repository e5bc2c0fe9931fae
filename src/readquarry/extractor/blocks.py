"""
Readable block segmentation of located content.

Downstream converters work on a flat sequence of headings, paragraphs,
images, quotes, lists, code and tables rather than raw markup.
"""

from __future__ import annotations

from typing import List, Optional, Set

import structlog
from bs4 import Tag

from readquarry.extractor import dom
from readquarry.extractor.classifier import ElementClassifier
from readquarry.extractor.images import image_reference
from readquarry.extractor.models import BlockKind, ContentBlock
from readquarry.extractor.sanitizer import ContentSanitizer, clean_heading_text, clean_text

logger = structlog.get_logger(__name__)

_HEADINGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}
_CONTAINERS = {"blockquote": BlockKind.QUOTE, "ul": BlockKind.LIST, "ol": BlockKind.LIST, "table": BlockKind.TABLE}


class BlockBuilder:
    def __init__(self, classifier: ElementClassifier, sanitizer: Optional[ContentSanitizer] = None):
        self.classifier = classifier
        self.sanitizer = sanitizer or ContentSanitizer()

    def build(
        self,
        content: Optional[Tag],
        title: Optional[str] = None,
        skip: Optional[Tag] = None,
        base_url: Optional[str] = None,
    ) -> List[ContentBlock]:
        """
        Segment ``content`` into blocks in document order.

        Args:
            content: The located main content element.
            title: Page title; a heading repeating it is skipped.
            skip: An element already consumed elsewhere, such as the standfirst.
            base_url: Base for resolving relative image URLs.
        """
        if content is None:
            return []
        state = _BuildState(title=(title or "").strip().lower(), skip=skip, base_url=base_url)
        self._visit(content, state)
        logger.debug("content segmented", blocks=len(state.blocks))
        return state.blocks

    def _visit(self, node: Tag, state: "_BuildState") -> None:
        for child in node.children:
            if not isinstance(child, Tag):
                continue
            if child is state.skip or self.classifier.is_excluded(child):
                continue
            name = dom.tag_name(child)
            if name in _HEADINGS:
                self._heading(child, _HEADINGS[name], state)
            elif name == "p":
                self._paragraph(child, state)
            elif name == "img":
                self._image(child, state)
            elif name == "pre":
                code = child.get_text().strip("\n")
                if code.strip():
                    state.blocks.append(ContentBlock(BlockKind.CODE, text=code, html=self.sanitizer.sanitize(child)))
            elif name in _CONTAINERS:
                self._container(child, _CONTAINERS[name], state)
            else:
                self._visit(child, state)

    def _heading(self, el: Tag, level: int, state: "_BuildState") -> None:
        text = clean_heading_text(dom.text_of(el))
        key = text.lower()
        if not text or key == state.title or key in state.headings:
            return
        state.headings.add(key)
        state.blocks.append(ContentBlock(BlockKind.HEADING, text=text, html=self.sanitizer.sanitize(el), level=level))

    def _paragraph(self, el: Tag, state: "_BuildState") -> None:
        text = clean_text(dom.text_of(el))
        if text and not self.classifier.is_navigation_paragraph(el):
            state.blocks.append(ContentBlock(BlockKind.PARAGRAPH, text=text, html=self.sanitizer.sanitize(el)))
        for img in el.find_all("img"):
            self._image(img, state)

    def _image(self, img: Tag, state: "_BuildState") -> None:
        reference = image_reference(img, self.classifier, state.base_url)
        if reference is None or reference.is_decorative or reference.is_tracking:
            return
        key = dom.normalize_image_url(reference.url)
        if key in state.images:
            return
        state.images.add(key)
        state.blocks.append(ContentBlock(BlockKind.IMAGE, text=reference.caption or "", image=reference))

    def _container(self, el: Tag, kind: BlockKind, state: "_BuildState") -> None:
        if kind is BlockKind.LIST:
            items = [clean_text(dom.text_of(li)) for li in el.find_all("li", recursive=False)]
            text = "\n".join(item for item in items if item)
        else:
            text = clean_text(dom.text_of(el))
        if text:
            state.blocks.append(ContentBlock(kind, text=text, html=self.sanitizer.sanitize(el)))
        for img in el.find_all("img"):
            self._image(img, state)


class _BuildState:
    __slots__ = ("title", "skip", "base_url", "blocks", "headings", "images")

    def __init__(self, title: str, skip: Optional[Tag], base_url: Optional[str]):
        self.title = title
        self.skip = skip
        self.base_url = base_url
        self.blocks: List[ContentBlock] = []
        self.headings: Set[str] = set()
        self.images: Set[str] = set()
