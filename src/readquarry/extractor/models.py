from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from bs4 import Tag


class ImageSource(Enum):
    """Where an image URL was found, in resolution priority order."""

    CURRENT_SRC = "current_src"
    SRC = "src"
    SRCSET = "srcset"
    PICTURE_SOURCE = "picture_source"
    LAZY_ATTRIBUTE = "lazy_attribute"
    PARENT_LINK = "parent_link"
    META = "meta"


class LocatorStrategy(Enum):
    ARTICLE = "article"
    MAIN = "main"
    SELECTOR = "selector"
    SCORED = "scored"


class BlockKind(Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    IMAGE = "image"
    QUOTE = "quote"
    LIST = "list"
    CODE = "code"
    TABLE = "table"


@dataclass(slots=True)
class Candidate:
    """An element under evaluation together with its measured features."""

    element: Tag
    text_length: int = 0
    paragraphs: int = 0
    headings: int = 0
    links: int = 0
    lists: int = 0
    images: int = 0
    score: float = 0.0


@dataclass(slots=True, frozen=True)
class ResolvedImage:
    url: str
    source: ImageSource


@dataclass(slots=True, frozen=True)
class ImageReference:
    """
    An image element paired with its resolved absolute URL.

    ``is_placeholder`` records that the element's own ``src`` was a
    placeholder, so the URL came from a lazy-loading source further down
    the resolution chain.
    """

    url: str
    source: ImageSource
    alt: str = ""
    caption: Optional[str] = None
    is_placeholder: bool = False
    is_tracking: bool = False
    is_decorative: bool = False

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("url must be non-empty")


@dataclass(slots=True, frozen=True)
class MetadataRecord:
    title: Optional[str] = None
    author: Optional[str] = None
    date: Optional[str] = None
    standfirst: Optional[str] = None

    def __post_init__(self) -> None:
        if self.date is not None and len(self.date) not in (4, 7, 10):
            raise ValueError(f"date must be YYYY, YYYY-MM or YYYY-MM-DD, got {self.date!r}")


@dataclass(slots=True, frozen=True)
class ContentBlock:
    """One readable unit of the located content, in document order."""

    kind: BlockKind
    text: str = ""
    html: str = ""
    level: int = 0
    image: Optional[ImageReference] = None

    def __post_init__(self) -> None:
        if self.kind is BlockKind.HEADING and not 1 <= self.level <= 6:
            raise ValueError("heading level must be between 1 and 6")
        if self.kind is BlockKind.IMAGE and self.image is None:
            raise ValueError("image blocks require an image reference")


@dataclass(slots=True, frozen=True)
class ExtractionResult:
    """
    Output of one pipeline run.

    Attributes:
        content_html: Sanitized markup of the located element, empty if none was found.
        metadata: Title, author, date and standfirst.
        images: Image references inside the located content, deduplicated by URL.
        blocks: Readable blocks of the located content.
        featured_image: Lead image of the page, if any.
        strategy: Locator strategy that produced the content.
    """

    content_html: str
    metadata: MetadataRecord = field(default_factory=MetadataRecord)
    images: Tuple[ImageReference, ...] = ()
    blocks: Tuple[ContentBlock, ...] = ()
    featured_image: Optional[ImageReference] = None
    strategy: Optional[LocatorStrategy] = None

    @property
    def found(self) -> bool:
        return self.strategy is not None

    @property
    def text(self) -> str:
        return "\n\n".join(block.text for block in self.blocks if block.text)
