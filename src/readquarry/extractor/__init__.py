"""
ReadQuarry Content Extraction Module

Locates the main readable content of a parsed page and cleans it:
1. Locator: article, main, known selectors, then weighted scored search
2. Scorer: deterministic weighted content score per candidate element
3. Classifier: ordered rule lists for exclusion and decorative images
4. Images: priority-chain URL resolution for lazy-loaded images
5. Sanitizer: single-pass clone-and-clean of the located element
"""

from .blocks import BlockBuilder
from .classifier import ElementClassifier, Rule, RuleOutcome, first_match
from .images import (
    best_image_url,
    best_srcset_url,
    collect_images,
    featured_image,
    image_caption,
    is_placeholder_url,
    is_tracking_pixel,
    resolve_image,
)
from .locator import MainContentLocator
from .models import (
    BlockKind,
    Candidate,
    ContentBlock,
    ExtractionResult,
    ImageReference,
    ImageSource,
    LocatorStrategy,
    MetadataRecord,
    ResolvedImage,
)
from .protocols import ContentLocator, Sanitizer
from .sanitizer import ContentSanitizer, clean_heading_text, clean_text
from .scorer import ContentScorer, TextLengthCache

__all__ = [
    "BlockBuilder",
    "BlockKind",
    "Candidate",
    "ContentBlock",
    "ContentLocator",
    "ContentSanitizer",
    "ContentScorer",
    "ElementClassifier",
    "ExtractionResult",
    "ImageReference",
    "ImageSource",
    "LocatorStrategy",
    "MainContentLocator",
    "MetadataRecord",
    "ResolvedImage",
    "Rule",
    "RuleOutcome",
    "Sanitizer",
    "TextLengthCache",
    "best_image_url",
    "best_srcset_url",
    "clean_heading_text",
    "clean_text",
    "collect_images",
    "featured_image",
    "first_match",
    "image_caption",
    "is_placeholder_url",
    "is_tracking_pixel",
    "resolve_image",
]
