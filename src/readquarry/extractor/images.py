"""
Image URL resolution, caption lookup and tracking-pixel detection.

Lazy-loading pages leave the real image address in any of a handful of
places. ``resolve_image`` walks them in a fixed priority order and returns
the first non-placeholder candidate together with the tier it came from.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, List, Optional, Tuple

import structlog
from bs4 import Tag

from readquarry.config.config import ExtractionConfig
from readquarry.extractor import dom
from readquarry.extractor.models import ImageReference, ImageSource, ResolvedImage

if TYPE_CHECKING:
    from readquarry.extractor.classifier import ElementClassifier

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG = ExtractionConfig()

_IMAGE_LINK = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg)(\?|$)", re.IGNORECASE)


def is_placeholder_url(url: Optional[str], config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    """True for empty URLs, tiny or transparent data URIs and known placeholder file names."""
    if not url:
        return True
    if url.startswith("data:image"):
        if "1x1" in url or "transparent" in url or len(url) < config.images.data_uri_min_length:
            return True
    lowered = url.lower()
    return any(pattern in lowered for pattern in config.patterns.placeholder_patterns)


def parse_srcset(srcset: Optional[str]) -> List[Tuple[str, Optional[float]]]:
    """Split a srcset into (url, descriptor) pairs; descriptor is None when absent or malformed."""
    entries: List[Tuple[str, Optional[float]]] = []
    if not srcset:
        return entries
    for part in srcset.split(","):
        tokens = part.strip().split()
        if not tokens:
            continue
        url = tokens[0]
        descriptor: Optional[float] = None
        if len(tokens) > 1:
            token = tokens[1].lower()
            try:
                if token.endswith("x"):
                    descriptor = float(token[:-1])
                elif token.endswith("w"):
                    descriptor = float(int(token[:-1]))
            except ValueError:
                descriptor = None
        entries.append((url, descriptor))
    return entries


def best_srcset_url(srcset: Optional[str], config: ExtractionConfig = DEFAULT_CONFIG) -> Optional[str]:
    """
    Pick the srcset entry with the largest descriptor.

    Placeholder entries are skipped. An entry without a descriptor is used
    only when no other entry has been chosen before it.
    """
    best_url: Optional[str] = None
    best_value = -1.0
    for url, descriptor in parse_srcset(srcset):
        if is_placeholder_url(url, config):
            continue
        if descriptor is None:
            if best_url is None:
                best_url = url
            continue
        if descriptor > best_value:
            best_value = descriptor
            best_url = url
    return best_url


def _lazy_candidate(img: Tag, config: ExtractionConfig) -> Optional[str]:
    for name in config.images.lazy_attributes:
        value = dom.attr(img, name).strip()
        if not value or "data:" in value:
            continue
        if name == "data-srcset":
            url = best_srcset_url(value, config)
            if url:
                return url
            continue
        if not is_placeholder_url(value, config):
            return value
    return None


def _picture_candidate(img: Tag, config: ExtractionConfig) -> Optional[str]:
    picture = dom.closest_tag(img, ["picture"])
    if picture is None:
        return None
    for source in picture.find_all("source"):
        url = best_srcset_url(dom.attr(source, "srcset"), config)
        if url:
            return url
    return None


def _link_candidate(img: Tag) -> Optional[str]:
    link = dom.closest(img, lambda node: dom.tag_name(node) == "a" and bool(dom.attr(node, "href")))
    if link is None:
        return None
    href = dom.attr(link, "href")
    if _IMAGE_LINK.search(href) or "image" in href.lower():
        return href
    return None


def resolve_image(
    img: Optional[Tag],
    config: ExtractionConfig = DEFAULT_CONFIG,
    base_url: Optional[str] = None,
) -> Optional[ResolvedImage]:
    """Resolve the best URL of an ``img`` element, or None when every source is a placeholder."""
    if dom.tag_name(img) != "img":
        return None

    # html.parser lowercases attribute names, so a serialized currentSrc arrives as currentsrc
    chain = (
        (ImageSource.CURRENT_SRC, lambda: dom.attr(img, "currentsrc").strip() or None),
        (ImageSource.SRC, lambda: dom.attr(img, "src").strip() or None),
        (ImageSource.SRCSET, lambda: best_srcset_url(dom.attr(img, "srcset"), config)),
        (ImageSource.PICTURE_SOURCE, lambda: _picture_candidate(img, config)),
        (ImageSource.LAZY_ATTRIBUTE, lambda: _lazy_candidate(img, config)),
        (ImageSource.PARENT_LINK, lambda: _link_candidate(img)),
    )
    for source, candidate in chain:
        url = candidate()
        if url and not is_placeholder_url(url, config):
            return ResolvedImage(url=dom.to_absolute_url(url, base_url), source=source)
    return None


def best_image_url(
    img: Optional[Tag], config: ExtractionConfig = DEFAULT_CONFIG, base_url: Optional[str] = None
) -> Optional[str]:
    resolved = resolve_image(img, config, base_url)
    return resolved.url if resolved else None


def is_tracking_pixel(img: Optional[Tag], config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    if dom.tag_name(img) != "img":
        return False
    width, height = dom.declared_size(img)
    if width is not None and height is not None:
        if width <= 1 and height <= 1:
            return True
        limit = config.images.tracking_pixel_max
        if dom.is_hidden(img) and width <= limit and height <= limit:
            return True
    # test the picture that will be used, not a lazy image's placeholder src
    url = (best_image_url(img, config) or dom.attr(img, "src")).lower()
    return any(pattern in url for pattern in config.patterns.tracking_patterns)


def image_caption(img: Optional[Tag], config: ExtractionConfig = DEFAULT_CONFIG) -> Optional[str]:
    """Caption text from the nearest figure, ARIA label, title, or adjacent caption element."""
    if img is None:
        return None
    alt = dom.attr(img, "alt").strip()

    figure = dom.closest_tag(img, ["figure"])
    if figure is not None:
        figcaption = figure.find("figcaption")
        text = dom.text_of(figcaption)
        if text:
            return text

    aria = dom.attr(img, "aria-label").strip()
    if aria:
        return aria

    title = dom.attr(img, "title").strip()
    if title and title != alt:
        return title

    sibling = img.find_next_sibling()
    if sibling is not None:
        caption_class = any(name in dom.class_name(sibling).lower() for name in config.images.caption_classes)
        if dom.tag_name(sibling) == "p" or caption_class:
            text = dom.text_of(sibling)
            if text:
                return text

    parent = img.parent
    if dom.is_element(parent):
        holder = dom.select_one(parent, '.caption, .image-caption, .photo-caption, [class*="caption"]')
        text = dom.text_of(holder)
        if text and text != alt:
            return text
    return None


def featured_image(
    root: Optional[Tag],
    content: Optional[Tag],
    config: ExtractionConfig = DEFAULT_CONFIG,
    base_url: Optional[str] = None,
) -> Optional[ImageReference]:
    """
    The page's lead image: social-card meta first, otherwise the first large
    image in the located content.
    """
    for selector in config.selectors.featured_image:
        node = dom.select_one(root, selector)
        if node is None:
            continue
        url = dom.attr(node, "content") or dom.attr(node, "src") or dom.attr(node, "href")
        lowered = url.lower()
        if not url or "logo" in lowered or "icon" in lowered:
            continue
        absolute = dom.to_absolute_url(url, base_url)
        logger.debug("featured image from meta", selector=selector, url=absolute)
        return ImageReference(url=absolute, source=ImageSource.META)

    if content is None:
        return None
    for img in content.find_all("img"):
        width, height = dom.dimensions(img)
        if width < config.images.featured_min_width and height < config.images.featured_min_height:
            continue
        resolved = resolve_image(img, config, base_url)
        if resolved is None or is_tracking_pixel(img, config):
            continue
        return ImageReference(
            url=resolved.url,
            source=resolved.source,
            alt=dom.attr(img, "alt").strip(),
            caption=image_caption(img, config),
        )
    return None


def image_reference(
    img: Optional[Tag],
    classifier: "ElementClassifier",
    base_url: Optional[str] = None,
) -> Optional[ImageReference]:
    """Build a reference for ``img`` with its flags, or None when no usable URL resolves."""
    config = classifier.config
    resolved = resolve_image(img, config, base_url)
    if resolved is None:
        return None
    return ImageReference(
        url=resolved.url,
        source=resolved.source,
        alt=dom.attr(img, "alt").strip(),
        caption=image_caption(img, config),
        is_placeholder=is_placeholder_url(dom.attr(img, "src"), config),
        is_tracking=is_tracking_pixel(img, config),
        is_decorative=classifier.is_decorative_image(img),
    )


def collect_images(
    content: Optional[Tag],
    classifier: "ElementClassifier",
    base_url: Optional[str] = None,
) -> List[ImageReference]:
    """Image references in document order, one per normalized URL."""
    if content is None:
        return []
    seen = set()
    references: List[ImageReference] = []
    for img in content.find_all("img"):
        reference = image_reference(img, classifier, base_url)
        if reference is None:
            continue
        key = dom.normalize_image_url(reference.url)
        if key in seen:
            continue
        seen.add(key)
        references.append(reference)
    return references
