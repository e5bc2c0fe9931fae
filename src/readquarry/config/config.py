"""
Configuration management for ReadQuarry using Pydantic.

Every pattern table and threshold used by the extraction heuristics lives
here. Components receive an ``ExtractionConfig`` explicitly; the defaults
below are tuned values, not invariants.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class ContentThresholds(BaseModel):
    """Text-length thresholds shared by the locator and metadata extraction."""

    min_content_length: int = Field(default=100, ge=0, description="Minimum text length of a content candidate.")
    substantial_content_length: int = Field(
        default=500, ge=0, description="Text length an article or nested container must reach."
    )
    standfirst_min_length: int = 50
    standfirst_max_length: int = 500
    standfirst_paragraph_max_length: int = 200
    navigation_text_max_length: int = 200
    short_link_text_length: int = 100


class ScoringConfig(BaseModel):
    """Weights and multipliers of the content scorer, applied in a fixed order."""

    paragraph_weight: float = 10.0
    heading_weight: float = 5.0
    text_length_divisor: float = 100.0
    text_length_cap: float = 50.0
    # (threshold, multiplier) pairs, checked from the highest threshold down
    link_density_penalties: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(1.0, 0.5), (0.7, 0.75), (0.5, 0.9)]
    )
    comma_bonuses: List[Tuple[int, float]] = Field(default_factory=lambda: [(10, 1.2), (5, 1.1)])
    sentence_threshold: int = 5
    sentence_weight: float = 2.0
    sentence_cap: float = 30.0
    tag_multipliers: Dict[str, float] = Field(default_factory=lambda: {"article": 2.0, "main": 1.5})
    section_multiplier: float = 1.2
    section_min_paragraphs: int = 3
    content_like_bonus: float = 100.0
    short_text_penalties: List[Tuple[int, float]] = Field(default_factory=lambda: [(100, 0.5), (200, 0.8)])
    # (lists-per-paragraph ratio, paragraph ceiling, multiplier)
    list_penalties: List[Tuple[float, int, float]] = Field(default_factory=lambda: [(3.0, 3, 0.6), (2.0, 5, 0.8)])
    newsletter_penalty: float = 1000.0
    email_input_penalty: float = 50.0
    marketing_penalty: float = 500.0
    image_weight: float = 3.0
    image_bonus_cap: float = 20.0
    max_images: int = 20
    long_paragraph_length: int = 200
    long_paragraph_min_count: int = 3
    long_paragraph_weight: float = 5.0

    @field_validator("link_density_penalties", "comma_bonuses")
    @classmethod
    def sort_descending(cls, v: List[Tuple]) -> List[Tuple]:
        """Greater-than tables are evaluated first-match, highest threshold first."""
        return sorted(v, key=lambda pair: pair[0], reverse=True)

    @field_validator("short_text_penalties")
    @classmethod
    def sort_ascending(cls, v: List[Tuple[int, float]]) -> List[Tuple[int, float]]:
        """Less-than tables are evaluated first-match, lowest threshold first."""
        return sorted(v, key=lambda pair: pair[0])


class LocatorConfig(BaseModel):
    """Acceptance rules of the main content locator."""

    early_exit_score: float = Field(default=100.0, description="Scored search stops at the first candidate above this.")
    min_score: float = Field(default=0.0, description="The best scored candidate is returned only above this.")
    candidate_tags: List[str] = Field(default_factory=lambda: ["div", "article", "main", "section"])
    max_candidates: int = Field(default=5000, ge=1, description="Upper bound on elements scored per call.")

    @model_validator(mode="after")
    def check_score_order(self) -> "LocatorConfig":
        if self.min_score >= self.early_exit_score:
            raise ValueError("min_score must be below early_exit_score")
        return self


class SelectorConfig(BaseModel):
    """Ordered CSS selector lists. Order is significant: first hit wins."""

    content: List[str] = Field(
        default_factory=lambda: [
            '[role="main"]',
            ".article-content",
            ".post-content",
            ".entry-content",
            ".content",
            ".post-body",
            ".article-body",
            ".entry-body",
            "#content",
            "#main-content",
            "#article-content",
            ".wp-block-post-content",
            ".entry",
            ".post",
            ".prose",
            ".article-text",
            ".story-body",
            ".article-body-content",
            ".wysiwyg",
            ".wysiwyg--all-content",
            "#root",
            "#app",
            "#__next",
            "[data-reactroot]",
            "[ng-app]",
            "[data-vue-app]",
            ".notion-page-content",
            ".notion-page",
            '[class*="article"]',
            '[class*="content"]',
            '[id*="article"]',
            '[id*="content"]',
        ]
    )
    nested_in_main: List[str] = Field(
        default_factory=lambda: [
            ".wysiwyg",
            ".wysiwyg--all-content",
            ".article-content",
            ".post-content",
            ".entry-content",
            ".article-body",
            ".post-body",
        ]
    )
    nested_in_match: List[str] = Field(
        default_factory=lambda: [
            ".wysiwyg",
            ".wysiwyg--all-content",
            ".article-content",
            ".post-content",
            ".entry-content",
        ]
    )
    spa_roots: List[str] = Field(
        default_factory=lambda: [
            "#root",
            "#app",
            "#__next",
            "[data-reactroot]",
            "[ng-app]",
            "[data-vue-app]",
            ".notion-page-content",
            ".notion-page",
        ],
        description="Single-page-app mount points, scored even when they are not block containers.",
    )
    standfirst: List[str] = Field(
        default_factory=lambda: [
            ".standfirst",
            ".subtitle",
            ".deck",
            ".lede",
            ".intro",
            ".article__subhead",
            '[class*="standfirst"]',
            '[class*="subtitle"]',
            '[class*="deck"]',
            '[class*="intro"]',
            '[class*="summary"]',
            '[class*="subhead"]',
        ]
    )
    author: List[str] = Field(
        default_factory=lambda: [
            'meta[name="author"]',
            'meta[name="citation_author"]',
            'meta[property="article:author"]',
            '[rel="author"]',
            ".author",
            ".byline",
            ".meta-author",
            ".meta-text.meta-author",
            '[itemprop="author"]',
            'a[rel="author"]',
            'a[href*="/author/"]',
            'a[href*="/profile/"]',
        ]
    )
    date: List[str] = Field(
        default_factory=lambda: [
            'meta[property="article:published_time"]',
            'meta[name="datePublished"]',
            'meta[name="date"]',
            'meta[name="citation_date"]',
            "time[datetime]",
            "time[pubdate]",
            '[itemprop="datePublished"]',
            ".published",
            ".date",
            ".meta-date",
            ".meta-text.meta-date",
            "span.meta-date",
        ]
    )
    featured_image: List[str] = Field(
        default_factory=lambda: [
            'meta[property="og:image"]',
            'meta[name="twitter:image"]',
            'meta[property="article:image"]',
            'meta[name="image"]',
            '[itemprop="image"]',
        ]
    )

    @field_validator("content", "nested_in_main", "nested_in_match")
    @classmethod
    def not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("selector lists must not be empty")
        return v


class PatternConfig(BaseModel):
    """Class, id and text pattern tables used by the element classifier."""

    content_indicators: List[str] = Field(
        default_factory=lambda: ["article", "content", "post", "entry", "main", "story", "text"]
    )
    excluded_classes: List[str] = Field(
        default_factory=lambda: [
            "nav",
            "navigation",
            "menu",
            "sidebar",
            "footer",
            "header",
            "ad",
            "advertisement",
            "ads",
            "sponsor",
            "sponsored",
            "advert",
            "comment",
            "comments",
            "discussion",
            "thread",
            "disqus",
            "related",
            "related-posts",
            "related-articles",
            "recommended",
            "also-in",
            "social",
            "share",
            "share-buttons",
            "author-bio",
            "author-info",
            "about-author",
            "post-navigation",
            "prev",
            "next",
            "previous",
            "read-more",
            "subscribe",
            "paywall",
            "gate",
            "newsletter",
            "newsletter-signup",
            "support",
            "donate",
            "donation",
            "corrections",
            "you-might-also-like",
            "more-in",
            "next-article",
            "comment-section",
            "book-cta",
            "course-cta",
            "product-cta",
            "course-ad",
            "product-ad",
            "content-tabs",
            "useful-resources",
            "further-reading",
            "component-share-buttons",
            "font-adjust",
            "accordion",
            "entry-wrapper",
            "breadcrumb",
            "breadcrumbs",
            "promo",
            "cookie",
            "banner",
            "popup",
            "modal",
        ]
    )
    paywall_classes: List[str] = Field(
        default_factory=lambda: [
            "freebie-message",
            "subscribe-text",
            "message--freebie",
            "subscribe-",
            "paywall",
            "subscription",
            "freebie",
            "article-limit",
            "access-message",
        ]
    )
    ad_classes: List[str] = Field(default_factory=lambda: ["book-cta", "course-cta", "product-cta", "course-ad", "product-ad"])
    excluded_ancestor_tags: List[str] = Field(default_factory=lambda: ["aside", "nav", "footer"])
    # every phrase of a group must occur for the group to match
    newsletter_phrase_groups: List[List[str]] = Field(
        default_factory=lambda: [
            ["get the latest", "inbox"],
            ["email powered by"],
            ["salesforce marketing cloud"],
            ["marketing cloud"],
        ]
    )
    subscribe_phrases: List[str] = Field(
        default_factory=lambda: ["newsletter", "subscribe", "get the latest", "inbox", "marketing cloud"]
    )
    marketing_phrases: List[str] = Field(default_factory=lambda: ["marketing cloud", "salesforce"])
    navigation_starts: List[str] = Field(
        default_factory=lambda: [
            "read more",
            "continue reading",
            "see also",
            "related:",
            "more from",
            "next article",
            "previous article",
            "back to top",
            "share this",
            "follow us",
            "sign up",
            "subscribe",
            "advertisement",
            "sponsored",
            "читать далее",
            "подробнее",
            "weiterlesen",
            "lire la suite",
            "leer más",
        ]
    )
    paywall_phrases: List[str] = Field(
        default_factory=lambda: [
            "subscribe to continue",
            "subscribe to read",
            "become a member",
            "already a subscriber",
            "sign in to continue",
            "log in to continue",
            "this article is for subscribers",
            "unlock this article",
            "free articles remaining",
            "you have reached your limit",
            "start your free trial",
            "support our journalism",
        ]
    )
    metadata_line_patterns: List[str] = Field(
        default_factory=lambda: [
            r"^\s*\d[\d,]*\s+words?\b",
            r"^\s*edited by\b",
            r"^\s*original article\s*•",
            r"^\s*\d+\s+min(?:ute)?s?\s+read\s*$",
        ]
    )
    section_heading_labels: List[str] = Field(
        default_factory=lambda: ["tags", "related", "more from", "from the archive", "share this article"]
    )
    author_photo_classes: List[str] = Field(
        default_factory=lambda: ["headshot", "author-photo", "author-image", "author-avatar", "byline-image", "contributor-photo"]
    )
    author_containers: List[str] = Field(
        default_factory=lambda: ["contributor", "byline", "author-info", "author", "address", "vcard"]
    )
    facepile_containers: List[str] = Field(
        default_factory=lambda: ["facepile", "likes", "restacks", "engagement", "reactions", "avatars"]
    )
    social_containers: List[str] = Field(default_factory=lambda: ["social", "share", "icon", "logo"])
    logo_alt_keywords: List[str] = Field(default_factory=lambda: ["logo", "icon", "brand", "social", "share", "button"])
    logo_patterns: List[str] = Field(
        default_factory=lambda: [
            "logo",
            "brand",
            "icon",
            "badge",
            "watermark",
            "sprite",
            "spacer",
            "blank",
            "clear",
            "pixel",
            "youtube",
            "facebook",
            "twitter",
            "instagram",
            "linkedin",
            "pinterest",
            "rss",
            "social-media",
            "social-icon",
            "share-icon",
            "share-button",
            "arrow",
            "chevron",
            "bullet",
            "dot",
            "gradient",
            "bg",
            "background",
            "shadow",
            "border",
            "divider",
            "line",
            "separator",
            "spinner",
            "loader",
            "loading",
            "placeholder",
            "default",
            "avatar",
            "user",
            "profile",
            "gravatar",
            "data:image/gif;base64,r0lgodlh",
            "data:image/png;base64,ivborw0kggo",
        ]
    )
    tracking_patterns: List[str] = Field(
        default_factory=lambda: ["pixel", "tracking", "beacon", "analytics", "facebook.com/tr", "doubleclick", "googleads"]
    )
    placeholder_patterns: List[str] = Field(
        default_factory=lambda: ["placeholder", "spacer", "blank", "1x1", "pixel.gif"]
    )
    related_card_classes: List[str] = Field(default_factory=lambda: ["card", "gc--type-post"])
    related_ancestor_classes: List[str] = Field(default_factory=lambda: ["related", "sidebar"])
    invalid_titles: List[str] = Field(default_factory=lambda: ["home", "about", "contact", "blog", "news", "archive"])
    standfirst_starters: List[str] = Field(
        default_factory=lambda: [
            "the",
            "a",
            "an",
            "in",
            "on",
            "at",
            "when",
            "where",
            "why",
            "how",
            "what",
            "this",
            "that",
            "these",
            "those",
        ]
    )
    byline_prefixes: List[str] = Field(
        default_factory=lambda: ["by", "written by", "von", "par", "por", "da", "di", "от", "автор:"]
    )


class ImageConfig(BaseModel):
    """Pixel thresholds for image heuristics."""

    featured_min_width: int = 400
    featured_min_height: int = 300
    author_photo_max: int = 250
    author_photo_small: int = 150
    author_square_tolerance: int = 50
    tracking_pixel_max: int = 3
    small_icon_max: int = 50
    very_small_image: int = 100
    data_uri_min_length: int = 100
    lazy_attributes: List[str] = Field(
        default_factory=lambda: [
            "data-src",
            "data-lazy-src",
            "data-original",
            "data-lazy",
            "data-full-src",
            "data-high-res",
            "data-srcset",
            "data-original-src",
        ]
    )
    caption_classes: List[str] = Field(default_factory=lambda: ["caption", "image-caption", "photo-caption"])


class ExtractionConfig(BaseModel):
    """All tunables of the extraction pipeline. ``ExtractionConfig()`` is the default instance."""

    thresholds: ContentThresholds = Field(default_factory=ContentThresholds)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    locator: LocatorConfig = Field(default_factory=LocatorConfig)
    selectors: SelectorConfig = Field(default_factory=SelectorConfig)
    patterns: PatternConfig = Field(default_factory=PatternConfig)
    images: ImageConfig = Field(default_factory=ImageConfig)


class MonitoringConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")
    json_logs: bool = Field(default=False, description="Render console logs as JSON.")

    @field_validator("log_level")
    @classmethod
    def check_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


class Config(BaseSettings):
    project_name: str = "ReadQuarry"
    version: str = "0.1.0"
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="READQUARRY_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file(directory: Path | None = None) -> Path | None:
    current_dir = directory or Path.cwd()
    paths_to_check = [
        current_dir / "readquarry.yaml",
        current_dir / "readquarry.yml",
        current_dir / "config.yaml",
        current_dir / "config.yml",
    ]
    for path in paths_to_check:
        if path.exists():
            return path
    return None


def load_config(path: Path | None = None) -> Config:
    """Load configuration from ``path`` or a discovered file, falling back to defaults."""
    config_path = path or find_config_file()
    if config_path is None:
        log.info("No configuration file found. Using default settings.")
        return Config()
    try:
        log.info("Loading configuration from: %s", config_path)
        return Config.from_yaml(config_path)
    except (ValidationError, FileNotFoundError, yaml.YAMLError) as e:
        log.error(
            "Failed to load or validate configuration from '%s': %s. "
            "Falling back to default settings. Please check your config file.",
            config_path,
            e,
            exc_info=log.getEffectiveLevel() <= logging.DEBUG,
        )
        return Config()
