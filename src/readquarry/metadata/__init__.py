"""
ReadQuarry Metadata Extraction Module

Components:
- MetadataExtractor: Title, author, date and standfirst coordinator
- AuthorExtractor: Byline and profile URL author identification
- DateExtractor: Publication date detection and normalization
"""

from .author_extractor import AuthorExtractor, author_from_url
from .date_extractor import DateExtractor, DateSource, normalize_date
from .metadata_extractor import MetadataExtractor, is_valid_title

__all__ = [
    # Main extractor
    "MetadataExtractor",
    "is_valid_title",
    # Author extraction
    "AuthorExtractor",
    "author_from_url",
    # Date extraction
    "DateExtractor",
    "DateSource",
    "normalize_date",
]
