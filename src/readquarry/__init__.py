"""
ReadQuarry - main-content extraction for parsed web pages.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config, ExtractionConfig
from .exceptions import PreconditionError, ReadQuarryError
from .pipeline import ExtractionPipeline

__all__ = ["__version__", "Config", "ExtractionConfig", "ExtractionPipeline", "PreconditionError", "ReadQuarryError"]
