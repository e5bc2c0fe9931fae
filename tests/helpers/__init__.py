from .html import document, filler, paragraph, parse

__all__ = ["document", "filler", "paragraph", "parse"]
