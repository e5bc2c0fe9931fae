"""
Exceptions raised by ReadQuarry.

Extraction heuristics degrade to ``None`` or empty results instead of
raising; only caller mistakes surface as exceptions.
"""


class ReadQuarryError(Exception):
    """Base class for ReadQuarry errors."""

    pass


class PreconditionError(ReadQuarryError, ValueError):
    """Raised when an operation is called without a required input, such as a document root."""

    pass
