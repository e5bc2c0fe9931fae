"""
Builders for small HTML documents used across the test suite.

Filler text carries no commas or terminal punctuation so that scorer
terms other than the one under test stay fixed.
"""

from bs4 import BeautifulSoup

_WORDS = "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor incididunt ut labore "


def filler(length: int) -> str:
    """Return exactly ``length`` characters of punctuation-free text with no outer whitespace."""
    if length <= 0:
        return ""
    text = (_WORDS * (length // len(_WORDS) + 1))[:length]
    if text[-1] == " ":
        text = text[:-1] + "x"
    return text


def paragraph(length: int) -> str:
    return f"<p>{filler(length)}</p>"


def document(body: str, head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


def parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")
