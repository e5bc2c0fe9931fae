"""
Unit tests for author extraction and profile URL name reconstruction.
"""

import pytest

from readquarry.metadata import AuthorExtractor, author_from_url
from tests.helpers import document, parse


class TestAuthorFromUrl:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("/profile/jane-doe", "Jane Doe"),
            ("https://example.com/author/john_smith/", "John Smith"),
            ("/profile/janeDoe", "Jane Doe"),
            ("https://www.theguardian.com/profile/susannarustin", "Susanna Rustin"),
            ("/profile/bob", "Bob"),
            ("/profile/jsmith", "Jsmith"),
            ("/profile/abcdefghijkl", "Abcdef Ghijkl"),
            ("/author/mary-ann-evans?ref=byline", "Mary Ann Evans"),
        ],
    )
    def test_names(self, url, expected):
        assert author_from_url(url) == expected

    @pytest.mark.parametrize("url", [None, "", "/profile/ab", "/about/", "https://example.com/news/story"])
    def test_no_name(self, url):
        assert author_from_url(url) is None


class TestAuthorExtractor:
    @pytest.fixture
    def extractor(self, config):
        return AuthorExtractor(config)

    def test_meta_author(self, extractor):
        soup = parse(document('<span class="byline">By Someone Else</span>', head='<meta name="author" content="Jane Doe">'))
        assert extractor.extract(soup) == "Jane Doe"

    def test_byline_prefix_removed(self, extractor):
        assert extractor.extract(parse(document('<div class="byline">By Jane Doe</div>'))) == "Jane Doe"

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Written by: Sam Lee", "Sam Lee"),
            ("автор: Иван Петров", "Иван Петров"),
            ("von Klaus Weber", "Klaus Weber"),
            ("  Dana   Scully ", "Dana Scully"),
        ],
    )
    def test_prefixes(self, extractor, text, expected):
        assert extractor.extract(parse(document(f'<span class="author">{text}</span>'))) == expected

    def test_empty_author_link_uses_profile_url(self, extractor):
        soup = parse(document('<a rel="author" href="/profile/jane-doe"></a>'))
        assert extractor.extract(soup) == "Jane Doe"

    def test_author_container_with_profile_link(self, extractor):
        soup = parse(document('<div class="author"><a href="/author/john_smith"><img src="/j.jpg"></a></div>'))
        assert extractor.extract(soup) == "John Smith"

    def test_url_valued_meta_skipped(self, extractor):
        soup = parse(
            document(
                '<span class="byline">By Ann Lee</span>',
                head='<meta name="author" content="https://facebook.com/janedoe">',
            )
        )
        assert extractor.extract(soup) == "Ann Lee"

    def test_article_byline_fallback(self, extractor):
        soup = parse(document("<article><h1>Headline</h1><p>By Maria Lopez</p><p>Body text.</p></article>"))
        assert extractor.extract(soup) == "Maria Lopez"

    def test_lowercase_by(self, extractor):
        soup = parse(document("<article><p>by Maria Lopez</p></article>"))
        assert extractor.extract(soup) == "Maria Lopez"

    def test_no_author(self, extractor):
        assert extractor.extract(parse(document("<article><p>Body text only.</p></article>"))) is None
        assert extractor.extract(None) is None

    def test_clean_name(self, extractor):
        assert extractor.clean_name("By  Jane Doe, ") == "Jane Doe"
        assert extractor.clean_name("www.example.com/jane") is None
        assert extractor.clean_name("x" * 120) is None
        assert extractor.clean_name(None) is None
