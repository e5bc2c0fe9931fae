"""
Unit tests for element accessors and tree utilities.
"""

import pytest

from readquarry.extractor import dom
from tests.helpers import parse


class TestAccessors:
    """Typed accessors never raise on missing data."""

    def test_multi_valued_class_is_joined(self):
        el = parse('<div class="post  body"></div>').div
        assert dom.class_name(el) == "post body"

    def test_missing_attributes_are_empty(self):
        el = parse("<div></div>").div
        assert dom.attr(el, "href") == ""
        assert dom.element_id(el) == ""
        assert dom.class_and_id(el) == ""
        assert dom.attr(None, "href") == ""

    def test_class_and_id_are_lower_cased(self):
        el = parse('<div class="Main-Content" id="Story"></div>').div
        assert dom.class_and_id(el) == "main-content story"

    def test_dimensions_from_attributes(self):
        img = parse('<img src="a.jpg" width="640" height="480">').img
        assert dom.dimensions(img) == (640, 480)

    def test_dimensions_from_inline_style(self):
        img = parse('<img src="a.jpg" style="width: 32px; height:32px">').img
        assert dom.dimensions(img) == (32, 32)

    def test_unknown_dimensions(self):
        img = parse('<img src="a.jpg" width="auto">').img
        assert dom.declared_size(img) == (None, None)
        assert dom.dimensions(img) == (0, 0)

    @pytest.mark.parametrize(
        "markup",
        [
            '<div style="display: none">x</div>',
            '<div style="visibility:hidden">x</div>',
            "<div hidden>x</div>",
            '<div aria-hidden="true">x</div>',
        ],
    )
    def test_hidden_elements(self, markup):
        assert dom.is_hidden(parse(markup).div)

    def test_visible_element(self):
        assert not dom.is_hidden(parse('<div style="color: red">x</div>').div)

    def test_ancestors_stop_below_document(self):
        soup = parse("<html><body><div><p>x</p></div></body></html>")
        names = [dom.tag_name(el) for el in dom.ancestors(soup.p)]
        assert names == ["div", "body", "html"]

    def test_ancestors_respect_depth(self):
        soup = parse("<html><body><div><p>x</p></div></body></html>")
        assert [dom.tag_name(el) for el in dom.ancestors(soup.p, max_depth=1)] == ["div"]

    def test_invalid_selector_yields_nothing(self):
        soup = parse("<div></div>")
        assert dom.select_one(soup, "div[[") is None
        assert dom.select(soup, "div[[") == []


class TestFootnoteLinks:
    @pytest.mark.parametrize(
        "markup",
        [
            '<a href="#fn1">1</a>',
            '<a href="#fn1"> 12 </a>',
            '<a href="#ref">↩</a>',
            '<a href="https://example.com/post#note-3">3</a>',
            '<a href="#back"><img src="/e.png" alt="↩"></a>',
            '<a href="#back"><img src="/emoji/arrow.png" alt="back"></a>',
        ],
    )
    def test_footnote_links(self, markup):
        assert dom.is_footnote_link(parse(markup).a)

    @pytest.mark.parametrize(
        "markup",
        [
            '<a href="/page">1</a>',
            '<a href="#section-two">Section two</a>',
            '<a href="#">   </a>',
            "<span>1</span>",
        ],
    )
    def test_not_footnote_links(self, markup):
        soup = parse(markup)
        assert not dom.is_footnote_link(soup.find(True))


class TestIcons:
    @pytest.mark.parametrize(
        "markup",
        [
            "<svg><path d='M0'/></svg>",
            '<span class="icon-star"></span>',
            '<i id="menu-icon"></i>',
            "<span>→</span>",
            "<sup>↩</sup>",
            "<sup>open these</sup>",
            '<img src="/x.png" alt="↩">',
            '<img src="/emoji/1f449.png" alt="arrow right">',
        ],
    )
    def test_icons(self, markup):
        assert dom.is_icon(parse(markup).find(True))

    @pytest.mark.parametrize(
        "markup",
        [
            "<span>Hello</span>",
            "<em>Important → point made at length</em>",
            '<img src="/photo.jpg" alt="A harbour at dawn">',
        ],
    )
    def test_not_icons(self, markup):
        assert not dom.is_icon(parse(markup).find(True))

    def test_arrow_sup(self):
        assert dom.is_arrow_sup(parse("<sup>↩</sup>").sup)
        assert not dom.is_arrow_sup(parse("<sup>2</sup>").sup)


class TestUrls:
    def test_normalize_drops_query_and_fragment(self):
        url = "https://cdn.example.com/img/a.jpg?w=300&h=200#frag"
        assert dom.normalize_image_url(url) == "https://cdn.example.com/img/a.jpg"

    def test_normalize_relative(self):
        assert dom.normalize_image_url("/img/a.jpg?v=2") == "/img/a.jpg"

    def test_normalize_keeps_data_uri(self):
        assert dom.normalize_image_url("data:image/png;base64,AAAA") == "data:image/png;base64,AAAA"

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://example.com/a.jpg", "https://example.com/a.jpg"),
            ("data:image/png;base64,AAAA", "data:image/png;base64,AAAA"),
            ("/img/a.jpg", "https://news.example.com/img/a.jpg"),
            ("b.jpg", "https://news.example.com/2024/b.jpg"),
            ("//cdn.example.com/c.jpg", "https://cdn.example.com/c.jpg"),
            ("", ""),
        ],
    )
    def test_to_absolute_url(self, url, expected):
        assert dom.to_absolute_url(url, "https://news.example.com/2024/story") == expected

    def test_to_absolute_url_without_base(self):
        assert dom.to_absolute_url("/img/a.jpg", None) == "/img/a.jpg"
