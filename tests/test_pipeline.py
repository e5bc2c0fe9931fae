"""
End-to-end tests for ExtractionPipeline over complete pages.
"""

import pytest

from readquarry import ExtractionPipeline, PreconditionError
from readquarry.extractor import BlockKind, ContentLocator, ImageSource, LocatorStrategy, Sanitizer
from tests.helpers import document, parse

BASE = "https://news.example.com/2024/03/floods"
TINY_GIF = "data:image/gif;base64,R0lGODlhAQABAAAAACw="

LEDE = "Residents woke to flooded streets after a night of record rain across the valley"
FIRST = (
    "Rain fell for eleven hours without a break and the river rose faster than at any time "
    "since records began in the town more than a century ago and emergency crews worked "
    "through the night moving families from low lying streets to the school hall on the hill "
    "where volunteers handed out blankets and hot drinks until the early hours"
)
SECOND = (
    "Engineers will inspect the old stone bridge once the water drops and the council expects "
    "to reopen the main road within days while the weather service warns that more heavy rain "
    "is likely over the weekend and asks residents to keep sandbags in place"
)

PAGE = document(
    "<header><nav><a href=\"/\">Home</a> <a href=\"/world\">World</a></nav></header>"
    "<article>"
    "<h1>Flood Warnings Issued</h1>"
    f'<p class="standfirst">{LEDE}</p>'
    '<div class="byline"><img src="/authors/jane.jpg" alt="Jane Doe" width="60" height="60"><span>By Jane Doe</span></div>'
    f"<p>{FIRST}</p>"
    f'<figure><img src="{TINY_GIF}" data-src="/photos/river.jpg" alt="The river" width="1200" height="800">'
    "<figcaption>The river at noon</figcaption></figure>"
    "<h2>What happens next</h2>"
    f'<p onclick="track()">{SECOND}<a href="#fn1">1</a></p>'
    '<div class="share-buttons"><a href="/share">Share this</a></div>'
    "<script>track()</script>"
    '<img src="/pixel.gif" width="1" height="1">'
    "</article>"
    '<aside class="related"><article><p>Another story</p></article></aside>',
    head=(
        "<title>Flood Warnings Issued | Valley Times</title>"
        '<meta property="og:image" content="/images/lead.jpg">'
        '<meta name="author" content="Jane Doe">'
        '<meta property="article:published_time" content="2024-03-05T08:00:00Z">'
    ),
)


@pytest.mark.integration
class TestFullPage:
    @pytest.fixture
    def result(self, pipeline):
        return pipeline.extract(parse(PAGE), BASE)

    def test_strategy(self, result):
        assert result.strategy is LocatorStrategy.ARTICLE
        assert result.found

    def test_metadata(self, result):
        assert result.metadata.title == "Flood Warnings Issued"
        assert result.metadata.author == "Jane Doe"
        assert result.metadata.date == "2024-03-05"
        assert result.metadata.standfirst == LEDE

    def test_featured_image(self, result):
        assert result.featured_image.url == "https://news.example.com/images/lead.jpg"
        assert result.featured_image.source is ImageSource.META

    def test_images(self, result):
        author, river = result.images
        assert author.url == "https://news.example.com/authors/jane.jpg"
        assert author.is_decorative

        assert river.url == "https://news.example.com/photos/river.jpg"
        assert river.source is ImageSource.LAZY_ATTRIBUTE
        assert river.is_placeholder
        assert not river.is_decorative
        assert river.caption == "The river at noon"
        assert river.alt == "The river"

    def test_content_html(self, result):
        html = result.content_html
        assert "<h1>Flood Warnings Issued</h1>" in html
        assert FIRST in html
        for removed in ("<script", "onclick", 'href="#fn1"', "width=", "data-src"):
            assert removed not in html

    def test_blocks(self, result):
        assert [block.kind for block in result.blocks] == [
            BlockKind.PARAGRAPH,
            BlockKind.IMAGE,
            BlockKind.HEADING,
            BlockKind.PARAGRAPH,
        ]
        assert result.blocks[0].text == FIRST
        assert result.blocks[1].image.url == "https://news.example.com/photos/river.jpg"
        assert result.blocks[2].text == "What happens next"
        assert result.text.startswith(FIRST)


@pytest.mark.integration
class TestPipelineContract:
    def test_missing_root(self, pipeline):
        with pytest.raises(PreconditionError):
            pipeline.extract(None)

    def test_missing_html(self, pipeline):
        with pytest.raises(PreconditionError):
            pipeline.extract_html(None)

    def test_no_content(self, pipeline):
        result = pipeline.extract(parse(document("<p>Short</p>")), BASE)
        assert result.content_html == ""
        assert result.strategy is None
        assert not result.found
        assert result.images == ()
        assert result.blocks == ()
        assert result.metadata.title is None

    def test_extract_html(self, pipeline):
        result = pipeline.extract_html(PAGE, BASE)
        assert result.metadata.title == "Flood Warnings Issued"
        assert result.strategy is LocatorStrategy.ARTICLE

    def test_tree_not_mutated(self, pipeline):
        soup = parse(PAGE)
        before = str(soup)
        pipeline.extract(soup, BASE)
        assert str(soup) == before

    def test_deterministic(self, pipeline):
        assert pipeline.extract(parse(PAGE), BASE) == pipeline.extract(parse(PAGE), BASE)

    def test_default_collaborators_satisfy_protocols(self, pipeline):
        assert isinstance(pipeline.locator, ContentLocator)
        assert isinstance(pipeline.sanitizer, Sanitizer)

    def test_custom_collaborators(self):
        class FixedLocator:
            def locate_with_strategy(self, root):
                return root.select_one("#chosen"), LocatorStrategy.SELECTOR

        class UpperSanitizer:
            def sanitize(self, element):
                return element.get_text().upper() if element is not None else ""

        pipeline = ExtractionPipeline(locator=FixedLocator(), sanitizer=UpperSanitizer())
        result = pipeline.extract(parse(document('<div id="chosen"><p>Tiny bit</p></div>')))
        assert result.strategy is LocatorStrategy.SELECTOR
        assert result.content_html == "TINY BIT"
        assert [block.text for block in result.blocks] == ["Tiny bit"]


@pytest.mark.integration
class TestLazyImages:
    def test_placeholder_src_does_not_hide_photo(self, pipeline):
        page = document(
            f"<article><p>{FIRST}</p>"
            '<img src="/assets/pixel-placeholder.png" data-src="/photos/river.jpg" alt="River">'
            f"<p>{SECOND}</p></article>"
        )
        result = pipeline.extract(parse(page), BASE)

        (river,) = result.images
        assert river.url == "https://news.example.com/photos/river.jpg"
        assert river.is_placeholder
        assert not river.is_tracking
        assert not river.is_decorative

        image_blocks = [block for block in result.blocks if block.kind is BlockKind.IMAGE]
        assert [block.image.url for block in image_blocks] == ["https://news.example.com/photos/river.jpg"]
