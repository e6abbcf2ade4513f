"""
Unit tests for the shared BeautifulSoup selector cascades.
"""

import pytest

from postharvest.extractor.collector import MediaCollector
from postharvest.extractor.models import PLACEHOLDER_TEXT, MediaKind
from postharvest.extractor.soup_extractor import PostSoupParser, clean_text, format_duration
from tests.helpers.pages import FIRST_IMAGE, OG_IMAGE, POST_DOCUMENT, POST_HTML, POST_URL, POST_VIDEO, SECOND_IMAGE


@pytest.fixture
def parser(classifier):
    return PostSoupParser(classifier, PLACEHOLDER_TEXT)


class TestHelpers:
    def test_clean_text_collapses_whitespace_keeps_paragraphs(self):
        assert clean_text("  Hello \t  world \n\n\n\n Second   line ") == "Hello world\n\nSecond line"

    @pytest.mark.parametrize(
        "value,expected",
        [("165", "2:45"), ("3725", "1:02:05"), ("59.9", "0:59"), ("Live", "Live"), (None, "Unknown"), ("-3", "Unknown")],
    )
    def test_format_duration(self, value, expected):
        assert format_duration(value) == expected


class TestPostSoupParser:
    def test_init(self, parser):
        assert parser.config["parser"] == "html.parser"
        assert ".feed-shared-update-v2__description" in parser.config["text_selectors"]

    def test_text_from_first_matching_selector(self, parser):
        soup = parser.parse(POST_HTML)
        assert parser.extract_text(soup) == "We just shipped the new release!"

    def test_text_selector_priority(self, parser):
        html = """
        <div class="update-components-text">Lower priority</div>
        <div class="feed-shared-update-v2__description">Higher priority</div>
        """
        assert parser.extract_text(parser.parse(html)) == "Higher priority"

    def test_empty_selector_match_is_skipped(self, parser):
        html = """
        <div class="feed-shared-update-v2__description">   </div>
        <div class="feed-shared-text">Actual text</div>
        """
        assert parser.extract_text(parser.parse(html)) == "Actual text"

    @pytest.mark.parametrize(
        "head,expected",
        [
            ('<meta property="og:description" content="Social text"><title>Title</title>', "Social text"),
            ('<meta name="description" content="Generic text"><title>Title</title>', "Generic text"),
            ("<title>Only a title</title>", "Only a title"),
            ("", PLACEHOLDER_TEXT),
        ],
    )
    def test_text_falls_back_to_page_metadata(self, parser, head, expected):
        html = f"<html><head>{head}</head><body><div>unrelated</div></body></html>"
        assert parser.extract_text(parser.parse(html)) == expected

    def test_collect_media_from_post(self, parser):
        collector = MediaCollector()
        parser.collect_media(parser.parse(POST_HTML), collector, POST_URL)

        images = collector.items(MediaKind.IMAGE)
        assert [str(image.url) for image in images] == [FIRST_IMAGE, SECOND_IMAGE, OG_IMAGE]
        assert [image.alt for image in images] == ["Release screenshot", "Team photo", "Post image"]
        assert [image.filename for image in images] == ["image-1.jpg", "image-2.jpg", "image-3.jpg"]

        videos = collector.items(MediaKind.VIDEO)
        assert len(videos) == 1
        assert str(videos[0].url) == POST_VIDEO
        assert videos[0].title == "Launch video"
        assert videos[0].duration == "2:45"

        documents = collector.items(MediaKind.DOCUMENT)
        assert len(documents) == 1
        assert str(documents[0].url) == POST_DOCUMENT
        assert documents[0].title == "Launch deck"
        assert documents[0].type == "PDF Document"
        assert documents[0].size == "Unknown"
        assert documents[0].filename == "document-1.pdf"

    def test_relative_sources_resolved_against_base(self, parser):
        html = '<article><img src="/dms/image/v2/D4E22AQRelative01/feedshare-shrink_800/0/1" alt="chart"></article>'
        collector = MediaCollector()
        parser.collect_images(parser.parse(html), collector, "https://media.licdn.com/")
        assert [str(i.url) for i in collector.items(MediaKind.IMAGE)] == [
            "https://media.licdn.com/dms/image/v2/D4E22AQRelative01/feedshare-shrink_800/0/1"
        ]

    def test_data_uri_images_ignored(self, parser):
        html = '<article><img src="data:image/gif;base64,R0lGODlhAQABAAAAACw=" alt="spacer"></article>'
        collector = MediaCollector()
        parser.collect_images(parser.parse(html), collector)
        assert len(collector) == 0

    def test_video_sources_from_data_sources_attribute(self, parser):
        html = """
        <div class="update-components-linkedin-video">
          <video title="Clip" data-sources='[{"src": "https://dms.licdn.com/playlist/vid/v2/D4D05AQclip/mp4-640p/0/1", "type": "video/mp4"}]'></video>
        </div>
        """
        collector = MediaCollector()
        parser.collect_videos(parser.parse(html), collector)
        videos = collector.items(MediaKind.VIDEO)
        assert [str(v.url) for v in videos] == ["https://dms.licdn.com/playlist/vid/v2/D4D05AQclip/mp4-640p/0/1"]
        assert videos[0].title == "Clip"
        assert videos[0].duration == "Unknown"

    def test_malformed_data_sources_ignored(self, parser):
        html = "<video data-sources='[not json'></video>"
        collector = MediaCollector()
        parser.collect_videos(parser.parse(html), collector)
        assert len(collector) == 0
