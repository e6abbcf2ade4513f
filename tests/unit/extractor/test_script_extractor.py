"""
Unit tests for ScriptPayloadExtractor.
"""

import pytest

from postharvest.errors import HttpStatusError, NoContentError
from postharvest.extractor.collector import MediaCollector
from postharvest.extractor.models import MediaKind
from postharvest.extractor.script_extractor import ScriptPayloadExtractor, normalize_candidate
from tests.helpers.pages import EMPTY_HTML, POST_URL, SCRIPT_HTML, html_transport

CDN = "https://media.licdn.com"
IDENTIFIER = "D5622AQIdentifierOnly99"


@pytest.fixture
def extractor(extraction_settings, fetcher_factory):
    return ScriptPayloadExtractor(extraction_settings, fetcher_factory(html_transport(SCRIPT_HTML)))


class TestNormalizeCandidate:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (r"https:\/\/media.licdn.com\/dms\/image\/v2\/abc", "https://media.licdn.com/dms/image/v2/abc"),
            (r"https://media.licdn.com/dms/image", "https://media.licdn.com/dms/image"),
            ("https://x.example.com/a?b=1&amp;c=2", "https://x.example.com/a?b=1&c=2"),
            ("/dms/image/v2/abc/feedshare-shrink_800/0/1", "https://media.licdn.com/dms/image/v2/abc/feedshare-shrink_800/0/1"),
            ("dms/image/v2/abc", "https://media.licdn.com/dms/image/v2/abc"),
            ("//media.licdn.com/dms/image/v2/abc", "https://media.licdn.com/dms/image/v2/abc"),
            ('https://x.example.com/a\\"', "https://x.example.com/a"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_candidate(raw, CDN) == expected


class TestScriptPayloadExtractor:
    def test_name(self, extractor):
        assert extractor.name == "script"

    def test_payload_excludes_json_ld_and_external_scripts(self, extractor):
        html = """
        <script src="https://static.licdn.com/sc/h/app.js"></script>
        <script type="application/ld+json">{"articleBody": "x"}</script>
        <script>var a = 1;</script>
        <code id="bpr-guid-1">{"data": 2}</code>
        """
        payload = extractor.script_payload(extractor.parser.parse(html))
        assert "var a = 1;" in payload
        assert '{"data": 2}' in payload
        assert "articleBody" not in payload

    def test_passes_in_order(self, extractor):
        content = extractor.extract_from_html(SCRIPT_HTML)

        urls = [str(image.url) for image in content.images]
        assert urls == [
            f"{CDN}/dms/image/v2/D4D22AQKeyValueImg1/feedshare-shrink_2048_1536/0/1700000000011?e=1",
            f"{CDN}/dms/image/v2/D4D22AQArrayImage01/feedshare-shrink_800/0/1700000000012",
            f"{CDN}/dms/image/v2/D4D22AQBareUrlImage1/feedshare-shrink_800/0/1700000000013",
            f"{CDN}/dms/image/v2/{IDENTIFIER}/feedshare-shrink_2048_1536/0/",
            f"{CDN}/dms/image/v2/{IDENTIFIER}/feedshare-shrink_1280/0/",
            f"{CDN}/dms/image/v2/{IDENTIFIER}/feedshare-shrink_800/0/",
            f"{CDN}/dms/image/v2/D4D22AQJsonLdImage1/feedshare-shrink_1280/0/1700000000010",
        ]
        assert [image.filename for image in content.images] == [f"image-{n}.jpg" for n in range(1, 8)]

    def test_chrome_urls_rejected(self, extractor):
        content = extractor.extract_from_html(SCRIPT_HTML)
        assert not any("company-logo" in str(image.url) for image in content.images)

    def test_videos_mined(self, extractor):
        content = extractor.extract_from_html(SCRIPT_HTML)
        assert [str(video.url) for video in content.videos] == [
            "https://dms.licdn.com/playlist/vid/v2/D4D05AQvideoclip/mp4-720p/0/1700000000014"
        ]
        assert content.videos[0].filename == "video-1.mp4"

    def test_text_from_json_ld(self, extractor):
        assert extractor.extract_from_html(SCRIPT_HTML).text == "Carousel post body"

    def test_text_from_commentary_state(self, extractor):
        html = r'<script>{"commentary":{"text":"Hello from état \"quoted\"","attributes":[]}}</script>'
        assert extractor.extract_from_html(html).text == 'Hello from état "quoted"'

    def test_text_falls_back_to_meta(self, extractor):
        html = '<html><head><meta property="og:description" content="Meta only"></head></html>'
        assert extractor.extract_from_html(html).text == "Meta only"

    def test_malformed_json_ld_does_not_abort(self, extractor):
        html = """
        <script type="application/ld+json">{"broken": </script>
        <script type="application/ld+json">{"image": "https://media.licdn.com/dms/image/v2/D4D22AQAfterBroken/feedshare-shrink_800/0/1"}</script>
        """
        content = extractor.extract_from_html(html)
        assert [str(i.url) for i in content.images] == [
            "https://media.licdn.com/dms/image/v2/D4D22AQAfterBroken/feedshare-shrink_800/0/1"
        ]

    def test_vector_image_uses_widest_artifact(self, extractor):
        html = (
            '<script>{"vectorImage":{"artifacts":['
            '{"width":800,"fileIdentifyingUrlPathSegment":"800_800\\/0\\/1?e=1"},'
            '{"width":1280,"fileIdentifyingUrlPathSegment":"1280_1280\\/0\\/1?e=2"}'
            '],"rootUrl":"https:\\/\\/media.licdn.com\\/dms\\/image\\/v2\\/D4D22AQVector001\\/feedshare-shrink_"}}</script>'
        )
        content = extractor.extract_from_html(html)
        urls = [str(i.url) for i in content.images]
        assert urls[0] == "https://media.licdn.com/dms/image/v2/D4D22AQVector001/feedshare-shrink_1280_1280/0/1?e=2"

    def test_identifiers_already_seen_are_not_expanded(self, extractor):
        collector = MediaCollector()
        collector.add(MediaKind.IMAGE, f"{CDN}/dms/image/v2/{IDENTIFIER}/feedshare-shrink_800/0/1")
        payload = f'"carousel":"{IDENTIFIER}","other":"D4D22AQFreshIdentifier"'

        candidates = extractor.mine_identifiers(payload, collector)

        assert all(IDENTIFIER not in candidate for candidate in candidates)
        assert len(candidates) == 3

    @pytest.mark.asyncio
    async def test_extract_over_http(self, extractor):
        content = await extractor.extract(POST_URL)
        assert len(content.images) == 7

    @pytest.mark.asyncio
    async def test_empty_payload_raises_no_content(self, extraction_settings, fetcher_factory):
        extractor = ScriptPayloadExtractor(extraction_settings, fetcher_factory(html_transport(EMPTY_HTML)))
        with pytest.raises(NoContentError):
            await extractor.extract(POST_URL)

    @pytest.mark.asyncio
    async def test_http_error_propagates(self, extraction_settings, fetcher_factory):
        extractor = ScriptPayloadExtractor(extraction_settings, fetcher_factory(html_transport("", status_code=429)))
        with pytest.raises(HttpStatusError):
            await extractor.extract(POST_URL)
