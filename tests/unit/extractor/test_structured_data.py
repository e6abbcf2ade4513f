"""
Unit tests for the JSON-LD walker.
"""

from bs4 import BeautifulSoup

from postharvest.extractor import structured_data


def nested(depth: int, leaf: object) -> dict:
    node: object = leaf
    for _ in range(depth):
        node = {"child": node}
    return {"root": node}


class TestParseJsonLd:
    def test_parses_valid_and_skips_malformed(self):
        soup = BeautifulSoup(
            """
            <script type="application/ld+json">{"a": 1}</script>
            <script type="application/ld+json">{"a": </script>
            <script type="application/ld+json">   </script>
            <script type="application/ld+json">[{"b": 2}]</script>
            <script>{"not": "ld"}</script>
            """,
            "html.parser",
        )
        assert structured_data.parse_json_ld(soup) == [{"a": 1}, [{"b": 2}]]


class TestWalk:
    def test_document_order_and_list_keys(self):
        data = {"name": "post", "image": ["https://a.example.com/1", {"url": "https://a.example.com/2"}], "n": 3}
        assert list(structured_data.walk(data)) == [
            ("name", "post"),
            ("image", "https://a.example.com/1"),
            ("url", "https://a.example.com/2"),
            ("n", 3),
        ]

    def test_deep_nesting_does_not_recurse(self):
        data = nested(50_000, "https://media.licdn.com/dms/image/v2/deep/feedshare-shrink_800/0/1")
        values = list(structured_data.walk(data, max_nodes=100_000))
        assert values == [("child", "https://media.licdn.com/dms/image/v2/deep/feedshare-shrink_800/0/1")]

    def test_node_budget_stops_walk(self):
        data = [{"url": f"https://a.example.com/{n}"} for n in range(100)]
        values = list(structured_data.walk(data, max_nodes=21))
        assert len(values) == 10


class TestMediaStrings:
    def test_only_media_keys(self):
        data = {
            "@type": "SocialMediaPosting",
            "headline": "https://not-media.example.com/headline",
            "thumbnailUrl": "https://a.example.com/thumb",
            "video": {"contentUrl": "https://a.example.com/clip.mp4"},
            "photo": [{"width": 3}],
        }
        assert list(structured_data.media_strings(data)) == [
            "https://a.example.com/thumb",
            "https://a.example.com/clip.mp4",
        ]


class TestFindText:
    def test_prefers_article_body(self):
        data = {"description": "Short", "text": "Middle", "sharedContent": {"articleBody": "Full body"}}
        assert structured_data.find_text(data) == "Full body"

    def test_falls_back_through_keys(self):
        assert structured_data.find_text({"description": "  Short  "}) == "Short"
        assert structured_data.find_text({"text": "   "}) == ""
        assert structured_data.find_text([]) == ""
