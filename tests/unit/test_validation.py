"""
Unit tests for post and proxy URL validation.
"""

import pytest

from postharvest.errors import ExtractionError, InvalidInputError
from postharvest.security.validation import (
    InputValidator,
    URLValidationRules,
    validate_post_url,
    validate_proxy_url,
)


class TestValidatePostUrl:
    def test_accepts_linkedin_post(self):
        url = "https://www.linkedin.com/posts/janedoe_activity-7100000000000000000-abcd"
        assert validate_post_url(url) == url

    def test_trims_whitespace(self):
        assert validate_post_url("  https://linkedin.com/feed/update/urn:li:activity:1  \n") == (
            "https://linkedin.com/feed/update/urn:li:activity:1"
        )

    @pytest.mark.parametrize(
        "raw",
        [
            "https://example.com/posts/123",
            "https://twitter.com/linkedin",
            "not a url",
            "linkedin.com/posts/123",
            "ftp://www.linkedin.com/posts/1",
            "",
            "   ",
        ],
    )
    def test_rejects_foreign_or_malformed(self, raw):
        with pytest.raises(InvalidInputError):
            validate_post_url(raw)

    def test_error_is_value_error_and_extraction_error(self):
        with pytest.raises(ValueError):
            validate_post_url("https://example.com/")
        with pytest.raises(ExtractionError):
            validate_post_url("https://example.com/")

    def test_foreign_domain_message(self):
        with pytest.raises(InvalidInputError, match="Must be a linkedin.com URL"):
            validate_post_url("https://example.com/posts/1")

    def test_custom_target_domain(self):
        assert validate_post_url("https://news.example.org/a", target_domain="example.org")

    def test_rejects_non_string(self):
        with pytest.raises(InvalidInputError):
            InputValidator().validate_post_url(None)  # type: ignore[arg-type]

    def test_rejects_overlong_url(self):
        validator = InputValidator(URLValidationRules(max_url_length=40))
        with pytest.raises(InvalidInputError, match="maximum length"):
            validator.validate_post_url("https://www.linkedin.com/posts/" + "a" * 40)


class TestValidateProxyUrl:
    def test_accepts_any_http_host(self):
        url = "https://media.licdn.com/dms/image/v2/abc/feedshare-shrink_800/0/1"
        assert validate_proxy_url(url) == url

    @pytest.mark.parametrize("raw", ["javascript:alert(1)", "file:///etc/passwd", "data:image/png;base64,AAAA", ""])
    def test_rejects_non_http(self, raw):
        with pytest.raises(InvalidInputError):
            validate_proxy_url(raw)
