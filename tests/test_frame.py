"""Tests for frameattest.frame: card markup and body parsing."""

import json

import pytest

from frameattest.frame import (
    FORM_TYPE, JSON_TYPE, image_url, parse_body, render_frame, trusted_message_bytes,
)


class TestRenderFrame:
    def test_contains_count_and_image(self):
        page = render_frame(7, "https://frame.example")
        assert 'content="https://frame.example/og-image?count=7"' in page
        assert 'property="fc:frame" content="vNext"' in page
        assert 'property="fc:frame:button:1" content="Frame me!"' in page
        assert "/> 7" in page

    def test_image_url(self):
        assert image_url("", 3) == "/og-image?count=3"

    def test_escapes_public_url(self):
        page = render_frame(1, 'https://x.example/"><script>')
        assert "<script>" not in page


class TestParseBody:
    def test_json(self):
        body = json.dumps({"trustedData": {"messageBytes": "0a0b"}}).encode()
        assert parse_body(JSON_TYPE, body) == {"trustedData": {"messageBytes": "0a0b"}}

    def test_json_with_charset(self):
        assert parse_body("application/json; charset=utf-8", b'{"a": 1}') == {"a": 1}

    def test_malformed_json(self):
        assert parse_body(JSON_TYPE, b"{not json") == {}

    def test_json_array_ignored(self):
        assert parse_body(JSON_TYPE, b"[1, 2]") == {}

    def test_form(self):
        body = b"trustedData.messageBytes=0a0b&untrustedData.fid=3"
        assert parse_body(FORM_TYPE, body) == {
            "trustedData.messageBytes": "0a0b",
            "untrustedData.fid": "3",
        }

    @pytest.mark.parametrize("content_type", [None, "text/plain", "multipart/form-data"])
    def test_other_types(self, content_type):
        assert parse_body(content_type, b"trustedData=1") == {}

    def test_empty_body(self):
        assert parse_body(JSON_TYPE, b"") == {}


class TestTrustedMessageBytes:
    def test_nested(self):
        assert trusted_message_bytes({"trustedData": {"messageBytes": "0a"}}) == "0a"

    def test_flat_dotted(self):
        assert trusted_message_bytes({"trustedData.messageBytes": "0b"}) == "0b"

    def test_flat_bracketed(self):
        assert trusted_message_bytes({"trustedData[messageBytes]": "0c"}) == "0c"

    def test_json_encoded_value(self):
        data = {"trustedData": json.dumps({"messageBytes": "0d"})}
        assert trusted_message_bytes(data) == "0d"

    @pytest.mark.parametrize("data", [
        {},
        {"trustedData": {}},
        {"trustedData": {"messageBytes": 12}},
        {"trustedData": "not json"},
    ])
    def test_absent(self, data):
        assert trusted_message_bytes(data) is None
