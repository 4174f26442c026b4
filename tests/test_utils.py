"""Tests for the text, URL and formatting helpers."""

import base64
from datetime import datetime

import pytest

from scrapers.utils import (
    absolute_url, decode_base64_url, extract_episode_number,
    extract_iframe_src, extract_slug, extract_style_url, extract_width_percentage,
    format_countdown, format_episode_number, format_release_time, parse_float, parse_int,
)


class TestExtractSlug:
    @pytest.mark.parametrize("url, expected", [
        ("https://anichin.cafe/seri/soul-land-2/", "soul-land-2"),
        ("/seri/soul-land-2/", "soul-land-2"),
        ("https://anichin.cafe/genres/action/", "action"),
        ("https://anichin.cafe/season/winter-2024/", "winter-2024"),
        ("https://anichin.cafe/soul-land-2-episode-52-subtitle-indonesia/", "soul-land-2"),
        ("/renegade-immortal-episode-05-subtitle-indonesia/", "renegade-immortal"),
        ("https://anichin.cafe/studio/sparkly-key/", "sparkly-key"),
        ("soul-land-2", "soul-land-2"),
    ])
    def test_known_shapes(self, url, expected):
        assert extract_slug(url) == expected

    def test_empty_or_malformed_url(self):
        assert extract_slug("") == ""
        assert extract_slug(None) == ""
        assert extract_slug("https://anichin.cafe/") == ""
        assert extract_slug("http://[::1") == ""

    @pytest.mark.parametrize("url", [
        "https://anichin.cafe/seri/soul-land-2/",
        "https://anichin.cafe/soul-land-2-episode-52-subtitle-indonesia/",
        "https://anichin.cafe/network/tencent-penguin-pictures/",
    ])
    def test_idempotent(self, url):
        slug = extract_slug(url)
        assert extract_slug(slug) == slug

    def test_other_base_url(self):
        assert extract_slug("/seri/perfect-world/", "https://mirror.example") == "perfect-world"


def test_absolute_url():
    assert absolute_url("/seri/x/") == "https://anichin.cafe/seri/x/"
    assert absolute_url("https://cdn.example/a.jpg") == "https://cdn.example/a.jpg"
    assert absolute_url("") == ""
    assert absolute_url("/a/", "https://mirror.example/") == "https://mirror.example/a/"


@pytest.mark.parametrize("number, expected", [(0, "00"), (1, "01"), (9, "09"), (10, "10"), (123, "123")])
def test_format_episode_number(number, expected):
    assert format_episode_number(number) == expected


def test_format_episode_number_padding_rule():
    for n in range(0, 200):
        formatted = format_episode_number(n)
        if n < 10:
            assert len(formatted) == 2 and formatted.startswith("0")
        else:
            assert formatted == str(n)


def test_extract_episode_number():
    assert extract_episode_number("Episode 12") == "12"
    assert extract_episode_number("Ep 7 END") == "7"
    assert extract_episode_number("Movie") == ""
    assert extract_episode_number(None) == ""


def test_parse_numbers():
    assert parse_int("42 people") == 42
    assert parse_int("abc") == 0
    assert parse_int("", 1) == 1
    assert parse_float("8.70") == 8.7
    assert parse_float("n/a") == 0.0


def test_oversized_digit_runs_fall_back():
    digits = "9" * 5000
    assert parse_int(digits, 3) == 3
    assert format_countdown(digits) == "Unknown"
    assert format_release_time(digits) == "Unknown"
    assert extract_width_percentage(f"width:{digits}%") == 0


class TestFormatCountdown:
    @pytest.mark.parametrize("raw, expected", [
        ("0", "0m"),
        ("59", "0m"),
        ("3661", "1h 1m"),
        ("5400", "1h 30m"),
        ("90000", "1d 1h 0m"),
        ("-5", "Already released"),
        ("-86400", "Already released"),
    ])
    def test_values(self, raw, expected):
        assert format_countdown(raw) == expected

    def test_non_numeric(self):
        assert format_countdown("soon") == "Unknown"
        assert format_countdown("") == "Unknown"
        assert format_countdown(None) == "Unknown"

    def test_strips_noise(self):
        assert format_countdown(" 3,661s ") == "1h 1m"


class TestFormatReleaseTime:
    def test_seconds(self):
        expected = datetime.fromtimestamp(1700000000).strftime("At %H:%M")
        assert format_release_time("1700000000") == expected

    def test_milliseconds(self):
        expected = datetime.fromtimestamp(1700000000).strftime("At %H:%M")
        assert format_release_time("1700000000000") == expected

    def test_invalid(self):
        assert format_release_time("") == "Unknown"
        assert format_release_time("tomorrow") == "Unknown"
        assert format_release_time(None) == "Unknown"


def test_decode_base64_url():
    encoded = base64.b64encode(b'<iframe src="https://ok.ru/videoembed/1"></iframe>').decode().rstrip("=")
    assert decode_base64_url(encoded) == '<iframe src="https://ok.ru/videoembed/1"></iframe>'
    assert decode_base64_url("%%%") == ""


def test_markup_attribute_helpers():
    assert extract_iframe_src('<iframe src="https://a.example/e/1" allowfullscreen>') == "https://a.example/e/1"
    assert extract_iframe_src("no frame") == ""
    assert extract_style_url("background-image: url('https://a.example/bg.jpg');") == "https://a.example/bg.jpg"
    assert extract_style_url("") == ""
    assert extract_width_percentage("width:72%") == 72
    assert extract_width_percentage(None) == 0
