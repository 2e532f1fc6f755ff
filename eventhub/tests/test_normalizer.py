"""
Test slug, date and time normalization.
"""
import re
from types import SimpleNamespace

import pytest

from eventhub.services.normalizer import (
    EventValidationError,
    is_valid_slug,
    normalize_date,
    normalize_event,
    normalize_time,
    slugify,
    unique_slug,
)

SLUG_SHAPE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


class TestSlugify:
    """Test slug derivation from titles."""

    @pytest.mark.parametrize(
        "title, expected",
        [
            ("PyCon Launch Party", "pycon-launch-party"),
            ("  React Conf 2025: The Future!  ", "react-conf-2025-the-future"),
            ("Hello -- World", "hello-world"),
            ("---Edge---Case---", "edge-case"),
            ("snake_case_title", "snake-case-title"),
            ("Café Olé", "cafe-ole"),
            ("Tabs\tand\nnewlines", "tabs-and-newlines"),
            ("C++ & Rust @ Night", "c-rust-night"),
        ],
    )
    def test_slugify(self, title, expected):
        assert slugify(title) == expected

    @pytest.mark.parametrize(
        "title",
        ["A  B", "?!x?!", "Über Café -- 2025 __ edition", " - a - ", "100% Fun!!!", "x_-_y"],
    )
    def test_slug_shape(self, title):
        """Only lowercase letters, digits and single inner hyphens."""
        slug = slugify(title)
        assert SLUG_SHAPE.fullmatch(slug)
        assert is_valid_slug(slug)

    @pytest.mark.parametrize("title", ["!!!", "   ", "---", "日本語"])
    def test_title_without_slug_characters(self, title):
        with pytest.raises(EventValidationError):
            slugify(title)

    def test_unique_slug_without_collision(self):
        assert unique_slug("Launch Party", slug_taken=lambda slug: False) == "launch-party"

    def test_unique_slug_appends_timestamp_on_collision(self):
        slug = unique_slug(
            "Launch Party",
            slug_taken=lambda slug: slug == "launch-party",
            clock=lambda: 1700000000.123,
        )
        assert slug == "launch-party-1700000000123"
        assert is_valid_slug(slug)


class TestIsValidSlug:
    @pytest.mark.parametrize("slug", ["a", "abc-123", "2025-launch"])
    def test_valid(self, slug):
        assert is_valid_slug(slug)

    @pytest.mark.parametrize("slug", ["", "-a", "a-", "a--b", "Abc", "a_b", "a b", "abc\n", "abc-123\n", "\nabc"])
    def test_invalid(self, slug):
        assert not is_valid_slug(slug)


class TestNormalizeDate:
    """Test date canonicalization."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2025-03-15", "2025-03-15"),
            ("March 15, 2025", "2025-03-15"),
            ("15 Mar 2025", "2025-03-15"),
            ("2025/03/15", "2025-03-15"),
            ("03/15/2025", "2025-03-15"),
            ("2025-03-15T10:00:00", "2025-03-15"),
            ("  2025-03-15  ", "2025-03-15"),
        ],
    )
    def test_parses_common_formats(self, value, expected):
        assert normalize_date(value) == expected

    def test_timezone_aware_value_uses_utc_date(self):
        assert normalize_date("2025-03-15T23:30:00-05:00") == "2025-03-16"

    @pytest.mark.parametrize("value", ["not-a-date", "", "   ", "2025-13-45"])
    def test_rejects_unparseable(self, value):
        with pytest.raises(EventValidationError, match="valid date"):
            normalize_date(value)

    @pytest.mark.parametrize("value", ["March", "5", "12:00", "March 15", "Feb 2025", "2025", "10:00 PM"])
    def test_rejects_partial_dates(self, value):
        """Year, month and day must all come from the input."""
        with pytest.raises(EventValidationError, match="year, month and day"):
            normalize_date(value)


class TestNormalizeTime:
    """Test time canonicalization."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("12:00 PM", "12:00"),
            ("12:00 AM", "00:00"),
            ("01:30 PM", "13:30"),
            ("1:30pm", "13:30"),
            ("11:59 pm", "23:59"),
            ("12:15AM", "00:15"),
            ("9:05 AM", "09:05"),
            ("18:45", "18:45"),
            ("9:05", "09:05"),
            ("00:00", "00:00"),
            ("23:59", "23:59"),
        ],
    )
    def test_converts_to_24_hour(self, value, expected):
        assert normalize_time(value) == expected

    @pytest.mark.parametrize(
        "value", ["24:00", "13:00 PM", "00:30 AM", "12:60", "noon", "", "7 PM", "12:00 XM"]
    )
    def test_rejects_other_formats(self, value):
        with pytest.raises(EventValidationError, match="HH:MM"):
            normalize_time(value)


class TestNormalizeEvent:
    """Test the combined normalization run before a write."""

    def test_new_event_normalizes_everything(self):
        values = {"title": "Launch Party", "date": "March 15, 2025", "time": "6:30 PM", "venue": "Hall"}

        normalized = normalize_event(values)

        assert normalized == {
            "title": "Launch Party",
            "slug": "launch-party",
            "date": "2025-03-15",
            "time": "18:30",
            "venue": "Hall",
        }
        # input is left alone
        assert "slug" not in values
        assert values["time"] == "6:30 PM"

    def test_unchanged_title_keeps_existing_slug(self):
        current = SimpleNamespace(title="Launch Party", slug="launch-party", date="2025-03-15", time="18:30")

        normalized = normalize_event({"title": "Launch Party", "venue": "Annex"}, current=current)

        assert "slug" not in normalized

    def test_changed_title_regenerates_slug(self):
        current = SimpleNamespace(title="Launch Party", slug="launch-party", date="2025-03-15", time="18:30")

        normalized = normalize_event({"title": "Closing Party"}, current=current)

        assert normalized["slug"] == "closing-party"

    def test_unchanged_fields_skip_validation(self):
        # stored values are trusted and never re-parsed
        current = SimpleNamespace(title="T", slug="t", date="legacy", time="legacy")

        normalized = normalize_event({"date": "legacy", "time": "legacy"}, current=current)

        assert normalized == {"date": "legacy", "time": "legacy"}

    def test_collision_uses_clock(self):
        normalized = normalize_event(
            {"title": "Launch Party"},
            slug_taken=lambda slug: True,
            clock=lambda: 42.0,
        )
        assert normalized["slug"] == "launch-party-42000"

    def test_bad_time_raises(self):
        with pytest.raises(EventValidationError):
            normalize_event({"title": "Launch Party", "time": "25:00"})
