"""Unit tests for time-phrase extraction and formatting."""

import pytest

from stovetop.parsing.durations import extract_duration, format_clock, format_spoken_duration, format_time


class TestExtractDuration:
    """Test extract_duration on free-form instructions."""

    @pytest.mark.parametrize("text,seconds", [
        ("Add rice and 2 cups water, boil 10 min", 600),
        ("Simmer for 20 minutes", 1200),
        ("Fry for 1 minute", 60),
        ("Rest for 30 seconds", 30),
        ("Microwave 45 secs", 45),
        ("Bake for 1 hour", 3600),
        ("Slow cook 2 hrs", 7200),
        ("Cook for 5 MIN", 300),
        ("Bake the loaf for 1.5 hours", 5400),
        ("Simmer for 2.5 min", 150),
        ("Rest 0.5 minutes", 30),
    ])
    def test_single_phrase(self, text, seconds):
        """Test single time phrases in every supported unit."""
        assert extract_duration(text) == seconds

    @pytest.mark.parametrize("text,seconds", [
        ("Cook for 10–12 mins", 660),
        ("Boil 10-15 minutes", 720),
        ("Steam 3 — 4 min", 180),
        ("Bake 1.5-2 hours", 3600),
    ])
    def test_range_uses_integer_average(self, text, seconds):
        """Test that ranges resolve to the integer average of both ends."""
        assert extract_duration(text) == seconds

    def test_first_time_phrase_wins(self):
        """Test that temperatures are skipped and the first time phrase is used."""
        assert extract_duration("Bake at 180° for 25 min, then rest 5 min") == 1500

    def test_no_time_phrase(self):
        """Test that text without a time phrase yields None."""
        assert extract_duration("Chop the onion") is None

    def test_unit_must_be_whole_word(self):
        """Test that 'minced' is not read as minutes."""
        assert extract_duration("Add 2 minced garlic cloves") is None


class TestFormatting:
    """Test display and spoken formatting."""

    @pytest.mark.parametrize("seconds,text", [
        (45, "45 sec"),
        (300, "5 min"),
        (150, "2 min 30 sec"),
    ])
    def test_format_time(self, seconds, text):
        """Test compact display strings."""
        assert format_time(seconds) == text

    @pytest.mark.parametrize("seconds,text", [
        (45, "45 seconds"),
        (60, "1 minute"),
        (120, "2 minutes"),
        (90, "1 minute 30 seconds"),
        (61, "1 minute 1 second"),
    ])
    def test_format_spoken_duration(self, seconds, text):
        """Test spoken strings used in announcements."""
        assert format_spoken_duration(seconds) == text

    @pytest.mark.parametrize("seconds,text", [
        (0, "00:00"),
        (125, "02:05"),
        (3600, "60:00"),
        (-3, "00:00"),
    ])
    def test_format_clock(self, seconds, text):
        """Test MM:SS timer faces."""
        assert format_clock(seconds) == text
