"""
Unit tests for the formatting and tag color helpers.
"""

import pytest
from datetime import datetime, timedelta, timezone

from app.utils.formatters import as_utc, days_until_ceil, initials, plural_days, whole_days_since
from app.utils.tag_colors import TAG_PALETTE, get_tag_color, hex_to_rgb, is_in_palette, nearest_palette_color

NOW = datetime(2026, 10, 18, 15, 0, tzinfo=timezone.utc)


class TestFormatters:

    def test_naive_is_read_as_utc(self):
        assert as_utc(datetime(2026, 10, 18, 15, 0)) == NOW

    def test_aware_is_converted(self):
        three_hours_east = timezone(timedelta(hours=3))
        assert as_utc(datetime(2026, 10, 18, 18, 0, tzinfo=three_hours_east)) == NOW

    def test_none(self):
        assert as_utc(None) is None

    def test_whole_days_since_floors(self):
        assert whole_days_since(NOW - timedelta(days=4, hours=23), NOW) == 4

    @pytest.mark.parametrize('delta,expected', [
        (timedelta(minutes=1), 1),
        (timedelta(days=1), 1),
        (timedelta(days=1, seconds=1), 2),
        (timedelta(0), 0),
    ])
    def test_days_until_ceil(self, delta, expected):
        assert days_until_ceil(NOW + delta, NOW) == expected

    def test_plural_days(self):
        assert plural_days(1) == '1 day'
        assert plural_days(0) == '0 days'

    @pytest.mark.parametrize('first,last,expected', [
        ('ada', 'lovelace', 'AL'),
        ('Cher', None, 'C'),
        (None, None, ''),
    ])
    def test_initials(self, first, last, expected):
        assert initials(first, last) == expected


class TestTagColors:

    def test_hex_to_rgb(self):
        assert hex_to_rgb('#7C3AED') == (124, 58, 237)

    def test_hex_to_rgb_rejects_short_values(self):
        with pytest.raises(ValueError):
            hex_to_rgb('#FFF')

    def test_palette_membership_ignores_case(self):
        assert is_in_palette('#7c3aed') is True
        assert is_in_palette('#123456') is False

    def test_palette_colors_map_to_themselves(self):
        assert all(nearest_palette_color(entry['text']) == entry['text'] for entry in TAG_PALETTE)

    def test_nearest(self):
        assert nearest_palette_color('#E0301F') == '#DC2626'

    def test_invalid_color_falls_back_to_first_entry(self):
        assert nearest_palette_color('tomato') == TAG_PALETTE[0]['text']

    def test_get_tag_color(self):
        assert get_tag_color('#DC2626') == {'bg': 'rgba(220, 38, 38, 0.12)', 'text': '#DC2626'}
        assert get_tag_color('#102030') == {'bg': 'rgba(16, 32, 48, 0.12)', 'text': '#102030'}
