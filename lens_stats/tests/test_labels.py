"""
Tests for labels module.
"""
from datetime import datetime

import pytest

from lens_stats.labels import (
    hour_label,
    iso_week_key,
    month_abbreviation,
    order_index,
    period_key,
    record_type_label,
    sanitize_text,
    text_sort_key,
    weekday_abbreviation,
    weekday_name,
)


def test_record_type_label():
    assert record_type_label('INDI') == 'Individual'
    assert record_type_label('SNOTE') == 'Note'
    assert record_type_label('UNKNOWN') == 'Other'


def test_weekday_labels():
    monday = datetime(2024, 6, 10)
    assert weekday_abbreviation(monday) == 'Mon'
    assert weekday_name(monday) == 'Monday'
    assert weekday_name(datetime(2024, 6, 16)) == 'Sunday'


@pytest.mark.parametrize("month,expected", [(1, 'Jan'), (12, 'Dec'), (0, 'N/A'), (13, 'N/A')])
def test_month_abbreviation(month, expected):
    assert month_abbreviation(month) == expected


def test_hour_label():
    assert hour_label(7) == '07:00'
    assert hour_label(23) == '23:00'


@pytest.mark.parametrize("moment,expected", [
    (datetime(2024, 1, 1), '2024-W01'),
    (datetime(2021, 1, 3), '2020-W53'),
    (datetime(2024, 12, 30), '2025-W01'),
])
def test_iso_week_key(moment, expected):
    assert iso_week_key(moment) == expected


@pytest.mark.parametrize("period,expected", [
    ('day', '2024-03-05'),
    ('week', '2024-W10'),
    ('month', '2024-03'),
    ('year', '2024'),
])
def test_period_key(period, expected):
    assert period_key(datetime(2024, 3, 5, 14, 30), period) == expected


def test_period_key_unknown():
    with pytest.raises(ValueError):
        period_key(datetime(2024, 3, 5), 'fortnight')


def test_sanitize_text():
    assert sanitize_text(None) == ''
    assert sanitize_text(b'caf\xc3\xa9') == 'café'
    assert sanitize_text(b'bad\xff') == 'bad\ufffd'
    assert sanitize_text('a\r\nb\rc') == 'a\nb\nc'
    assert sanitize_text(12) == '12'


def test_text_sort_key_ignores_accents_and_case():
    names = ['Zoë', 'émile', 'Anna', 'Étienne']
    assert sorted(names, key=text_sort_key) == ['Anna', 'émile', 'Étienne', 'Zoë']


def test_order_index():
    order = ['Mon', 'Tue']
    assert order_index(order, 'Tue') == 1
    assert order_index(order, 'Xyz') == 2
