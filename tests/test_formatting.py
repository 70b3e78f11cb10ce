"""
Tests for number parsing and display formatting.
"""
import pytest

from expose_builder.utils.formatting import (
    format_area,
    format_currency,
    format_energy,
    format_percent,
    format_price_per_area,
    is_empty_value,
    parse_number,
    round_half_up,
)


class TestParseNumber:

    @pytest.mark.parametrize('raw, expected', [
        ('749.000 €', 749000.0),
        ('1.250,50', 1250.5),
        ('3,5', 3.5),
        ('3,5 %', 3.5),
        ('1,234,567', 1234567.0),
        ('1,234.56', 1234.56),
        ('1.5', 1.5),
        ('2.500', 2500.0),
        ('0.500', 0.5),
        ('1.000.000', 1000000.0),
        ('-12,5', -12.5),
        ('300.000,-', 300000.0),
        (250, 250.0),
        (12.75, 12.75),
    ])
    def test_parses_free_text(self, raw, expected):
        assert parse_number(raw) == pytest.approx(expected)

    @pytest.mark.parametrize('raw', [None, '', '   ', 'abc', '€', True, float('nan'), float('inf'), '1,2,3.4.5', '1-2', '100-', '--5'])
    def test_unparseable_is_none(self, raw):
        assert parse_number(raw) is None


class TestFormatting:

    def test_currency_groups_thousands_german_style(self):
        assert format_currency('749000') == '749.000 €'
        assert format_currency(1234567) == '1.234.567 €'

    def test_currency_keeps_unparseable_text(self):
        assert format_currency('auf Anfrage') == 'auf Anfrage'
        assert format_currency(None) == ''

    def test_percent_has_two_decimals(self):
        assert format_percent('4') == '4.00%'
        assert format_percent('x') == ''

    def test_price_per_area_is_whole_euros(self):
        assert format_price_per_area('3000') == '3000€/m²'
        assert format_price_per_area('2999.5') == '3000€/m²'

    def test_area_and_energy(self):
        assert format_area('120') == '120m²'
        assert format_area('85,5') == '85,5m²'
        assert format_energy('120') == '120 kWh/(m²·a)'

    def test_round_half_up_is_commercial(self):
        assert round_half_up(2.345, 2) == 2.35
        assert round_half_up(0.5, 0) == 1.0
        assert round_half_up(2.5, 0) == 3.0

    @pytest.mark.parametrize('value, expected', [
        (None, True), ('', True), ('0', True), ('-', True), ('  ', True),
        ('0,5', False), ('3', False), ('ja', False),
    ])
    def test_is_empty_value(self, value, expected):
        assert is_empty_value(value) is expected
