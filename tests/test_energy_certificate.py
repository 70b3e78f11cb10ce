"""
Tests for the energy certificate merge.
"""
from unittest.mock import Mock

from expose_builder.models.expose import EnergyCertificateInfo
from expose_builder.services.energy_certificate import (
    JsonCertificateParser,
    merge_certificate,
    parse_certificate_safely,
)


class TestParser:

    def test_accepts_str_bytes_and_dict(self):
        parser = JsonCertificateParser()
        payload = {'heatingType': 'Öl', 'constructionYear': '1980'}
        for document in ('{"heatingType": "Öl", "constructionYear": "1980"}',
                         '{"heatingType": "Öl", "constructionYear": "1980"}'.encode('utf-8'),
                         payload):
            assert parser.parse(document).heating_type == 'Öl'

    def test_failures_yield_none(self):
        assert parse_certificate_safely(JsonCertificateParser(), '[1, 2]') is None
        broken = Mock()
        broken.parse.side_effect = RuntimeError('OCR failed')
        assert parse_certificate_safely(broken, b'%PDF') is None

    def test_dict_result_is_converted(self):
        parser = Mock()
        parser.parse.return_value = {'energyEfficiencyClass': 'B'}
        info = parse_certificate_safely(parser, b'%PDF')
        assert isinstance(info, EnergyCertificateInfo)
        assert info.energy_efficiency_class == 'B'


class TestMerge:

    def test_overwrites_heating_and_year(self, sample_record):
        info = EnergyCertificateInfo(heating_type='Fernwärme', construction_year='1975')
        merged = merge_certificate(sample_record, info)
        assert merged['heizungsart'] == 'Fernwärme'
        assert merged['baujahr'] == '1975'
        assert merged['energiebedarf'] == '120'
        assert sample_record['heizungsart'] == 'Gas-Zentralheizung'

    def test_missing_heating_and_year_are_cleared(self, sample_record):
        merged = merge_certificate(sample_record, EnergyCertificateInfo())
        assert merged['heizungsart'] == ''
        assert merged['baujahr'] == ''

    def test_fills_energy_fields(self, sample_record):
        info = EnergyCertificateInfo(
            certificate_type='Verbrauchsausweis',
            energy_efficiency_class='D',
            energy_consumption=132.5,
        )
        merged = merge_certificate(sample_record, info)
        assert merged['energieausweis_art'] == 'Verbrauchsausweis'
        assert merged['energieeffizienzklasse'] == 'D'
        assert merged['energiebedarf'] == '132.5'

    def test_demand_preferred_over_consumption(self, sample_record):
        info = EnergyCertificateInfo(energy_demand=90.0, energy_consumption=132.5)
        assert merge_certificate(sample_record, info)['energiebedarf'] == '90'
