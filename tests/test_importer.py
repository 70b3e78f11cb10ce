"""
Tests for CSV/JSON import.
"""
import json
from unittest.mock import Mock

from expose_builder.utils.importer import (
    import_records,
    parse_data_file,
    parse_rows,
    rows_to_records,
)


class TestParsing:

    def test_json_array(self):
        rows = parse_rows(json.dumps([{'adresse': 'A-Str. 1'}, {'adresse': 'B-Str. 2'}, 'skip']))
        assert [r['adresse'] for r in rows] == ['A-Str. 1', 'B-Str. 2']

    def test_json_object_and_nested_list(self):
        assert parse_rows('{"adresse": "A-Str. 1"}') == [{'adresse': 'A-Str. 1'}]
        assert parse_rows('{"exposes": [{"adresse": "A"}]}') == [{'adresse': 'A'}]

    def test_semicolon_csv(self):
        text = 'adresse;verkaufspreis;objektTyp\nHauptstr. 5;"749.000";Wohnung\n\nNebenweg 2;120000;Einfamilienhaus\n'
        rows = parse_rows(text)
        assert rows[0] == {'adresse': 'Hauptstr. 5', 'verkaufspreis': '749.000', 'objektTyp': 'Wohnung'}
        assert len(rows) == 2

    def test_comma_csv(self):
        rows = parse_rows('adresse,zimmer\nHauptstr. 5,3\n')
        assert rows == [{'adresse': 'Hauptstr. 5', 'zimmer': '3'}]

    def test_header_only_csv(self):
        assert parse_rows('adresse,zimmer\n') == []

    def test_bytes_with_bom(self):
        raw = '\ufeffadresse,zimmer\nHauptstr. 5,3\n'.encode('utf-8')
        assert parse_data_file(raw) == [{'adresse': 'Hauptstr. 5', 'zimmer': '3'}]

    def test_path(self, tmp_path):
        path = tmp_path / 'exposes.json'
        path.write_text('[{"adresse": "Hauptstr. 5"}]', encoding='utf-8')
        assert parse_data_file(path) == [{'adresse': 'Hauptstr. 5'}]

    def test_rows_to_records(self):
        records = rows_to_records([{'objektTyp': 'Wohnung', 'verkaufspreis': '300000', 'ist_miete': '1000'}])
        assert records[0]['objekt_typ'] == 'wohnung'
        assert records[0]['ist_faktor'] == '25.00'


class TestImportRecords:

    def test_import(self, store):
        rows = [
            {'adresse': 'Hauptstr. 5', 'label': 'Angebot', 'verkaufspreis': '300000', 'ist_miete': '1000'},
            {'adresse': 'Nebenweg 2', 'verkaufspreis': '120000'},
        ]
        progress = Mock()
        result = import_records(store, rows, label='Import', progress_callback=progress)

        assert (result.total, result.successful, result.failed) == (2, 2, 0)
        assert [r['file_name'] for r in result.results] == ['hauptstr_5_angebot', 'nebenweg_2_import']
        saved = store.load(result.results[0]['expose_id'])
        assert saved.data['ist_faktor'] == '25.00'
        assert 'label' not in saved.data
        progress.assert_called_with(2, 2, 'Complete')
        assert result.to_dict()['success_rate'] == '100.0%'

    def test_failures_do_not_stop_the_import(self, store):
        rows = [
            {'adresse': 'Hauptstr. 5', 'merkmal': 'A'},
            {'adresse': 'Hauptstr. 5', 'merkmal': 'A'},
            {'verkaufspreis': '1'},
            {'adresse': 'Nebenweg 2'},
        ]
        result = import_records(store, rows)

        assert (result.successful, result.failed) == (2, 2)
        assert result.errors[0]['reference'] == 'Hauptstr. 5'
        assert result.errors[1]['reference'] == 'row_3'
        assert result.results[1]['file_name'] == 'nebenweg_2_import_4'
        assert result.to_dict()['success_rate'] == '50.0%'

    def test_empty_import(self, store):
        result = import_records(store, [])
        assert result.to_dict()['success_rate'] == '0%'
        assert str(result) == 'ImportResult(total=0, successful=0, failed=0)'
