"""
Tests for the render model shared by preview and PDF export.
"""
import json

from expose_builder.images.watermark import photo_overlay_style
from expose_builder.services.assembly import RenderFlags, assemble, palette_for


def rows_by_key(model, table_key):
    table = next(t for t in model.tables if t.key == table_key)
    return {row.key: row for row in table.rows}


class TestAssemble:

    def test_title_address_and_key_facts(self, sample_record):
        model = assemble(sample_record)
        assert model.title == 'Helle 3-Zimmer-Wohnung'
        assert model.address == 'Hauptstr. 5, 10115 Berlin'
        assert [f.value for f in model.key_facts] == ['300.000 €', '100m²', '1998']

    def test_empty_record_placeholders(self):
        model = assemble({})
        assert model.title == 'Immobilien-Exposé'
        assert [f.value for f in model.key_facts] == ['-', '-', '-']
        assert model.cover_photo is None
        assert model.contact is None

    def test_financial_rows_with_derived_values(self, sample_record):
        rows = rows_by_key(assemble(sample_record), 'financial')
        assert rows['verkaufspreis'].value == '300.000 €'
        assert rows['ist_miete'].value == '1.000 €'
        assert rows['ist_faktor'].value == '25.00'
        assert rows['gross_yield'].value == '4.00%'
        assert rows['price_per_area'].value == '3000€/m²'
        assert rows['commission'].value == '9.000 €'
        assert rows['gross_yield'].label == 'Bruttomietrendite'

    def test_hidden_fields_keep_values_but_are_not_shown(self, sample_record):
        sample_record['objekt_typ'] = 'einfamilienhaus'
        model = assemble(sample_record)
        rows = rows_by_key(model, 'financial')
        assert 'ist_miete' not in rows
        assert 'ist_faktor' not in rows
        assert 'gross_yield' not in rows
        assert 'price_per_area' in rows
        assert sample_record['ist_miete'] == '1000'

    def test_empty_like_values_are_suppressed(self, sample_record):
        sample_record.update({'anzahl_garagen': '0', 'bauzustand': '-', 'garage': 'ja'})
        technical = rows_by_key(assemble(sample_record), 'technical')
        energy = rows_by_key(assemble(sample_record), 'energy')
        assert 'anzahl_garagen' not in technical
        assert 'bauzustand' not in energy
        # garage is a house field, apartments do not show it
        assert 'garage' not in technical

    def test_yes_no_and_energy_formatting(self, sample_record):
        sample_record.update({'objekt_typ': 'einfamilienhaus', 'garage': 'ja', 'keller': 'nein'})
        model = assemble(sample_record)
        technical = rows_by_key(model, 'technical')
        assert technical['garage'].value == 'Vorhanden'
        assert technical['keller'].value == 'Nein'
        assert technical['objekt_typ'].value == 'Einfamilienhaus'
        assert rows_by_key(model, 'energy')['energiebedarf'].value == '120 kWh/(m²·a)'

    def test_area_and_percent_rows_carry_units(self, sample_record):
        sample_record.update({'objekt_typ': 'einfamilienhaus', 'wohnflaeche': '120', 'grundstuecksflaeche': '450,5'})
        model = assemble(sample_record)
        technical = rows_by_key(model, 'technical')
        assert technical['wohnflaeche'].value == '120m²'
        assert technical['wohnflaeche'].value == model.key_facts[1].value
        assert technical['grundstuecksflaeche'].value == '450,5m²'
        assert rows_by_key(model, 'financial')['maklercourtage'].value == '3.00%'

    def test_vacancy_area_rows(self, sample_record):
        sample_record.update({'objekt_typ': 'mehrfamilienhaus', 'qm_leerstand_wohnungen': '85',
                              'qm_leerstand_gewerbe': 'ca. groß'})
        technical = rows_by_key(assemble(sample_record), 'technical')
        assert technical['qm_leerstand_wohnungen'].value == '85m²'
        # unparseable values are shown as entered
        assert technical['qm_leerstand_gewerbe'].value == 'ca. groß'

    def test_watermark_style(self, sample_record):
        assert assemble(sample_record).watermark is None
        sample_record['watermark_text'] = ' Muster Immobilien '
        model = assemble(sample_record)
        assert model.watermark_text == 'Muster Immobilien'
        assert model.watermark == photo_overlay_style('Muster Immobilien')

    def test_cover_thumbnails_and_gallery(self, sample_record):
        photos = ['a', 'b', 'c', 'd', 'e', 'f']
        sample_record['titelbild_index'] = '2'
        model = assemble(sample_record, photos)
        assert model.cover_photo == 'c'
        assert model.cover_index == 2
        assert model.thumbnails == ('a', 'b', 'd', 'e')
        assert model.gallery == tuple(photos)

    def test_invalid_cover_index_falls_back_to_first(self, sample_record):
        sample_record['titelbild_index'] = '17'
        assert assemble(sample_record, ['a', 'b']).cover_photo == 'a'

    def test_flags(self, sample_record):
        full = assemble(sample_record, ['a'])
        reduced = assemble(sample_record, ['a'], flags=RenderFlags(include_original_images=False,
                                                                   show_agent_notices=False))
        assert full.show_gallery is True
        assert reduced.show_gallery is False
        assert len(full.notices) == 6
        assert len(reduced.notices) == 4

    def test_language(self, sample_record):
        model = assemble(sample_record, flags=RenderFlags(language='en'))
        assert model.language == 'en'
        assert [t.title for t in model.tables] == ['Property data', 'Energy & condition', 'Financials']

    def test_themes(self, sample_record):
        assert assemble(sample_record, theme='neutral').palette['primary'] == '#555555'
        assert assemble(sample_record, theme='pink').theme == 'blue'
        accent = assemble(sample_record, flags=RenderFlags(accent_color='#aa0000'))
        assert accent.palette['primary'] == '#aa0000'
        assert palette_for(None)['primary'] == '#3498db'

    def test_descriptions_contact_and_location(self, sample_record):
        sample_record.update({
            'kurzbeschreibung': 'Erste Zeile\n\nZweite Zeile',
            'lage_beschreibung': 'Ruhige Seitenstraße',
        })
        model = assemble(sample_record)
        assert model.descriptions[0].paragraphs == ('Erste Zeile', 'Zweite Zeile')
        assert model.location == {'text': 'Ruhige Seitenstraße', 'address': 'Hauptstr. 5, 10115 Berlin'}
        assert model.contact == {'name': 'Max Makler', 'email': 'max@example.com'}

    def test_contact_tolerates_missing_values(self, sample_record):
        sample_record.update({'kontakt_tel': None, 'kontakt_firma': 42})
        contact = assemble(sample_record).contact
        assert 'tel' not in contact
        assert contact['firma'] == '42'

    def test_serialisable(self, sample_record):
        data = assemble(sample_record, ['a']).to_dict()
        assert json.loads(json.dumps(data))['derived']['ist_faktor'] == '25.00'
