"""
Render model assembly.

`assemble` is the one projection both the HTML preview and the PDF export
are drawn from, so the two always show the same values, the same hidden
fields and the same photo order. It has no side effects.
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..api.config import Config
from ..images.watermark import WatermarkStyle, photo_overlay_style
from ..models.fields import is_field_visible
from ..models.photos import PhotoCollection
from ..utils.formatting import (
    format_area,
    format_currency,
    format_energy,
    format_percent,
    format_price_per_area,
    is_empty_value,
)
from .calculator import DerivedFields, compute_derived
from .i18n import field_label, normalize_language, translate

PALETTES = {
    'blue': {'primary': '#3498db', 'accent': '#2c3e50', 'bg_soft': '#eef5fa'},
    'neutral': {'primary': '#555555', 'accent': '#2c3e50', 'bg_soft': '#f4f4f4'},
}

MAX_THUMBNAILS = 4


def palette_for(theme: Optional[str], accent: Optional[str] = None) -> Dict[str, str]:
    """Colours of a theme; unknown themes fall back to blue, `accent` overrides the primary colour"""
    palette = dict(PALETTES.get(theme or '', PALETTES['blue']))
    if accent:
        palette['primary'] = accent
    return palette


@dataclass(frozen=True)
class RenderFlags:
    include_original_images: bool = True
    show_agent_notices: bool = True
    language: Optional[str] = None
    accent_color: Optional[str] = None


@dataclass(frozen=True)
class FactRow:
    key: str
    label: str
    value: str


@dataclass(frozen=True)
class FactTable:
    key: str
    title: str
    rows: Tuple[FactRow, ...] = ()


@dataclass(frozen=True)
class TextBlock:
    key: str
    title: str
    paragraphs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RenderModel:
    """Everything needed to draw an exposé, already filtered and formatted"""
    language: str
    title: str
    address: str
    theme: str
    palette: Dict[str, str]
    cover_photo: Optional[str]
    cover_index: Optional[int]
    thumbnails: Tuple[str, ...]
    gallery: Tuple[str, ...]
    show_gallery: bool
    key_facts: Tuple[FactRow, ...]
    location: Optional[Dict[str, str]]
    tables: Tuple[FactTable, ...]
    descriptions: Tuple[TextBlock, ...]
    contact: Optional[Dict[str, str]]
    notices: Tuple[str, ...]
    watermark_text: str
    logo: Optional[str]
    derived: DerivedFields = field(default_factory=DerivedFields)
    watermark: Optional[WatermarkStyle] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _plain(value: str, lang: str) -> str:
    return value


def _yes_no(value: str, lang: str) -> str:
    normalized = value.strip().lower()
    if normalized in ('ja', 'yes', 'true', '1'):
        return translate('values.present', lang)
    if normalized in ('nein', 'no', 'false'):
        return translate('values.absent', lang)
    return value


def _property_type(value: str, lang: str) -> str:
    return translate(f"property_types.{value}", lang, default=value)


def _currency(value: str, lang: str) -> str:
    return format_currency(value)


def _energy(value: str, lang: str) -> str:
    return format_energy(value) or value


def _area(value: str, lang: str) -> str:
    return format_area(value) or value


def _percent(value: str, lang: str) -> str:
    return format_percent(value) or value


Formatter = Callable[[str, str], str]

# (field, formatter) per table; derived rows name the field their visibility follows
TECHNICAL_ROWS: Sequence[Tuple[str, Formatter]] = (
    ('objekt_typ', _property_type),
    ('wohnflaeche', _area),
    ('grundstuecksflaeche', _area),
    ('zimmer', _plain),
    ('badezimmer', _plain),
    ('balkone', _plain),
    ('etage', _plain),
    ('etagenanzahl', _plain),
    ('anzahl_garagen', _plain),
    ('anzahl_stellplaetze', _plain),
    ('garage', _yes_no),
    ('keller', _yes_no),
    ('letzte_sanierung', _plain),
    ('anzahl_wohnungen', _plain),
    ('anzahl_gewerbeeinheiten', _plain),
    ('leerstehende_wohnungen', _plain),
    ('leerstehende_gewerbe', _plain),
    ('qm_leerstand_wohnungen', _area),
    ('qm_leerstand_gewerbe', _area),
)

ENERGY_ROWS: Sequence[Tuple[str, Formatter]] = (
    ('baujahr', _plain),
    ('heizungsart', _plain),
    ('bauzustand', _plain),
    ('energietraeger', _plain),
    ('energieausweis_art', _plain),
    ('energiebedarf', _energy),
    ('energieeffizienzklasse', _plain),
)

FINANCIAL_ROWS: Sequence[Tuple[str, Formatter]] = (
    ('verkaufspreis', _currency),
    ('ist_miete', _currency),
    ('soll_miete', _currency),
    ('betriebskosten_hausgeld', _currency),
    ('maklercourtage', _percent),
)

# derived key -> (label key, visibility source field, formatter)
DERIVED_ROWS = (
    ('commission', 'derived.commission', 'maklercourtage', _currency),
    ('ist_faktor', 'fields.ist_faktor', 'ist_faktor', _plain),
    ('soll_faktor', 'fields.soll_faktor', 'soll_faktor', _plain),
    ('gross_yield', 'derived.gross_yield', 'ist_miete', lambda v, lang: format_percent(v)),
    ('price_per_area', 'derived.price_per_area', 'wohnflaeche', lambda v, lang: format_price_per_area(v)),
)


def _rows(record: Dict[str, str], definitions, property_type: str, lang: str) -> List[FactRow]:
    rows = []
    for key, formatter in definitions:
        raw = str(record.get(key) or '')
        if not is_field_visible(key, property_type) or is_empty_value(raw):
            continue
        value = formatter(raw.strip(), lang)
        if not is_empty_value(value):
            rows.append(FactRow(key=key, label=field_label(key, lang), value=value))
    return rows


def _derived_rows(derived: DerivedFields, property_type: str, lang: str) -> List[FactRow]:
    values = derived.to_dict()
    rows = []
    for key, label_key, source, formatter in DERIVED_ROWS:
        raw = values[key]
        if not is_field_visible(source, property_type) or is_empty_value(raw):
            continue
        value = formatter(raw, lang)
        if not is_empty_value(value):
            rows.append(FactRow(key=key, label=translate(label_key, lang), value=value))
    return rows


def _key_facts(record: Dict[str, str], lang: str) -> Tuple[FactRow, ...]:
    def shown(key, formatter):
        raw = str(record.get(key) or '')
        if is_empty_value(raw):
            return '-'
        return formatter(raw) or '-'

    return (
        FactRow('verkaufspreis', translate('facts.price', lang), shown('verkaufspreis', format_currency)),
        FactRow('wohnflaeche', translate('facts.living_area', lang), shown('wohnflaeche', format_area)),
        FactRow('baujahr', translate('facts.year_built', lang), shown('baujahr', str.strip)),
    )


def _descriptions(record: Dict[str, str], lang: str) -> Tuple[TextBlock, ...]:
    blocks = []
    for key, title_key in (
        ('kurzbeschreibung', 'sections.short_description'),
        ('langbeschreibung', 'sections.long_description'),
        ('ausstattung', 'sections.features'),
    ):
        text = (record.get(key) or '').strip()
        if not text:
            continue
        paragraphs = tuple(line.strip() for line in text.split('\n') if line.strip())
        blocks.append(TextBlock(key=key, title=translate(title_key, lang), paragraphs=paragraphs))
    return tuple(blocks)


def _contact(record: Dict[str, str]) -> Optional[Dict[str, str]]:
    contact = {
        key: str(record.get(f"kontakt_{key}") or '').strip()
        for key in ('firma', 'name', 'email', 'tel', 'web')
    }
    contact = {k: v for k, v in contact.items() if v}
    return contact or None


def _notices(flags: RenderFlags, lang: str) -> Tuple[str, ...]:
    keys = ['disclaimer', 'liability', 'confidentiality', 'usage']
    if flags.show_agent_notices:
        keys += ['agent', 'withdrawal']
    return tuple(translate(f"notices.{key}", lang) for key in keys)


def assemble(
    record: Dict[str, str],
    photos: Sequence[str] = (),
    logo: Optional[str] = None,
    theme: str = None,
    flags: RenderFlags = None
) -> RenderModel:
    """
    Project a record and its photos onto a RenderModel.

    Args:
        record: PropertyRecord
        photos: Processed photos in collection order
        logo: Optional logo data URI
        theme: 'blue' or 'neutral'
        flags: Rendering switches (gallery, agent notices, language, accent)
    """
    flags = flags or RenderFlags()
    lang = normalize_language(flags.language or Config.LANGUAGE)
    if theme not in PALETTES:
        theme = Config.DEFAULT_THEME if Config.DEFAULT_THEME in PALETTES else 'blue'
    record = record or {}
    property_type = record.get('objekt_typ', '')

    collection = photos if isinstance(photos, PhotoCollection) else PhotoCollection(tuple(photos or ()))
    cover_index = collection.cover_index(record.get('titelbild_index'))
    cover = collection[cover_index] if cover_index is not None else None
    thumbnails = tuple(p for i, p in enumerate(collection) if i != cover_index)[:MAX_THUMBNAILS]

    derived = compute_derived(record)
    watermark_text = str(record.get('watermark_text') or '').strip()

    tables = (
        FactTable('technical', translate('tables.technical', lang),
                  tuple(_rows(record, TECHNICAL_ROWS, property_type, lang))),
        FactTable('energy', translate('tables.energy', lang),
                  tuple(_rows(record, ENERGY_ROWS, property_type, lang))),
        FactTable('financial', translate('tables.financial', lang),
                  tuple(_rows(record, FINANCIAL_ROWS, property_type, lang)
                        + _derived_rows(derived, property_type, lang))),
    )

    location = None
    location_text = (record.get('lage_beschreibung') or record.get('lage') or '').strip()
    if location_text:
        location = {'text': location_text, 'address': (record.get('adresse') or '').strip()}

    return RenderModel(
        language=lang,
        title=(record.get('titel') or '').strip() or translate('sections.title_fallback', lang),
        address=(record.get('adresse') or '').strip(),
        theme=theme,
        palette=palette_for(theme, flags.accent_color),
        cover_photo=cover,
        cover_index=cover_index,
        thumbnails=thumbnails,
        gallery=tuple(collection),
        show_gallery=flags.include_original_images,
        key_facts=_key_facts(record, lang),
        location=location,
        tables=tables,
        descriptions=_descriptions(record, lang),
        contact=_contact(record),
        notices=_notices(flags, lang),
        watermark_text=watermark_text,
        logo=logo or None,
        derived=derived,
        watermark=photo_overlay_style(watermark_text),
    )
