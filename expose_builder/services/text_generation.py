"""
Template based text generation for titles, descriptions and location texts.

Generation needs the property to be geocoded first: without coordinates
`generate_texts` returns None and the caller keeps its current texts.
"""
import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

from ..api.client import Coordinates
from .i18n import translate

LOGGER = logging.getLogger(__name__)


@dataclass
class GeneratedTexts:
    title: str
    short_description: str
    long_description: str
    highlights: List[str] = field(default_factory=list)
    coordinates: Optional[Coordinates] = None

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['coordinates'] = self.coordinates.to_dict() if self.coordinates else None
        return data


def _type_label(record: Dict[str, str], lang: Optional[str]) -> str:
    code = record.get('objekt_typ') or 'wohnung'
    return translate(f"property_types.{code}", lang, default=code)


def generate_highlights(record: Dict[str, str], lang: Optional[str] = None) -> List[str]:
    highlights = []
    if record.get('wohnflaeche'):
        highlights.append(translate('texts.highlight_area', lang, area=record['wohnflaeche']))
    if record.get('zimmer'):
        highlights.append(translate('texts.highlight_rooms', lang, rooms=record['zimmer']))
    if record.get('grundstuecksflaeche'):
        highlights.append(translate('texts.highlight_plot', lang, area=record['grundstuecksflaeche']))
    if record.get('baujahr'):
        highlights.append(translate('texts.highlight_year', lang, year=record['baujahr']))
    if record.get('heizungsart'):
        highlights.append(record['heizungsart'])
    return highlights


def generate_title(record: Dict[str, str], lang: Optional[str] = None) -> str:
    return translate('texts.title', lang, type=_type_label(record, lang), adresse=record.get('adresse', ''))


def generate_short_description(record: Dict[str, str], lang: Optional[str] = None) -> str:
    return translate(
        'texts.short', lang,
        type=_type_label(record, lang),
        area=record.get('wohnflaeche') or translate('texts.unknown', lang),
        adresse=record.get('adresse', ''),
    )


def generate_long_description(record: Dict[str, str], lang: Optional[str] = None) -> str:
    adresse = record.get('adresse', '')
    parts = [translate('texts.long_intro', lang, type=_type_label(record, lang), adresse=adresse)]

    if record.get('baujahr'):
        parts.append(translate('texts.long_built', lang, year=record['baujahr']))
    else:
        parts.append(translate('texts.long_object', lang))

    parts.append(translate('texts.long_area', lang, area=record.get('wohnflaeche') or translate('texts.unknown', lang)))
    if record.get('zimmer'):
        parts.append(translate('texts.long_rooms', lang, rooms=record['zimmer']))
    parts.append('. ')

    if record.get('heizungsart'):
        parts.append(translate('texts.long_heating', lang, heating=record['heizungsart']))
    if record.get('letzte_sanierung'):
        parts.append(translate('texts.long_renovation', lang, year=record['letzte_sanierung']))
    if record.get('ist_miete') and record.get('soll_miete'):
        parts.append(translate('texts.long_rent', lang, ist=record['ist_miete'], soll=record['soll_miete']))
    if record.get('verkaufspreis'):
        parts.append(translate('texts.long_price', lang, price=record['verkaufspreis']))
    if record.get('maklercourtage'):
        parts.append(translate('texts.long_commission', lang, commission=record['maklercourtage']))

    summary = translate(
        'texts.location_summary', lang,
        adresse=adresse or translate('texts.location_fallback', lang),
    )
    return ''.join(parts).strip() + '\n\n' + summary


def generate_location_text(record: Dict[str, str], lang: Optional[str] = None) -> str:
    """Location paragraph from the address and the short location keywords"""
    return translate(
        'texts.location', lang,
        adresse=record.get('adresse', ''),
        lage=(record.get('lage') or '').lower(),
    )


def generate_texts(
    record: Dict[str, str],
    coordinates: Optional[Coordinates],
    lang: Optional[str] = None
) -> Optional[GeneratedTexts]:
    """Generate all texts; None when the address has not been geocoded"""
    if coordinates is None:
        LOGGER.info("text generation skipped: no coordinates for %r", record.get('adresse', ''))
        return None

    return GeneratedTexts(
        title=generate_title(record, lang),
        short_description=generate_short_description(record, lang),
        long_description=generate_long_description(record, lang),
        highlights=generate_highlights(record, lang),
        coordinates=coordinates,
    )


def apply_generated_texts(record: Dict[str, str], texts: GeneratedTexts) -> Dict[str, str]:
    """Accept a generated proposal: the title becomes `titel`, the short text `lage`"""
    updated = dict(record)
    updated['titel'] = texts.title
    updated['lage'] = texts.short_description
    return updated
