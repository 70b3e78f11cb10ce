"""
Field catalog

Which PropertyRecord fields a property type shows. Universal fields are
shown for every type; the rest only for the types listing them. The
catalog decides visibility only: it never touches stored values, so a
hidden field keeps its value when the type changes back.
"""
from typing import Dict, FrozenSet, List, Optional

from .expose import PropertyType, RECORD_FIELDS

# Catalog order is the display order of the editing form.
CATALOG_ORDER = RECORD_FIELDS


UNIVERSAL_FIELDS: FrozenSet[str] = frozenset({
    'titel', 'adresse', 'lage', 'objekt_typ',
    'baujahr', 'wohnflaeche', 'verkaufspreis',
    'heizungsart', 'bauzustand', 'anzahl_garagen', 'anzahl_stellplaetze',
    'kurzbeschreibung', 'langbeschreibung', 'ausstattung', 'lage_beschreibung',
    'maklercourtage',
    'energietraeger', 'energieausweis_art', 'energiebedarf', 'energieeffizienzklasse',
    'kontakt_name', 'kontakt_tel', 'kontakt_email', 'kontakt_firma', 'kontakt_web',
    'watermark_text', 'titelbild_index',
})

_RENTAL_FIELDS = frozenset({
    'ist_miete', 'soll_miete', 'ist_faktor', 'soll_faktor', 'betriebskosten_hausgeld',
})

_HOUSE_FIELDS = frozenset({
    'zimmer', 'badezimmer', 'grundstuecksflaeche', 'garage', 'keller',
    'balkone', 'letzte_sanierung',
})

TYPE_SPECIFIC_FIELDS: Dict[str, FrozenSet[str]] = {
    PropertyType.APARTMENT.value: frozenset({
        'zimmer', 'badezimmer', 'balkone', 'etage',
    }) | _RENTAL_FIELDS,
    PropertyType.MULTI_FAMILY.value: frozenset({
        'grundstuecksflaeche', 'garage', 'keller', 'etagenanzahl',
        'anzahl_wohnungen', 'anzahl_gewerbeeinheiten',
        'leerstehende_wohnungen', 'leerstehende_gewerbe',
        'qm_leerstand_wohnungen', 'qm_leerstand_gewerbe',
    }) | _RENTAL_FIELDS,
    PropertyType.SINGLE_FAMILY.value: _HOUSE_FIELDS,
    PropertyType.SEMI_DETACHED.value: _HOUSE_FIELDS,
}


def _type_code(property_type) -> str:
    if isinstance(property_type, PropertyType):
        return property_type.value
    return PropertyType.normalize(property_type) or ''


def is_field_visible(field_name: str, property_type: Optional[str]) -> bool:
    """
    Whether a field is shown for a property type.

    Unknown types get the universal fields only; unknown field names are
    never visible.
    """
    if not isinstance(field_name, str):
        return False
    if field_name in UNIVERSAL_FIELDS:
        return True
    return field_name in TYPE_SPECIFIC_FIELDS.get(_type_code(property_type), frozenset())


def visible_fields(property_type: Optional[str]) -> List[str]:
    """All visible fields for a type, in catalog order"""
    return [name for name in CATALOG_ORDER if is_field_visible(name, property_type)]
