"""
Exposé Data Models
"""
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any
from enum import Enum

from ..utils.formatting import parse_number


class PropertyType(Enum):
    """Property types an exposé can describe"""
    APARTMENT = "wohnung"
    MULTI_FAMILY = "mehrfamilienhaus"
    SINGLE_FAMILY = "einfamilienhaus"
    SEMI_DETACHED = "doppelhaushaelfte"

    @classmethod
    def normalize(cls, value: Any) -> Optional[str]:
        """'Doppelhaushälfte' -> 'doppelhaushaelfte'; unknown values -> None"""
        if isinstance(value, cls):
            return value.value
        code = str(value or '').strip().lower()
        code = code.replace('ä', 'ae').replace('ö', 'oe').replace('ü', 'ue').replace('ß', 'ss')
        code = code.replace(' ', '').replace('-', '')
        try:
            return cls(code).value
        except ValueError:
            return None


# Every key a PropertyRecord carries, in form order.
RECORD_FIELDS = (
    'titel', 'adresse', 'lage', 'objekt_typ',
    'baujahr', 'wohnflaeche', 'grundstuecksflaeche',
    'zimmer', 'badezimmer', 'balkone', 'etage', 'etagenanzahl',
    'anzahl_garagen', 'anzahl_stellplaetze', 'garage', 'keller',
    'letzte_sanierung', 'bauzustand',
    'anzahl_wohnungen', 'anzahl_gewerbeeinheiten',
    'leerstehende_wohnungen', 'leerstehende_gewerbe',
    'qm_leerstand_wohnungen', 'qm_leerstand_gewerbe',
    'verkaufspreis', 'ist_miete', 'soll_miete', 'ist_faktor', 'soll_faktor',
    'betriebskosten_hausgeld', 'maklercourtage',
    'heizungsart', 'energietraeger', 'energieausweis_art',
    'energiebedarf', 'energieeffizienzklasse',
    'kurzbeschreibung', 'langbeschreibung', 'ausstattung', 'lage_beschreibung',
    'kontakt_name', 'kontakt_tel', 'kontakt_email', 'kontakt_firma', 'kontakt_web',
    'watermark_text', 'titelbild_index',
)

DERIVED_FIELDS = ('ist_faktor', 'soll_faktor')

# Keys older drafts and CSV exports use for the same fields
FIELD_ALIASES = {
    'objektTyp': 'objekt_typ',
    'objekttyp': 'objekt_typ',
    'titelbildIndex': 'titelbild_index',
    'nebenkosten': 'betriebskosten_hausgeld',
    'faktor': 'ist_faktor',
}


def normalize_record(data: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    Coerce arbitrary input into a PropertyRecord.

    None becomes '', every other value its str(); alias keys are renamed
    and the property type is normalized when recognisable.
    """
    record: Dict[str, str] = {}
    for key, value in (data or {}).items():
        key = FIELD_ALIASES.get(str(key), str(key))
        record[key] = '' if value is None else str(value).strip()

    if record.get('objekt_typ'):
        record['objekt_typ'] = PropertyType.normalize(record['objekt_typ']) or record['objekt_typ']
    return record


def new_record(**values: Any) -> Dict[str, str]:
    """Empty record with every known key, defaulting to an apartment"""
    record = {name: '' for name in RECORD_FIELDS}
    record['objekt_typ'] = PropertyType.APARTMENT.value
    record.update(normalize_record(values))
    return record


def _get(data: Dict[str, Any], *keys, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class OptimizationSettings:
    """Photo pipeline settings, captured once per upload batch"""
    max_width: int = 1920
    max_height: int = 1280
    contrast_strength: float = 0.9
    sharpen: bool = True
    brightness: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'OptimizationSettings':
        """Build settings from camelCase or snake_case keys, clamping out-of-range values"""
        data = data or {}
        defaults = cls()

        def positive_int(value, fallback):
            number = parse_number(value)
            if number is None or number <= 0:
                return fallback
            return int(number)

        max_width = positive_int(_get(data, 'max_width', 'maxWidth'), defaults.max_width)
        max_height = positive_int(_get(data, 'max_height', 'maxHeight'), defaults.max_height)

        contrast = parse_number(_get(data, 'contrast_strength', 'contrastStrength'))
        contrast = defaults.contrast_strength if contrast is None else max(0.0, min(1.0, contrast))

        brightness = parse_number(_get(data, 'brightness'))
        brightness = defaults.brightness if brightness is None else int(max(-50, min(50, round(brightness))))

        sharpen = _get(data, 'sharpen', default=defaults.sharpen)
        if isinstance(sharpen, str):
            sharpen = sharpen.strip().lower() in ('1', 'true', 'yes', 'on')

        return cls(
            max_width=max_width,
            max_height=max_height,
            contrast_strength=contrast,
            sharpen=bool(sharpen),
            brightness=brightness,
        )


@dataclass(frozen=True)
class EnergyCertificateInfo:
    """Energy certificate (Energieausweis) data as returned by a parser"""
    certificate_type: str = ""
    valid_until: str = ""
    energy_efficiency_class: str = ""
    heating_type: str = ""
    construction_year: str = ""
    energy_demand: Optional[float] = None
    energy_consumption: Optional[float] = None
    primary_energy_demand: Optional[float] = None
    energy_sources: List[str] = field(default_factory=list)
    building_type: str = ""
    is_residential: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EnergyCertificateInfo':
        """Create from a parser payload (camelCase or snake_case keys)"""
        sources = _get(data, 'energy_sources', 'energySources', default=[])
        if isinstance(sources, str):
            sources = [s.strip() for s in sources.split(',') if s.strip()]

        return cls(
            certificate_type=str(_get(data, 'certificate_type', 'type', default='')),
            valid_until=str(_get(data, 'valid_until', 'validUntil', default='')),
            energy_efficiency_class=str(_get(data, 'energy_efficiency_class', 'energyEfficiencyClass', default='')),
            heating_type=str(_get(data, 'heating_type', 'heatingType', default='')),
            construction_year=str(_get(data, 'construction_year', 'constructionYear', default='')),
            energy_demand=parse_number(_get(data, 'energy_demand', 'energyDemand')),
            energy_consumption=parse_number(_get(data, 'energy_consumption', 'energyConsumption')),
            primary_energy_demand=parse_number(_get(data, 'primary_energy_demand', 'primaryEnergyDemand')),
            energy_sources=list(sources),
            building_type=str(_get(data, 'building_type', 'buildingType', default='')),
            is_residential=bool(_get(data, 'is_residential', 'isResidential', default=True)),
        )


@dataclass
class SavedExpose:
    """A stored draft: property data, photos and the file name it is saved under"""
    id: str
    file_name: str
    address: str
    label: str
    created_at: str
    updated_at: str
    data: Dict[str, str] = field(default_factory=dict)
    photos: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> Dict[str, Any]:
        """Listing view without the heavy photo payload"""
        return {
            'id': self.id,
            'file_name': self.file_name,
            'address': self.address,
            'label': self.label,
            'title': self.data.get('titel', ''),
            'photo_count': len(self.photos),
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }
