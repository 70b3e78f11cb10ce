"""
Energy certificate (Energieausweis) merge.

Reading the certificate document is a collaborator's job; this module only
defines what a parser must return and how the result lands in a record.
"""
import json
import logging
from typing import Any, Dict, Optional, Protocol

from ..models.expose import EnergyCertificateInfo

LOGGER = logging.getLogger(__name__)


class CertificateParser(Protocol):
    def parse(self, document: Any) -> EnergyCertificateInfo:
        ...


class JsonCertificateParser:
    """Parser for certificate data already extracted to JSON (camelCase or snake_case)"""

    def parse(self, document: Any) -> EnergyCertificateInfo:
        if isinstance(document, (bytes, bytearray)):
            document = document.decode('utf-8')
        if isinstance(document, str):
            document = json.loads(document)
        if not isinstance(document, dict):
            raise ValueError("certificate document must be a JSON object")
        return EnergyCertificateInfo.from_dict(document)


def _number_text(value: Optional[float]) -> str:
    if value is None:
        return ''
    return str(int(value)) if value == int(value) else str(value)


def merge_certificate(record: Dict[str, str], info: EnergyCertificateInfo) -> Dict[str, str]:
    """
    Copy of `record` with the certificate data merged in.

    Heating type and construction year always overwrite the record; the
    certificate type, efficiency class and energy demand are filled when
    the certificate carries them.
    """
    updated = dict(record)
    updated['heizungsart'] = info.heating_type or ''
    updated['baujahr'] = info.construction_year or ''

    if info.certificate_type:
        updated['energieausweis_art'] = info.certificate_type
    if info.energy_efficiency_class:
        updated['energieeffizienzklasse'] = info.energy_efficiency_class

    demand = info.energy_demand if info.energy_demand is not None else info.energy_consumption
    if demand is not None:
        updated['energiebedarf'] = _number_text(demand)
    return updated


def parse_certificate_safely(parser: CertificateParser, document: Any) -> Optional[EnergyCertificateInfo]:
    """Run the parser; any failure is logged and yields None so the record stays untouched"""
    try:
        info = parser.parse(document)
    except Exception as e:
        LOGGER.warning("energy certificate could not be parsed: %s", e)
        return None

    if isinstance(info, dict):
        info = EnergyCertificateInfo.from_dict(info)
    if not isinstance(info, EnergyCertificateInfo):
        LOGGER.warning("energy certificate parser returned %s", type(info).__name__)
        return None
    return info
