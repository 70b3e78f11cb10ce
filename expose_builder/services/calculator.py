"""
Derived-field calculator

Pure functions computing the financial key figures of an exposé from its
text inputs. Every result is a machine-format string ('.' decimal point)
or '' when an input is missing, unparseable or out of range; NaN and
infinity never reach the caller.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, Optional

from ..utils.formatting import parse_number

MONTHS_PER_YEAR = 12


def _round(value: float, decimals: int) -> str:
    quantum = Decimal(1).scaleb(-decimals)
    try:
        return str(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return ''


def rent_multiple(price: Any, monthly_rent: Any) -> str:
    """Purchase price as a multiple of the annual rent (Faktor), two decimals"""
    price = parse_number(price)
    rent = parse_number(monthly_rent)
    if price is None or rent is None or price <= 0 or rent <= 0:
        return ''
    return _round(price / (rent * MONTHS_PER_YEAR), 2)


def gross_yield_percent(price: Any, monthly_rent: Any) -> str:
    """Annual rent over price in percent (Bruttomietrendite), two decimals"""
    price = parse_number(price)
    rent = parse_number(monthly_rent)
    if price is None or rent is None or price <= 0 or rent <= 0:
        return ''
    return _round(rent * MONTHS_PER_YEAR / price * 100, 2)


def price_per_area(price: Any, area: Any) -> str:
    """Price per m², whole number"""
    price = parse_number(price)
    area = parse_number(area)
    if price is None or area is None or area <= 0:
        return ''
    return _round(price / area, 0)


def commission_amount(price: Any, percent: Any) -> str:
    """Commission in EUR from the price and the commission percentage"""
    price = parse_number(price)
    percent = parse_number(percent)
    if price is None or percent is None:
        return ''
    return _round(price * percent / 100, 2)


@dataclass(frozen=True)
class DerivedFields:
    """All values computed from a PropertyRecord"""
    ist_faktor: str = ''
    soll_faktor: str = ''
    gross_yield: str = ''
    price_per_area: str = ''
    commission: str = ''

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def compute_derived(record: Optional[Dict[str, Any]]) -> DerivedFields:
    record = record or {}
    price = record.get('verkaufspreis')
    return DerivedFields(
        ist_faktor=rent_multiple(price, record.get('ist_miete')),
        soll_faktor=rent_multiple(price, record.get('soll_miete')),
        gross_yield=gross_yield_percent(price, record.get('ist_miete')),
        price_per_area=price_per_area(price, record.get('wohnflaeche')),
        commission=commission_amount(price, record.get('maklercourtage')),
    )


def recompute(record: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Copy of `record` with the stored multiples refreshed. Idempotent."""
    updated = dict(record or {})
    derived = compute_derived(updated)
    updated['ist_faktor'] = derived.ist_faktor
    updated['soll_faktor'] = derived.soll_faktor
    return updated
