"""
Number parsing and display formatting

Input values arrive as free text ("749.000 €", "3,5 %", "1.250,50").
Parsing follows the German convention (comma = decimal separator) and
never produces NaN or infinity: anything unparseable is absent (None).
"""
import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Union

_KEEP = re.compile(r'[^0-9,.\-]')
_THOUSANDS_ONLY = re.compile(r'^[1-9]\d{0,2}\.\d{3}$')

EMPTY_VALUES = ('', '0', '-')


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a user supplied number.

    Args:
        value: str, int, float or None

    Returns:
        float, or None when the value is missing, unparseable or not finite
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None

    cleaned = _KEEP.sub('', str(value))
    negative = cleaned.startswith('-')
    if negative:
        cleaned = cleaned[1:]
    # '300.000,-' is a price with no cents; any other dash is not a number
    if cleaned.endswith((',-', '.-')):
        cleaned = cleaned[:-1]
    if '-' in cleaned:
        return None
    cleaned = cleaned.strip('.,')
    if not cleaned or not any(ch.isdigit() for ch in cleaned):
        return None

    has_comma = ',' in cleaned
    has_point = '.' in cleaned

    if has_comma and has_point:
        decimal_sep = ',' if cleaned.rfind(',') > cleaned.rfind('.') else '.'
        group_sep = '.' if decimal_sep == ',' else ','
        if cleaned.count(decimal_sep) > 1:
            return None
        cleaned = cleaned.replace(group_sep, '').replace(decimal_sep, '.')
    elif has_comma:
        if cleaned.count(',') == 1:
            cleaned = cleaned.replace(',', '.')
        else:
            cleaned = cleaned.replace(',', '')
    elif has_point:
        if cleaned.count('.') > 1 or _THOUSANDS_ONLY.match(cleaned):
            cleaned = cleaned.replace('.', '')

    try:
        number = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return -number if negative else number


def is_empty_value(value: Any) -> bool:
    """True for values the fact tables suppress: None, '', '0', '-' or whitespace"""
    if value is None:
        return True
    text = str(value).strip()
    return text in EMPTY_VALUES


def _group_thousands(number: Union[int, float], decimals: int = 0) -> str:
    # Python groups with ',' and uses '.' as decimal point; swap for de-DE.
    formatted = f"{number:,.{decimals}f}"
    return formatted.replace(',', '\x00').replace('.', ',').replace('\x00', '.')


def format_currency(value: Any) -> str:
    """'749000' -> '749.000 €'; unparseable input is returned unchanged"""
    number = parse_number(value)
    if number is None:
        return '' if value is None else str(value)
    return f"{_group_thousands(round_half_up(number, 0))} €"


def format_percent(value: Any) -> str:
    """'4' -> '4.00%'"""
    number = parse_number(value)
    if number is None:
        return ''
    return f"{round_half_up(number, 2):.2f}%"


def format_price_per_area(value: Any) -> str:
    """'3000' -> '3000€/m²'"""
    number = parse_number(value)
    if number is None:
        return ''
    return f"{round_half_up(number, 0):.0f}€/m²"


def format_area(value: Any) -> str:
    number = parse_number(value)
    if number is None:
        return ''
    return f"{_trim(number)}m²"


def format_energy(value: Any) -> str:
    number = parse_number(value)
    if number is None:
        return ''
    return f"{_trim(number)} kWh/(m²·a)"


def _trim(number: float) -> str:
    if number == int(number):
        return str(int(number))
    return f"{number:.2f}".rstrip('0').rstrip('.').replace('.', ',')


def round_half_up(number: float, decimals: int) -> float:
    """Commercial rounding (2.345 -> 2.35), unlike Python's banker's round()"""
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(number)).quantize(quantum, rounding=ROUND_HALF_UP))
