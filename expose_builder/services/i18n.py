"""
Localization helpers for DE/EN labels, table titles and user messages.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional


LOGGER = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("de", "en")
DEFAULT_LANGUAGE = "de"

_I18N_DIR = Path(__file__).resolve().parent.parent / "i18n"


def normalize_language(lang: Optional[str]) -> str:
    value = (lang or "").strip().lower()
    if value in SUPPORTED_LANGUAGES:
        return value
    if value.startswith("de"):
        return "de"
    if value.startswith("en"):
        return "en"
    return DEFAULT_LANGUAGE


@lru_cache(maxsize=8)
def load_dictionary(lang: str) -> Dict[str, Any]:
    normalized = normalize_language(lang)
    path = _I18N_DIR / f"{normalized}.json"
    if not path.exists():
        LOGGER.warning("i18n dictionary not found for lang=%s at %s", normalized, path)
        return {}
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        LOGGER.warning("failed to load i18n dictionary lang=%s: %s", normalized, exc)
        return {}


def get_dictionary(lang: Optional[str]) -> Dict[str, Any]:
    return load_dictionary(normalize_language(lang))


def _lookup_key(data: Dict[str, Any], key: str) -> Any:
    if not isinstance(data, dict):
        return None
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def translate(
    key: str,
    lang: Optional[str] = None,
    default: Optional[str] = None,
    **vars: Any,
) -> str:
    normalized = normalize_language(lang)
    value = _lookup_key(get_dictionary(normalized), key)
    if value is None and normalized != DEFAULT_LANGUAGE:
        value = _lookup_key(get_dictionary(DEFAULT_LANGUAGE), key)
    if not isinstance(value, str):
        value = default if default is not None else key

    if vars:
        try:
            value = value.format(**vars)
        except (KeyError, IndexError, ValueError):
            # Keep untranslated value if template variables mismatch.
            pass
    return value


def field_label(field_name: str, lang: Optional[str] = None) -> str:
    """Display label of a PropertyRecord field; the key itself when unknown"""
    return translate(f"fields.{field_name}", lang, default=field_name)


def detect_accept_language(header_value: Optional[str]) -> str:
    """Pick the first supported language from an Accept-Language header"""
    raw = (header_value or "").lower()
    if not raw:
        return DEFAULT_LANGUAGE
    for part in raw.split(","):
        tag = part.split(";")[0].strip()
        if tag.startswith("de"):
            return "de"
        if tag.startswith("en"):
            return "en"
    return DEFAULT_LANGUAGE


def get_language(request_obj=None, explicit: Optional[str] = None) -> str:
    """Language from an explicit choice, else the request header, else the default"""
    if explicit:
        return normalize_language(explicit)
    if request_obj is not None:
        return detect_accept_language(request_obj.headers.get("Accept-Language"))
    return DEFAULT_LANGUAGE
