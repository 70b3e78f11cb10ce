"""
Services module for the Exposé Builder
Contains the business logic: derived fields, editing, assembly, localisation.
"""

from .i18n import (
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
    get_language,
    translate,
    field_label,
    get_dictionary,
    normalize_language,
)

__all__ = [
    'SUPPORTED_LANGUAGES',
    'DEFAULT_LANGUAGE',
    'get_language',
    'translate',
    'field_label',
    'get_dictionary',
    'normalize_language',
]
