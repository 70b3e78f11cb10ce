"""
Exposé data models
"""
from .expose import (
    PropertyType,
    OptimizationSettings,
    EnergyCertificateInfo,
    SavedExpose,
    RECORD_FIELDS,
    DERIVED_FIELDS,
    normalize_record,
    new_record,
)
from .fields import UNIVERSAL_FIELDS, TYPE_SPECIFIC_FIELDS, is_field_visible, visible_fields
from .photos import PhotoCollection, PhotoBatchResult, MAX_PHOTOS

__all__ = [
    'PropertyType', 'OptimizationSettings', 'EnergyCertificateInfo', 'SavedExpose',
    'RECORD_FIELDS', 'DERIVED_FIELDS', 'normalize_record', 'new_record',
    'UNIVERSAL_FIELDS', 'TYPE_SPECIFIC_FIELDS', 'is_field_visible', 'visible_fields',
    'PhotoCollection', 'PhotoBatchResult', 'MAX_PHOTOS',
]
