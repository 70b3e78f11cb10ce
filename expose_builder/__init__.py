"""
Exposé Builder
Real-estate exposé editor: property data, photo pipeline, preview and PDF export
"""

__version__ = '1.0.0'
