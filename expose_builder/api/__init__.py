"""
External collaborators: configuration and geocoding
"""
from .client import GeocodingClient, GeocodingError, Coordinates
from .config import Config

__all__ = ['GeocodingClient', 'GeocodingError', 'Coordinates', 'Config']
