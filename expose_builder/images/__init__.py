"""
Image processing module for exposé photos.
Handles resizing, auto-levels, sharpening, brightness, watermarks and cover scoring.
"""

from .processor import ImageProcessor, ImageDecodeError, OptimizedImage
from .watermark import WatermarkStyle

__all__ = ['ImageProcessor', 'ImageDecodeError', 'OptimizedImage', 'WatermarkStyle']
