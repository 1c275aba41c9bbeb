"""
Image module.

Provides:
- PixelBuffer: RGBA raster shared by all pipeline stages
- loadImageFile: Still image file decoding
- GeometricResampler: Scale-factor resizing
"""

from core.image.pixel_buffer import (
    PixelBuffer,
    InvalidImageError,
    loadImageFile
)
from core.image.resampler import GeometricResampler, InvalidScaleError

__all__ = [
    'PixelBuffer',
    'InvalidImageError',
    'loadImageFile',
    'GeometricResampler',
    'InvalidScaleError',
]
