"""
Services Implementation Package.

Exports all service implementations for QR Salvage.
"""

from services.impl.config_service import ConfigService
from services.impl.live_scan_service import LiveScanService
from services.impl.still_image_scan_service import StillImageScanService


__all__ = [
    "ConfigService",
    "LiveScanService",
    "StillImageScanService",
]
