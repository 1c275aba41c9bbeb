"""
Services Interfaces Package.

Exports all service interfaces for QR Salvage.
"""

from services.interfaces.base_service_interface import (
    IBaseService,
    BaseService
)

from services.interfaces.config_service_interface import IConfigService

from services.interfaces.scan_service_interface import (
    ImageSource,
    ILiveScanService,
    IStillImageScanService
)


__all__ = [
    "IBaseService",
    "BaseService",
    "IConfigService",
    "ImageSource",
    "ILiveScanService",
    "IStillImageScanService",
]
