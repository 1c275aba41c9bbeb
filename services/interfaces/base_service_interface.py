"""
Base Service Interface Module.

Defines the base interface shared by the scan services: service
identification, debug output and timing.

Follows:
- ISP (Interface Segregation Principle): Minimal base interface
- DIP (Dependency Inversion Principle): High-level modules depend on abstractions
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Any, Dict
from pathlib import Path
import logging
import json
import time

import numpy as np


class IBaseService(ABC):
    """
    Base interface for all scan services.

    Provides common functionality for:
    - Service identification
    - Debug output management
    - Timing measurement
    """

    @abstractmethod
    def getServiceName(self) -> str:
        """
        Get the service name for logging and debug output.

        Returns:
            str: Service name (e.g., "live_scan", "still_scan")
        """
        pass

    @abstractmethod
    def setDebugEnabled(self, enabled: bool) -> None:
        """
        Enable or disable debug output.

        Args:
            enabled: True to enable debug output, False to disable.
        """
        pass

    @abstractmethod
    def isDebugEnabled(self) -> bool:
        pass


class BaseService(IBaseService):
    """
    Base implementation for scan services.

    Not an interface but a helper base class: concrete services inherit
    the debug file layout (<debugBasePath>/<serviceName>/...), the
    per-service logger and the timing helpers.
    """

    def __init__(
        self,
        serviceName: str,
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        """
        Initialize BaseService.

        Args:
            serviceName: Name of the service (e.g., "still_scan").
            debugBasePath: Base path for debug output.
            debugEnabled: Whether debug output is enabled.
        """
        self._serviceName = serviceName
        self._debugBasePath = Path(debugBasePath) / serviceName
        self._debugEnabled = debugEnabled
        self._logger = logging.getLogger(serviceName)

        if debugEnabled:
            self._ensureDebugDirectory()

    def getServiceName(self) -> str:
        return self._serviceName

    def setDebugEnabled(self, enabled: bool) -> None:
        """Enable or disable debug output."""
        self._debugEnabled = enabled
        if enabled:
            self._ensureDebugDirectory()
        self._logger.info(f"Debug {'enabled' if enabled else 'disabled'}")

    def isDebugEnabled(self) -> bool:
        return self._debugEnabled

    def _ensureDebugDirectory(self, subdirectory: str = "") -> Path:
        """Create (sub)directory of the debug path if it doesn't exist."""
        path = self._debugBasePath / subdirectory if subdirectory else self._debugBasePath
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _newScanId(self, prefix: str = "scan") -> str:
        """
        Generate a timestamp-based identifier for debug file naming.

        Example: "scan_20251218_024810_535"
        """
        now = datetime.now()
        timestamp = now.strftime("%Y%m%d_%H%M%S") + f"_{now.microsecond // 1000:03d}"
        return f"{prefix}_{timestamp}"

    def _saveDebugImage(
        self,
        scanId: str,
        image: Optional[np.ndarray],
        prefix: str = "",
        subdirectory: str = ""
    ) -> Optional[str]:
        """
        Save debug image (BGR or grayscale ndarray) with consistent naming.

        Args:
            scanId: Scan identifier for naming.
            image: Image to save.
            prefix: Optional prefix for filename.
            subdirectory: Optional subdirectory under the service debug path.

        Returns:
            Saved file path, or None if debug is disabled or failed.
        """
        if not self._debugEnabled or image is None:
            return None

        try:
            import cv2
            directory = self._ensureDebugDirectory(subdirectory)
            filename = f"{prefix}_{scanId}.png" if prefix else f"{scanId}.png"
            filepath = directory / filename
            cv2.imwrite(str(filepath), image)
            self._logger.debug(f"Saved debug image: {filepath}")
            return str(filepath)
        except Exception as e:
            self._logger.warning(f"Failed to save debug image: {e}")
            return None

    def _saveDebugJson(self, scanId: str, data: Dict[str, Any], prefix: str = "") -> Optional[str]:
        """
        Save debug JSON with consistent naming.

        Args:
            scanId: Scan identifier for naming.
            data: Data to save as JSON.
            prefix: Optional prefix for filename.

        Returns:
            Saved file path, or None if debug is disabled or failed.
        """
        if not self._debugEnabled:
            return None

        try:
            directory = self._ensureDebugDirectory()
            filename = f"{prefix}_{scanId}.json" if prefix else f"{scanId}.json"
            filepath = directory / filename
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            self._logger.debug(f"Saved debug JSON: {filepath}")
            return str(filepath)
        except Exception as e:
            self._logger.warning(f"Failed to save debug JSON: {e}")
            return None

    def _logTiming(self, scanId: str, processingTimeMs: float) -> None:
        self._logger.info(f"[{scanId}] Processing time: {processingTimeMs:.2f}ms")

    def _measureTime(self, startTime: float) -> float:
        """
        Calculate elapsed time in milliseconds.

        Args:
            startTime: Start time from time.time().

        Returns:
            Elapsed time in milliseconds.
        """
        return (time.time() - startTime) * 1000
