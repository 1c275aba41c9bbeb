"""
Config Service Implementation.

Centralized configuration management for QR Salvage.
Loads configuration from application_config.json organized by section:
fast_decoder, robust_decoder, orchestrator, live_scan, debug.

Follows:
- SRP: Only handles configuration management
- DIP: Provides configuration to the scan controller via interface
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List


from services.interfaces.config_service_interface import IConfigService


logger = logging.getLogger(__name__)


class ConfigService(IConfigService):
    """
    Implementation of IConfigService.

    Loads and manages application configuration from application_config.json.
    Typed getters fall back to the documented defaults when a key is absent.
    """

    def __init__(self, configPath: str = "config/application_config.json"):
        """
        Initialize ConfigService.

        Args:
            configPath: Path to the configuration file.

        Raises:
            RuntimeError: If the file is missing or not valid JSON.
        """
        self._config: Dict[str, Any] = {}
        self._configPath = Path(configPath)
        self._debugEnabled = False

        if not self.loadConfig(configPath):
            raise RuntimeError(f"Failed to load configuration from: {configPath}")

    def loadConfig(self, configPath: str) -> bool:
        """Load configuration from JSON file."""
        try:
            path = Path(configPath)
            if not path.exists():
                logger.error(f"Config file not found: {configPath}")
                return False

            with open(path, 'r', encoding='utf-8') as f:
                config = json.load(f)

            if not isinstance(config, dict):
                logger.error(f"Config root must be a JSON object: {configPath}")
                return False

            self._config = config
            self._debugEnabled = self.get("debug.enabled", False)

            logger.info(f"Configuration loaded from: {path.absolute()}")
            return True

        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in config file: {e}")
            return False
        except OSError as e:
            logger.error(f"Failed to load config: {e}")
            return False

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Generic Config Access
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key with dot notation support.

        Examples:
            get("fast_decoder.backend") -> "pyzbar"
            get("live_scan.cameraIndex") -> 0
            get("robust_decoder.enabled") -> True
        """
        value = self._config
        for part in key.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(part)
            if value is None:
                return default
        return value

    def getSectionConfig(self, section: str) -> Dict[str, Any]:
        config = self._config.get(section, {})
        return config if isinstance(config, dict) else {}

    def getAllConfig(self) -> Dict[str, Any]:
        return self._config.copy()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Debug Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getDebugBasePath(self) -> str:
        """Get base path for debug output."""
        return self.get("debug.basePath", "output/debug")

    def isDebugEnabled(self) -> bool:
        return self._debugEnabled

    def setDebugEnabled(self, enabled: bool) -> None:
        """Enable or disable debug mode at runtime."""
        self._debugEnabled = enabled
        logger.info(f"Debug mode {'enabled' if enabled else 'disabled'}")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Fast Decoder Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getFastDecoderBackend(self) -> str:
        """
        Get fast engine backend.

        Returns:
            str: "pyzbar" (default) or "opencv".
        """
        return str(self.get("fast_decoder.backend", "pyzbar")).lower()

    def getFastDecoderInvertPolicy(self) -> str:
        """Get polarity search of the fast engine for still images."""
        return self.get("fast_decoder.invertPolicy", "attemptBoth")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Robust Decoder Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def isRobustDecoderEnabled(self) -> bool:
        return self.get("robust_decoder.enabled", True)

    def isRobustTryHarder(self) -> bool:
        """Check if exhaustive search is enabled for the robust engine."""
        return self.get("robust_decoder.tryHarder", True)

    def getRobustScales(self) -> List[float]:
        """Get scale factors of the robust pre-pass."""
        return [float(scale) for scale in self.get("robust_decoder.scales", [1.0, 0.75, 0.5, 1.5, 2.0])]

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Orchestrator Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def isSupplementaryStrategiesEnabled(self) -> bool:
        """Check if the opt-in strategies are appended to the default list."""
        return self.get("orchestrator.includeSupplementary", False)

    def isProgressLoggingEnabled(self) -> bool:
        return self.get("orchestrator.logProgress", True)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Live Scan Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getCameraIndex(self) -> int:
        """Get preferred camera index."""
        return self.get("live_scan.cameraIndex", 0)

    def getFrameWidth(self) -> int:
        """Get camera frame width."""
        return self.get("live_scan.frameWidth", 640)

    def getFrameHeight(self) -> int:
        """Get camera frame height."""
        return self.get("live_scan.frameHeight", 480)

    def getMaxCameraSearch(self) -> int:
        """Get number of camera indices tried when falling back."""
        return self.get("live_scan.maxCameraSearch", 2)

    def getFrameIntervalMs(self) -> int:
        """Get delay between live frames in milliseconds."""
        return self.get("live_scan.frameIntervalMs", 30)

    def isRestartAfterNotFound(self) -> bool:
        """Check if live scanning resumes after a still image scan misses."""
        return self.get("live_scan.restartAfterNotFound", True)
