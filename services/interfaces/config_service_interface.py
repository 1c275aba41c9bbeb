"""
Config Service Interface Module.

Defines the interface for centralized configuration management.
The config service loads and provides access to decoder, orchestrator,
live scan and debug settings.

Follows:
- SRP: Only handles configuration management
- DIP: The scan controller depends on this abstraction
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class IConfigService(ABC):
    """
    Interface for configuration management.

    Provides centralized access to all application configuration.
    Supports dot notation for nested config access.
    """

    @abstractmethod
    def loadConfig(self, configPath: str) -> bool:
        """
        Load configuration from a JSON file.

        Args:
            configPath: Path to the configuration file.

        Returns:
            bool: True if loaded successfully, False otherwise.
        """
        pass

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by key.

        Supports dot notation for nested access:
        - "fast_decoder" -> config["fast_decoder"]
        - "live_scan.cameraIndex" -> config["live_scan"]["cameraIndex"]

        Args:
            key: Configuration key (supports dot notation).
            default: Default value if key not found.

        Returns:
            Configuration value or default.
        """
        pass

    @abstractmethod
    def getSectionConfig(self, section: str) -> Dict[str, Any]:
        """
        Get all configuration of one top-level section.

        Args:
            section: Section name (e.g., "live_scan", "robust_decoder").

        Returns:
            Dictionary with the section's configuration (empty if absent).
        """
        pass

    @abstractmethod
    def getDebugBasePath(self) -> str:
        pass

    @abstractmethod
    def isDebugEnabled(self) -> bool:
        pass

    @abstractmethod
    def setDebugEnabled(self, enabled: bool) -> None:
        """
        Enable or disable debug mode globally.

        Args:
            enabled: True to enable debug mode.
        """
        pass

    @abstractmethod
    def getAllConfig(self) -> Dict[str, Any]:
        pass
