"""
Scan Controller Module.

Wires the scan services from configuration and arbitrates between the
two scan modes:

1. Live scanning: camera frames with the fast engine
2. Still image scanning: robust pre-pass + strategy list

Only one mode owns the camera at a time. Starting a still image scan
stops the live session; starting live scanning stops any previous one.
When a still image scan exhausts every strategy the controller returns
NOT_FOUND with user guidance and, when configured, resumes live scanning.

Follows:
- SRP: Only handles service wiring and mode arbitration
- DIP: Services receive parameters, not the config service
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from core.interfaces.camera_interface import CameraError, ICameraCapture
from core.interfaces.qr_decoder_interface import IQrDecoder
from core.strategy.strategy_orchestrator import DetectionOutcome, ScanProgress, ScanStatus
from services.impl.config_service import ConfigService
from services.impl.live_scan_service import LiveScanService
from services.impl.still_image_scan_service import StillImageScanService
from services.interfaces.scan_service_interface import ImageSource


NOT_FOUND_GUIDANCE = (
    "No QR code found in the image.\n\n"
    "Tips:\n"
    "- Ensure the QR code is clear and well-lit\n"
    "- Try retaking the photo with better focus\n"
    "- Crop the photo closer to the QR code\n"
    "- Upload the image to https://zxing.org/w/decode.jspx for server-side decoding"
)


@dataclass
class ScanReport:
    """
    Result of a still image scan as presented to the user.

    Attributes:
        outcome: Orchestrator outcome.
        message: Text for the user (decoded payload or guidance).
        liveRestarted: Whether live scanning was resumed afterwards.
    """
    outcome: DetectionOutcome
    message: str
    liveRestarted: bool = False

    @property
    def found(self) -> bool:
        return self.outcome.found

    def toDict(self) -> Dict:
        data = self.outcome.toDict()
        data["message"] = self.message
        data["liveRestarted"] = self.liveRestarted
        return data


class ScanController:
    """
    Creates the scan services and enforces live/still mutual exclusion.

    Responsibilities:
    - Initialize ConfigService
    - Create both scan services with parameters from config
    - Start, stop and restart live scanning
    - Run still image scans and build the user-facing report
    """

    def __init__(
        self,
        configPath: str = "config/application_config.json",
        camera: Optional[ICameraCapture] = None,
        fastDecoder: Optional[IQrDecoder] = None,
        liveDecoder: Optional[IQrDecoder] = None,
        robustDecoder: Optional[IQrDecoder] = None
    ):
        """
        Initialize the scan controller.

        Args:
            configPath: Path to the application configuration file.
            camera: Capture device override (default: OpenCVCamera).
            fastDecoder: Fast engine override for still image scans.
            liveDecoder: Fast engine override for live scanning.
            robustDecoder: Robust engine override for still image scans.
        """
        self._logger = logging.getLogger(__name__)

        self._configService = ConfigService(configPath)
        self._logger.info("ConfigService initialized")

        debugBasePath = self._configService.getDebugBasePath()
        debugEnabled = self._configService.isDebugEnabled()

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # Live Scan Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._liveScanService = LiveScanService(
            cameraIndex=self._configService.getCameraIndex(),
            frameWidth=self._configService.getFrameWidth(),
            frameHeight=self._configService.getFrameHeight(),
            maxCameraSearch=self._configService.getMaxCameraSearch(),
            frameIntervalMs=self._configService.getFrameIntervalMs(),
            fastBackend=self._configService.getFastDecoderBackend(),
            camera=camera,
            decoder=liveDecoder,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )
        self._logger.info("LiveScanService initialized")

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # Still Image Scan Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._stillImageScanService = StillImageScanService(
            fastBackend=self._configService.getFastDecoderBackend(),
            fastInvertPolicy=self._configService.getFastDecoderInvertPolicy(),
            robustEnabled=self._configService.isRobustDecoderEnabled(),
            robustTryHarder=self._configService.isRobustTryHarder(),
            robustScales=self._configService.getRobustScales(),
            includeSupplementary=self._configService.isSupplementaryStrategiesEnabled(),
            logProgress=self._configService.isProgressLoggingEnabled(),
            fastDecoder=fastDecoder,
            robustDecoder=robustDecoder,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )
        self._logger.info("StillImageScanService initialized")

        self._restartAfterNotFound = self._configService.isRestartAfterNotFound()
        self._stillScanLock = threading.Lock()

        self._logger.info("ScanController initialized successfully")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Service Access
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    @property
    def configService(self) -> ConfigService:
        return self._configService

    @property
    def liveScanService(self) -> LiveScanService:
        return self._liveScanService

    @property
    def stillImageScanService(self) -> StillImageScanService:
        return self._stillImageScanService

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Scan Modes
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def startLiveScan(self) -> int:
        """
        Start a live session, stopping any previous one first.

        Returns:
            int: Index of the opened camera.

        Raises:
            CameraError: If no camera could be acquired.
        """
        self._liveScanService.stop()
        return self._liveScanService.start()

    def stopLiveScan(self) -> None:
        self._liveScanService.stop()

    def isLiveScanActive(self) -> bool:
        return self._liveScanService.isActive()

    def scanImage(
        self,
        image: ImageSource,
        onProgress: Optional[Callable[[ScanProgress], None]] = None,
        shouldCancel: Optional[Callable[[], bool]] = None
    ) -> ScanReport:
        """
        Stop live scanning and run the still image rescue.

        Args:
            image: PixelBuffer, BGR ndarray or image file path.
            onProgress: Progress callback.
            shouldCancel: Cancellation poll.

        Returns:
            ScanReport with the decoded text or NOT_FOUND guidance.

        Raises:
            InvalidImageError: If the image is malformed or unreadable.
        """
        self._liveScanService.stop()

        with self._stillScanLock:
            outcome = self._stillImageScanService.scanImage(
                image, onProgress=onProgress, shouldCancel=shouldCancel
            )

        if outcome.status is ScanStatus.SUCCESS:
            return ScanReport(outcome=outcome, message=outcome.text)

        if outcome.status is ScanStatus.CANCELLED:
            return ScanReport(outcome=outcome, message="Scan cancelled.")

        report = ScanReport(outcome=outcome, message=NOT_FOUND_GUIDANCE)
        if self._restartAfterNotFound:
            try:
                self.startLiveScan()
                report.liveRestarted = True
            except CameraError as e:
                self._logger.warning(f"Live scan not resumed: {e.userMessage}")
        return report

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Debug Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def setDebugEnabled(self, enabled: bool) -> None:
        """Enable or disable debug output for every service."""
        self._configService.setDebugEnabled(enabled)
        self._liveScanService.setDebugEnabled(enabled)
        self._stillImageScanService.setDebugEnabled(enabled)

    def isDebugEnabled(self) -> bool:
        return self._configService.isDebugEnabled()

    def getDebugBasePath(self) -> str:
        return self._configService.getDebugBasePath()

    def shutdown(self) -> None:
        """Release the camera."""
        self._logger.info("Shutting down scan controller")
        self._liveScanService.stop()
