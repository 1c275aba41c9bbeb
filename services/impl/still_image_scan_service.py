"""
Still Image Scan Service Implementation.

Runs the multi-strategy QR rescue on a user-supplied still image.
Creates the decoders through the factory and owns one StrategyOrchestrator.

Follows:
- SRP: Only handles still image scanning
- DIP: Depends on IQrDecoder abstraction (interface)
- Factory Pattern: Uses createQrDecoder() for backend selection
"""

import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import numpy as np

from core.image.pixel_buffer import PixelBuffer, InvalidImageError, loadImageFile
from core.interfaces.qr_decoder_interface import IQrDecoder
from core.qr import createQrDecoder
from core.strategy.strategy import (
    Strategy,
    DEFAULT_STRATEGIES,
    SUPPLEMENTARY_STRATEGIES,
    ROBUST_PREPASS_SCALES
)
from core.strategy.strategy_orchestrator import (
    StrategyOrchestrator,
    DecodeAttempt,
    DetectionOutcome,
    ScanProgress
)
from services.interfaces.scan_service_interface import IStillImageScanService, ImageSource
from services.interfaces.base_service_interface import BaseService


class StillImageScanService(IStillImageScanService, BaseService):
    """
    Still Image Scan Service Implementation.

    Robust pre-pass first, then the ordered strategy list with the fast
    engine. When the robust engine is enabled but not installed the
    service logs a warning and runs the strategy list alone.

    Debug output (when enabled):
    - inputs/<attempt>_<scanId>.png: buffer handed to each decoder call
    - outcome_<scanId>.json: outcome and every attempt
    """

    SERVICE_NAME = "still_scan"

    def __init__(
        self,
        # Fast engine params
        fastBackend: str = "pyzbar",
        fastInvertPolicy: str = "attemptBoth",

        # Robust engine params (prefixed with 'robust')
        robustEnabled: bool = True,
        robustTryHarder: bool = True,
        robustScales: Sequence[float] = ROBUST_PREPASS_SCALES,

        # Orchestrator params
        includeSupplementary: bool = False,
        logProgress: bool = True,

        # Pre-built engines (override the backend params)
        fastDecoder: Optional[IQrDecoder] = None,
        robustDecoder: Optional[IQrDecoder] = None,

        # Debug settings
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        """
        Initialize StillImageScanService.

        Args:
            fastBackend: Fast engine backend ("pyzbar" or "opencv").
            fastInvertPolicy: Polarity search of the fast engine.
            robustEnabled: Run the robust pre-pass.
            robustTryHarder: (zxing) Exhaustive search.
            robustScales: Scale factors of the robust pre-pass.
            includeSupplementary: Append the opt-in strategies.
            logProgress: Log every progress event at info level.
            fastDecoder: Use this engine instead of creating one.
            robustDecoder: Use this engine instead of creating one.
            debugBasePath: Base path for debug output.
            debugEnabled: Whether to save debug output.
        """
        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        if fastDecoder is None:
            fastDecoder = createQrDecoder(backend=fastBackend, invertPolicy=fastInvertPolicy)

        if robustEnabled and robustDecoder is None:
            robustDecoder = self._createRobustDecoder(robustTryHarder)
        elif not robustEnabled:
            robustDecoder = None

        strategies: List[Strategy] = list(DEFAULT_STRATEGIES)
        if includeSupplementary:
            strategies.extend(SUPPLEMENTARY_STRATEGIES)

        self._orchestrator = StrategyOrchestrator(
            fastDecoder=fastDecoder,
            robustDecoder=robustDecoder,
            strategies=strategies,
            robustScales=robustScales
        )
        self._logProgress = logProgress

        self._logger.info(
            f"StillImageScanService initialized "
            f"(fast={fastDecoder.backendName}, "
            f"robust={robustDecoder.backendName if robustDecoder else 'disabled'}, "
            f"strategies={len(strategies)})"
        )

    def _createRobustDecoder(self, tryHarder: bool) -> Optional[IQrDecoder]:
        try:
            return createQrDecoder(backend="zxing", zxingTryHarder=tryHarder)
        except ImportError as e:
            self._logger.warning(f"Robust pre-pass disabled: {e}")
            return None

    @property
    def orchestrator(self) -> StrategyOrchestrator:
        return self._orchestrator

    def scanImage(
        self,
        image: ImageSource,
        onProgress: Optional[Callable[[ScanProgress], None]] = None,
        shouldCancel: Optional[Callable[[], bool]] = None
    ) -> DetectionOutcome:
        """
        Find and decode a QR code in a still image.

        Debug image saving is included in the orchestrator timing since it
        happens between attempts.
        """
        scanId = self._newScanId()
        buffer = self._toPixelBuffer(image)

        self._logger.info(f"[{scanId}] Scanning {buffer.width}x{buffer.height} image")

        def reportProgress(progress: ScanProgress) -> None:
            if self._logProgress:
                self._logger.info(
                    f"[{scanId}] {progress.phase.value} "
                    f"{progress.strategyIndex}/{progress.strategyCount}: {progress.strategyName}"
                )
            if onProgress is not None:
                onProgress(progress)

        def saveAttemptInput(attempt: DecodeAttempt, preprocessed: PixelBuffer) -> None:
            self._saveDebugImage(
                scanId,
                preprocessed.toBgr(),
                prefix=f"{attempt.phase.value}_{attempt.index:02d}",
                subdirectory="inputs"
            )

        startTime = time.time()
        outcome = self._orchestrator.detect(
            buffer,
            onProgress=reportProgress,
            shouldCancel=shouldCancel,
            onPreprocessed=saveAttemptInput if self._debugEnabled else None
        )
        processingTimeMs = self._measureTime(startTime)

        self._saveDebugOutput(scanId, outcome)
        self._logTiming(scanId, processingTimeMs)

        if outcome.found:
            self._logger.info(f"[{scanId}] QR decoded by '{outcome.strategyName}': {outcome.text}")
        else:
            self._logger.warning(f"[{scanId}] Scan ended with status {outcome.status.value}")

        return outcome

    def _toPixelBuffer(self, image: ImageSource) -> PixelBuffer:
        """Accept a PixelBuffer, a BGR ndarray or a file path."""
        if isinstance(image, PixelBuffer):
            return image
        if isinstance(image, (str, Path)):
            return loadImageFile(image)
        if isinstance(image, np.ndarray):
            return PixelBuffer.fromBgr(image)
        raise InvalidImageError(f"Unsupported image type: {type(image).__name__}")

    def _saveDebugOutput(self, scanId: str, outcome: DetectionOutcome) -> None:
        if not self._debugEnabled:
            return

        data = outcome.toDict()
        data["scanId"] = scanId
        data["attempts"] = [attempt.toDict() for attempt in outcome.attempts]
        if outcome.result is not None:
            data["polygon"] = outcome.result.polygon
            data["rect"] = outcome.result.rect
            data["backend"] = outcome.result.backend
            data["inverted"] = outcome.result.inverted
        self._saveDebugJson(scanId, data, "outcome")
