"""
Strategy Orchestrator Module.

Runs the multi-strategy QR rescue on one still image:

1. Robust pre-pass: the robust engine at each scale in
   ROBUST_PREPASS_SCALES, without filtering.
2. Strategy list: each strategy resamples the original image, applies
   its filter chain and calls its engine.
3. First decoded text wins; when everything misses the outcome is
   NOT_FOUND.

State machine: IDLE → RUNNING → SUCCEEDED | EXHAUSTED (| CANCELLED).

Every decode call is recorded as a DecodeAttempt. A resampler, kernel
or decoder exception is logged and recorded on its attempt; it never
aborts the remaining attempts.

Follows:
- SRP: Only handles strategy sequencing and early exit
- DIP: Depends on IQrDecoder abstraction, not concrete engines
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from core.image.pixel_buffer import PixelBuffer
from core.image.resampler import GeometricResampler
from core.filters.filter_step import FilterStep, applyFilterChain
from core.interfaces.qr_decoder_interface import IQrDecoder, QrDetectionResult
from core.strategy.strategy import (
    DecoderKind,
    Strategy,
    DEFAULT_STRATEGIES,
    ROBUST_PREPASS_SCALES
)


logger = logging.getLogger(__name__)


class OrchestratorState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


class ScanStatus(Enum):
    """Status values reported to the UI collaborator."""
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    IN_PROGRESS = "in_progress"
    CANCELLED = "cancelled"


class ScanPhase(Enum):
    ROBUST_PREPASS = "robust_prepass"
    STRATEGIES = "strategies"


@dataclass
class DecodeAttempt:
    """
    Outcome of a single decode call.

    Attributes:
        phase: Pre-pass or strategy list.
        index: 1-based position within the phase.
        name: Strategy name (or "Robust xSCALE" for the pre-pass).
        scale: Resample factor used.
        text: Decoded payload, None on a miss.
        error: Exception summary if the attempt raised, None otherwise.
        processingTimeMs: Time spent on resample, filters and decode.
    """
    phase: ScanPhase
    index: int
    name: str
    scale: float
    text: Optional[str] = None
    error: Optional[str] = None
    processingTimeMs: float = 0.0

    @property
    def found(self) -> bool:
        return self.text is not None

    def toDict(self) -> Dict:
        return {
            "phase": self.phase.value,
            "index": self.index,
            "name": self.name,
            "scale": self.scale,
            "text": self.text,
            "error": self.error,
            "processingTimeMs": round(self.processingTimeMs, 2)
        }


@dataclass
class ScanProgress:
    """Progress notification emitted before every decode attempt."""
    phase: ScanPhase
    strategyIndex: int
    strategyCount: int
    strategyName: str
    status: ScanStatus = ScanStatus.IN_PROGRESS

    def toDict(self) -> Dict:
        return {
            "status": self.status.value,
            "phase": self.phase.value,
            "strategyIndex": self.strategyIndex,
            "strategyCount": self.strategyCount,
            "strategyName": self.strategyName
        }


@dataclass
class DetectionOutcome:
    """
    Final result of one orchestrator run.

    Attributes:
        status: SUCCESS, NOT_FOUND or CANCELLED.
        text: Decoded payload on success.
        strategyName: Name of the winning attempt.
        strategyIndex: 1-based index of the winning attempt in its phase.
        phase: Phase of the winning attempt.
        result: Full decoder result on success.
        attempts: Every attempt made, in order.
        processingTimeMs: Wall time of the whole run.
    """
    status: ScanStatus
    text: Optional[str] = None
    strategyName: Optional[str] = None
    strategyIndex: Optional[int] = None
    phase: Optional[ScanPhase] = None
    result: Optional[QrDetectionResult] = None
    attempts: List[DecodeAttempt] = field(default_factory=list)
    processingTimeMs: float = 0.0

    @property
    def found(self) -> bool:
        return self.status is ScanStatus.SUCCESS

    def toDict(self) -> Dict:
        """Serialize for the UI collaborator and debug JSON."""
        if self.status is ScanStatus.SUCCESS:
            data = {
                "status": self.status.value,
                "text": self.text,
                "strategyName": self.strategyName,
                "strategyIndex": self.strategyIndex,
                "phase": self.phase.value
            }
        else:
            data = {"status": self.status.value}
        data["attemptCount"] = len(self.attempts)
        data["processingTimeMs"] = round(self.processingTimeMs, 2)
        return data


ProgressCallback = Callable[[ScanProgress], None]
PreprocessedCallback = Callable[[DecodeAttempt, PixelBuffer], None]


class StrategyOrchestrator:
    """
    Executes the robust pre-pass and the ordered strategy list.

    The orchestrator holds configuration only; every detect() call is
    independent and starts from the original source image.
    """

    def __init__(
        self,
        fastDecoder: IQrDecoder,
        robustDecoder: Optional[IQrDecoder] = None,
        strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
        robustScales: Sequence[float] = ROBUST_PREPASS_SCALES,
        resampler: Optional[GeometricResampler] = None
    ):
        """
        Initialize StrategyOrchestrator.

        Args:
            fastDecoder: Engine for FAST strategies.
            robustDecoder: Engine for the pre-pass and ROBUST strategies.
                None skips the pre-pass.
            strategies: Ordered strategy list.
            robustScales: Scale factors of the robust pre-pass.
            resampler: Resampler instance (default: GeometricResampler()).
        """
        if fastDecoder is None:
            raise ValueError("A fast decoder is required")

        self._fastDecoder = fastDecoder
        self._robustDecoder = robustDecoder
        self._strategies: Tuple[Strategy, ...] = tuple(strategies)
        self._robustScales: Tuple[float, ...] = tuple(robustScales)
        self._resampler = resampler or GeometricResampler()
        self._state = OrchestratorState.IDLE

        logger.info(
            f"StrategyOrchestrator initialized "
            f"(fast={fastDecoder.backendName}, "
            f"robust={robustDecoder.backendName if robustDecoder else 'none'}, "
            f"strategies={len(self._strategies)}, prepassScales={len(self._robustScales)})"
        )

    @property
    def state(self) -> OrchestratorState:
        """State of the most recent run."""
        return self._state

    @property
    def strategies(self) -> Tuple[Strategy, ...]:
        return self._strategies

    @property
    def robustScales(self) -> Tuple[float, ...]:
        return self._robustScales

    @property
    def prepassEnabled(self) -> bool:
        return self._robustDecoder is not None and len(self._robustScales) > 0

    def detect(
        self,
        image: PixelBuffer,
        onProgress: Optional[ProgressCallback] = None,
        shouldCancel: Optional[Callable[[], bool]] = None,
        onPreprocessed: Optional[PreprocessedCallback] = None
    ) -> DetectionOutcome:
        """
        Find and decode a QR code in a still image.

        Args:
            image: Source image; never modified.
            onProgress: Called with a ScanProgress before every attempt; an
                exception it raises is logged and does not affect the run.
            shouldCancel: Polled before every attempt; returning True
                stops the run with status CANCELLED.
            onPreprocessed: Called with each attempt and the buffer handed
                to the decoder (debug image dumps).

        Returns:
            DetectionOutcome with SUCCESS, NOT_FOUND or CANCELLED.

        Raises:
            InvalidImageError: If the image is malformed or zero-area.
        """
        image.validate()

        startTime = time.time()
        self._state = OrchestratorState.RUNNING
        try:
            return self._runPlan(image, onProgress, shouldCancel, onPreprocessed, startTime)
        finally:
            # A raising cancel poll ends the run; never report it as RUNNING
            if self._state is OrchestratorState.RUNNING:
                self._state = OrchestratorState.IDLE

    def _runPlan(
        self,
        image: PixelBuffer,
        onProgress: Optional[ProgressCallback],
        shouldCancel: Optional[Callable[[], bool]],
        onPreprocessed: Optional[PreprocessedCallback],
        startTime: float
    ) -> DetectionOutcome:
        attempts: List[DecodeAttempt] = []

        for phase, index, count, name, scale, chain, decoder in self._plan():
            if shouldCancel is not None and shouldCancel():
                logger.info(f"Scan cancelled before '{name}'")
                return self._finish(OrchestratorState.CANCELLED, ScanStatus.CANCELLED, attempts, startTime)

            self._reportProgress(onProgress, ScanProgress(
                phase=phase,
                strategyIndex=index,
                strategyCount=count,
                strategyName=name
            ))

            attempt, result = self._runAttempt(
                image, phase, index, name, scale, chain, decoder, onPreprocessed
            )
            attempts.append(attempt)

            if result is not None:
                outcome = self._finish(OrchestratorState.SUCCEEDED, ScanStatus.SUCCESS, attempts, startTime)
                outcome.text = result.text
                outcome.result = result
                outcome.strategyName = name
                outcome.strategyIndex = index
                outcome.phase = phase
                logger.info(
                    f"✓ QR decoded by '{name}' ({phase.value} {index}/{count}) "
                    f"in {outcome.processingTimeMs:.2f}ms"
                )
                return outcome

        outcome = self._finish(OrchestratorState.EXHAUSTED, ScanStatus.NOT_FOUND, attempts, startTime)
        logger.warning(
            f"No QR code found after {len(attempts)} attempts "
            f"({outcome.processingTimeMs:.2f}ms)"
        )
        return outcome

    def _reportProgress(self, onProgress: Optional[ProgressCallback], progress: ScanProgress) -> None:
        """Notify the progress listener. Listener failures are logged and ignored."""
        if onProgress is None:
            return
        try:
            onProgress(progress)
        except Exception as e:
            logger.error(f"Progress callback failed at '{progress.strategyName}': {e}")

    def _plan(self):
        """Yield every attempt of a run, pre-pass first."""
        if self.prepassEnabled:
            count = len(self._robustScales)
            for index, scale in enumerate(self._robustScales, start=1):
                yield (
                    ScanPhase.ROBUST_PREPASS, index, count,
                    f"Robust x{scale}", scale, (), self._robustDecoder
                )

        count = len(self._strategies)
        for index, strategy in enumerate(self._strategies, start=1):
            decoder = self._fastDecoder
            if strategy.decoder is DecoderKind.ROBUST:
                decoder = self._robustDecoder
            yield (
                ScanPhase.STRATEGIES, index, count,
                strategy.name, strategy.scale, strategy.filterChain, decoder
            )

    def _runAttempt(
        self,
        image: PixelBuffer,
        phase: ScanPhase,
        index: int,
        name: str,
        scale: float,
        chain: Sequence[FilterStep],
        decoder: Optional[IQrDecoder],
        onPreprocessed: Optional[PreprocessedCallback]
    ) -> Tuple[DecodeAttempt, Optional[QrDetectionResult]]:
        """Resample, filter and decode once. Exceptions become a miss."""
        attemptStart = time.time()
        attempt = DecodeAttempt(phase=phase, index=index, name=name, scale=scale)
        result = None

        logger.debug(f"Attempt {phase.value} {index}: {name}")

        try:
            if decoder is None:
                raise RuntimeError("robust engine is not configured")

            buffer = self._resampler.resample(image, scale)
            buffer = applyFilterChain(buffer, chain)

            if onPreprocessed is not None:
                onPreprocessed(attempt, buffer)

            result = decoder.decode(buffer)
            if result is not None:
                attempt.text = result.text

        except Exception as e:
            attempt.error = f"{type(e).__name__}: {e}"
            logger.error(f"Attempt '{name}' failed: {e}")

        attempt.processingTimeMs = (time.time() - attemptStart) * 1000
        return attempt, result

    def _finish(
        self,
        state: OrchestratorState,
        status: ScanStatus,
        attempts: List[DecodeAttempt],
        startTime: float
    ) -> DetectionOutcome:
        self._state = state
        return DetectionOutcome(
            status=status,
            attempts=attempts,
            processingTimeMs=(time.time() - startTime) * 1000
        )


def detect(
    image: PixelBuffer,
    fastDecoder: IQrDecoder,
    robustDecoder: Optional[IQrDecoder] = None,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    onProgress: Optional[ProgressCallback] = None
) -> DetectionOutcome:
    """
    Stateless convenience wrapper: run one scan with a throwaway orchestrator.

    Args:
        image: Source image.
        fastDecoder: Engine for FAST strategies.
        robustDecoder: Engine for the pre-pass (None skips it).
        strategies: Ordered strategy list.
        onProgress: Progress callback.

    Returns:
        DetectionOutcome of the run.
    """
    orchestrator = StrategyOrchestrator(
        fastDecoder=fastDecoder,
        robustDecoder=robustDecoder,
        strategies=strategies
    )
    return orchestrator.detect(image, onProgress=onProgress)
