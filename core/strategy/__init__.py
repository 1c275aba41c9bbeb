"""
Strategy module.

Provides:
- Strategy / DecoderKind: scan strategy descriptors
- DEFAULT_STRATEGIES: the ordered 13-entry rescue list
- StrategyOrchestrator / detect: pre-pass + strategy list runner

Usage:
    >>> from core.strategy import StrategyOrchestrator
    >>> orchestrator = StrategyOrchestrator(fastDecoder, robustDecoder)
    >>> outcome = orchestrator.detect(buffer)
    >>> if outcome.found:
    ...     print(outcome.text, outcome.strategyName)
"""

from core.strategy.strategy import (
    DecoderKind,
    Strategy,
    DEFAULT_STRATEGIES,
    SUPPLEMENTARY_STRATEGIES,
    ROBUST_PREPASS_SCALES
)
from core.strategy.strategy_orchestrator import (
    StrategyOrchestrator,
    OrchestratorState,
    ScanStatus,
    ScanPhase,
    ScanProgress,
    DecodeAttempt,
    DetectionOutcome,
    detect
)

__all__ = [
    'DecoderKind',
    'Strategy',
    'DEFAULT_STRATEGIES',
    'SUPPLEMENTARY_STRATEGIES',
    'ROBUST_PREPASS_SCALES',
    'StrategyOrchestrator',
    'OrchestratorState',
    'ScanStatus',
    'ScanPhase',
    'ScanProgress',
    'DecodeAttempt',
    'DetectionOutcome',
    'detect',
]
