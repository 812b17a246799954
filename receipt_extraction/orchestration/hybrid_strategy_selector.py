#!/usr/bin/env python3
"""
Hybrid Strategy Selector - Two-tier acquisition with fallback

States:
    PRIMARY_ATTEMPT  -> DONE       primary succeeded with confidence > threshold
    PRIMARY_ATTEMPT  -> FALLBACK   primary failed or was low-confidence, fallback enabled
    FALLBACK_ATTEMPT -> DONE       fallback succeeded (any confidence)
    FALLBACK_ATTEMPT -> FAILED     fallback failed too
    PRIMARY_ATTEMPT  -> FAILED     primary failed and no fallback is available

A low-confidence primary with no fallback available ends DONE, flagged
``low_confidence``. Every tier pairs a provider with the extraction
strategy that understands its output.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from ..acquisition.base import TextAcquisitionProvider
from ..extraction.strategies import ExtractionStrategy
from ..models.extraction_models import (
    AcquisitionResult,
    ExtractedFields,
    ProcessingMethod,
    ProcessingProvenance,
)

logger = logging.getLogger(__name__)

DEFAULT_ACCEPTANCE_THRESHOLD = 0.7


class SelectorState(str, Enum):
    PRIMARY_ATTEMPT = "PRIMARY_ATTEMPT"
    FALLBACK_ATTEMPT = "FALLBACK_ATTEMPT"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class AcquisitionTier:
    provider: TextAcquisitionProvider
    strategy: ExtractionStrategy

    @property
    def method(self) -> ProcessingMethod:
        return self.provider.method


@dataclass
class HybridProcessingResult:
    success: bool
    state: SelectorState
    provenance: Optional[ProcessingProvenance] = None
    acquisition: Optional[AcquisitionResult] = None
    fields: Optional[ExtractedFields] = None
    error: Optional[str] = None
    transitions: List[SelectorState] = field(default_factory=list)


class HybridStrategySelector:
    """Tries the primary tier, then the fallback tier."""

    def __init__(
        self,
        primary: AcquisitionTier,
        fallback: Optional[AcquisitionTier] = None,
        acceptance_threshold: float = DEFAULT_ACCEPTANCE_THRESHOLD,
        fallback_enabled: bool = True,
    ):
        self.primary = primary
        self.fallback = fallback
        self.acceptance_threshold = acceptance_threshold
        self.fallback_enabled = fallback_enabled and fallback is not None
        logger.info(
            f"✅ HybridStrategySelector initialized: primary={primary.method.value}, "
            f"fallback={fallback.method.value if fallback else None}, "
            f"fallback_enabled={self.fallback_enabled}"
        )

    def select(self, image: Any, originating_address: str = "") -> HybridProcessingResult:
        """Acquire text from ``image``; ``originating_address`` is handed to the extraction strategy."""
        transitions = [SelectorState.PRIMARY_ATTEMPT]
        primary_result = self._acquire(self.primary, image)
        accepted = primary_result.success and primary_result.confidence > self.acceptance_threshold

        if accepted:
            logger.info(f"✅ {self.primary.method.value} accepted (confidence {primary_result.confidence:.2f})")
            return self._done(self.primary, primary_result, transitions, originating_address, fallback_used=False)

        if primary_result.success:
            reason = (
                f"{self.primary.method.value} confidence {primary_result.confidence:.2f} "
                f"at or below {self.acceptance_threshold}"
            )
        else:
            reason = primary_result.error or f"{self.primary.method.value} failed"

        if not self.fallback_enabled:
            if primary_result.success:
                logger.warning(f"⚠️ {reason}; no fallback, returning low-confidence result")
                return self._done(
                    self.primary, primary_result, transitions, originating_address, fallback_used=False, low_confidence=True
                )
            transitions.append(SelectorState.FAILED)
            logger.error(f"❌ {reason}; fallback disabled")
            return HybridProcessingResult(
                success=False,
                state=SelectorState.FAILED,
                error=f"{self.primary.method.value} processing failed: {reason}",
                acquisition=primary_result,
                transitions=transitions,
            )

        logger.info(f"🔀 Falling back to {self.fallback.method.value}: {reason}")
        transitions.append(SelectorState.FALLBACK_ATTEMPT)
        fallback_result = self._acquire(self.fallback, image)

        if fallback_result.success:
            return self._done(
                self.fallback,
                fallback_result,
                transitions,
                originating_address,
                fallback_used=True,
                low_confidence=fallback_result.confidence <= self.acceptance_threshold,
                primary_error=reason,
            )

        transitions.append(SelectorState.FAILED)
        message = (
            f"Both {self.primary.method.value} and {self.fallback.method.value} processing failed"
        )
        logger.error(f"❌ {message}: {reason} / {fallback_result.error}")
        return HybridProcessingResult(
            success=False,
            state=SelectorState.FAILED,
            error=message,
            acquisition=fallback_result,
            transitions=transitions,
        )

    def _acquire(self, tier: AcquisitionTier, image: Any) -> AcquisitionResult:
        """Run one provider; anything it raises counts as a failed attempt for that tier."""
        try:
            return tier.provider.acquire(image)
        except Exception as e:
            logger.exception(f"❌ {tier.method.value} provider raised unexpectedly: {e}")
            return AcquisitionResult(success=False, method=tier.method, error=f"{type(e).__name__}: {e}")

    def _done(
        self,
        tier: AcquisitionTier,
        result: AcquisitionResult,
        transitions: List[SelectorState],
        originating_address: str,
        fallback_used: bool,
        low_confidence: bool = False,
        primary_error: Optional[str] = None,
    ) -> HybridProcessingResult:
        transitions.append(SelectorState.DONE)
        fields = tier.strategy.extract(result, originating_address)
        provenance = ProcessingProvenance(
            method=tier.method,
            fallback_used=fallback_used,
            provider_confidence=result.confidence,
            processing_time_ms=result.processing_time_ms,
            low_confidence=low_confidence,
            primary_error=primary_error,
        )
        return HybridProcessingResult(
            success=True,
            state=SelectorState.DONE,
            provenance=provenance,
            acquisition=result,
            fields=fields,
            transitions=transitions,
        )
