"""
Orchestration Package - Pipeline entry points

Exports:
- ReceiptExtractionPipeline / ExtractionOutcome: extract(image_or_text)
- build_pipeline: configure providers from PipelineConfig
- HybridStrategySelector / AcquisitionTier: primary + fallback acquisition
"""

from .hybrid_strategy_selector import (
    AcquisitionTier,
    HybridProcessingResult,
    HybridStrategySelector,
    SelectorState,
)
from .receipt_extraction_pipeline import (
    ExtractionOutcome,
    ReceiptExtractionPipeline,
    build_pipeline,
)

__all__ = [
    'AcquisitionTier',
    'HybridProcessingResult',
    'HybridStrategySelector',
    'SelectorState',
    'ExtractionOutcome',
    'ReceiptExtractionPipeline',
    'build_pipeline'
]
