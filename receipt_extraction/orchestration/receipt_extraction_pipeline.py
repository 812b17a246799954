#!/usr/bin/env python3
"""
Receipt Extraction Pipeline - Main entry point

Inputs:
- plain text (already recognized)
- EmailReceipt (subject, body, sender address)
- an image (PIL image, numpy array, bytes, path or URI)

Flow for images:
    image -> HybridStrategySelector -> ExtractedFields -> ConfidenceScorer -> ReceiptSchema

Usage:
    from receipt_extraction import build_pipeline

    pipeline = build_pipeline()
    outcome = pipeline.extract("receipt.jpg")
    if outcome.success and outcome.auto_accept:
        save(outcome.receipt)
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional

from .hybrid_strategy_selector import AcquisitionTier, HybridStrategySelector
from ..acquisition.cloud_vision_client import CloudVisionClient
from ..acquisition.document_ai_client import DocumentAIClient
from ..acquisition.on_device_recognizer import OnDeviceTextRecognizer
from ..acquisition.retry_executor import RetryExecutor
from ..assembly.schema_assembler import ReceiptSchemaAssembler
from ..config.config_manager import PipelineConfig, get_config_manager, get_pipeline_config
from ..logger_utils import setup_logging
from ..extraction.strategies import (
    DocumentEntityExtractionStrategy,
    FieldExtractorSuite,
    TextPatternExtractionStrategy,
)
from ..models.extraction_models import (
    EmailReceipt,
    ExtractedFields,
    ProcessingMethod,
    ProcessingProvenance,
)
from ..models.receipt_schema import ReceiptSchema
from ..scoring.confidence_scorer import ConfidenceResult, ConfidenceScorer

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {'.jpg', '.jpeg', '.png', '.bmp', '.gif', '.tif', '.tiff', '.webp'}
IMAGE_URI_PREFIXES = ('data:image', 'file://', 'http://', 'https://')


@dataclass
class ExtractionOutcome:
    """
    Typed pipeline result.

    ``success=False`` means no method produced data; it is never used for
    a low-confidence extraction.
    """
    success: bool
    receipt: Optional[ReceiptSchema] = None
    confidence: Optional[ConfidenceResult] = None
    provenance: Optional[ProcessingProvenance] = None
    error: Optional[str] = None

    @property
    def auto_accept(self) -> bool:
        return self.success and self.confidence is not None and self.confidence.auto_accepted


def _is_image_reference(value: str) -> bool:
    if value.startswith(IMAGE_URI_PREFIXES):
        return True
    if "\n" in value or len(value) > 1024:
        return False
    return Path(value).suffix.lower() in IMAGE_SUFFIXES


class ReceiptExtractionPipeline:
    """Runs acquisition, extraction, scoring and assembly for one receipt at a time."""

    def __init__(
        self,
        selector: Optional[HybridStrategySelector] = None,
        text_strategy: Optional[TextPatternExtractionStrategy] = None,
        scorer: Optional[ConfidenceScorer] = None,
        assembler: Optional[ReceiptSchemaAssembler] = None,
    ):
        self.selector = selector
        self.text_strategy = text_strategy or TextPatternExtractionStrategy()
        self.scorer = scorer or ConfidenceScorer()
        self.assembler = assembler or ReceiptSchemaAssembler()

    def extract(self, source: Any, originating_address: str = "", image_uri: Optional[str] = None) -> ExtractionOutcome:
        """Extract a receipt from text, an EmailReceipt, or an image source."""
        if isinstance(source, EmailReceipt):
            return self.extract_email(source)
        if isinstance(source, str) and not _is_image_reference(source):
            return self.extract_text(source, originating_address)
        if image_uri is None and isinstance(source, (str, Path)):
            image_uri = str(source) if not str(source).startswith('data:') else None
        return self.extract_image(source, image_uri=image_uri, originating_address=originating_address)

    def extract_text(self, text: str, originating_address: str = "") -> ExtractionOutcome:
        fields = self.text_strategy.extract_text(text, originating_address)
        provenance = ProcessingProvenance(method=ProcessingMethod.PLAIN_TEXT, provider_confidence=1.0)
        return self._finish(fields, provenance)

    def extract_email(self, email: EmailReceipt) -> ExtractionOutcome:
        cleaner = self.text_strategy.suite.text_cleaner
        combined = cleaner.build_combined_text(email.subject, email.body)
        raw = "\n".join(part for part in (email.subject, email.body) if part)
        fields = self.text_strategy.extract_text(raw, email.from_address, combined_text=combined)
        provenance = ProcessingProvenance(method=ProcessingMethod.EMAIL_TEXT, provider_confidence=1.0)
        return self._finish(fields, provenance)

    def extract_image(
        self, image: Any, image_uri: Optional[str] = None, originating_address: str = ""
    ) -> ExtractionOutcome:
        if isinstance(image, (str, Path)) and not str(image).startswith(IMAGE_URI_PREFIXES) and not Path(image).exists():
            logger.error(f"❌ Image not found: {image}")
            return ExtractionOutcome(success=False, error=f"Image not found: {image}")
        if self.selector is None:
            return ExtractionOutcome(success=False, error="No acquisition provider configured")

        result = self.selector.select(image, originating_address)
        if not result.success:
            logger.error(f"❌ Receipt extraction failed: {result.error}")
            return ExtractionOutcome(success=False, error=result.error)

        return self._finish(result.fields, result.provenance, image_uri=image_uri)

    def _finish(
        self,
        fields: ExtractedFields,
        provenance: ProcessingProvenance,
        image_uri: Optional[str] = None,
    ) -> ExtractionOutcome:
        confidence = self.scorer.score(fields)
        receipt = self.assembler.assemble(fields, provenance, confidence, image_uri=image_uri)
        logger.info(
            f"✅ Receipt {receipt.id}: {receipt.merchant_name} {receipt.total_amount} {receipt.currency} "
            f"via {provenance.method.value} (confidence {confidence.overall_confidence:.2f}, "
            f"{'auto-accept' if confidence.auto_accepted else 'needs review'})"
        )
        return ExtractionOutcome(success=True, receipt=receipt, confidence=confidence, provenance=provenance)

    async def extract_async(self, source: Any, originating_address: str = "", image_uri: Optional[str] = None) -> ExtractionOutcome:
        """Run ``extract`` on a worker thread so callers never block their event loop."""
        return await asyncio.to_thread(self.extract, source, originating_address, image_uri)

    async def extract_many(self, sources: Iterable[Any], concurrency: int = 4) -> List[ExtractionOutcome]:
        """Process several receipts concurrently; one outcome per source, in order."""
        semaphore = asyncio.Semaphore(concurrency)

        async def extract_with_semaphore(source: Any) -> ExtractionOutcome:
            async with semaphore:
                try:
                    return await self.extract_async(source)
                except Exception as e:
                    logger.exception(f"❌ Unexpected error extracting receipt: {e}")
                    return ExtractionOutcome(success=False, error=f"Error: {e}")

        return await asyncio.gather(*(extract_with_semaphore(s) for s in sources))


def build_pipeline(config: Optional[PipelineConfig] = None) -> ReceiptExtractionPipeline:
    """
    Wire a pipeline from configuration and apply its logging settings.

    - Document AI primary + Cloud Vision fallback when both are configured
    - Cloud Vision alone with only an API key
    - on-device Tesseract otherwise
    """
    config = config or get_pipeline_config()
    setup_logging(config.log_level, config.log_file or None)
    suite = FieldExtractorSuite(get_config_manager())
    text_strategy = TextPatternExtractionStrategy(suite)

    def executor(provider: str) -> RetryExecutor:
        return RetryExecutor(
            max_retries=int(config.max_retries),
            base_delay=float(config.retry_base_delay),
            timeout=float(config.request_timeout),
            provider=provider,
        )

    if config.cloud_configured:
        vision = AcquisitionTier(
            CloudVisionClient(config.cloud_api_key, config.vision_endpoint, executor("Cloud Vision")),
            text_strategy,
        )
        if config.document_ai_configured:
            document_ai = AcquisitionTier(
                DocumentAIClient(config.cloud_api_key, config.document_ai_endpoint(), executor("Document AI")),
                DocumentEntityExtractionStrategy(suite),
            )
            selector = HybridStrategySelector(
                primary=document_ai,
                fallback=vision,
                acceptance_threshold=float(config.acceptance_threshold),
                fallback_enabled=bool(config.fallback_enabled),
            )
        else:
            selector = HybridStrategySelector(primary=vision, acceptance_threshold=float(config.acceptance_threshold))
    else:
        logger.info("No cloud credentials configured, using on-device recognizer")
        on_device = AcquisitionTier(
            OnDeviceTextRecognizer(
                config.tesseract_cmd or None,
                config.tesseract_lang,
                preprocess=bool(config.preprocess_images),
            ),
            text_strategy,
        )
        selector = HybridStrategySelector(primary=on_device, acceptance_threshold=float(config.acceptance_threshold))

    return ReceiptExtractionPipeline(
        selector=selector,
        text_strategy=text_strategy,
        scorer=ConfidenceScorer(auto_accept_threshold=float(config.auto_accept_threshold)),
    )
