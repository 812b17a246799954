from receipt_extraction.acquisition.base import TextAcquisitionProvider
from receipt_extraction.config.config_manager import ConfigManager
from receipt_extraction.extraction import (
    DocumentEntityExtractionStrategy,
    FieldExtractorSuite,
    TextPatternExtractionStrategy,
)
from receipt_extraction.models import (
    DocumentAcquisitionResult,
    DocumentEntity,
    OCRAcquisitionResult,
    ProcessingMethod,
    RecognizedText,
)
from receipt_extraction.orchestration import AcquisitionTier, HybridStrategySelector, SelectorState

SUITE = FieldExtractorSuite(ConfigManager())


class FakeDocumentAI(TextAcquisitionProvider):
    method = ProcessingMethod.DOCUMENT_AI

    def __init__(self, confidence=0.9, success=True, error=None):
        self.confidence = confidence
        self.success = success
        self.error = error
        self.calls = 0

    def acquire(self, image):
        self.calls += 1
        if not self.success:
            return DocumentAcquisitionResult(success=False, method=self.method, error=self.error)
        return DocumentAcquisitionResult(
            success=True,
            method=self.method,
            confidence=self.confidence,
            document_text="Target\nTotal $12.00",
            entities=[
                DocumentEntity(type='supplier_name', mention_text='Target', confidence=self.confidence),
                DocumentEntity(type='total_amount', mention_text='12.00', confidence=self.confidence),
            ],
        )


class FakeCloudVision(TextAcquisitionProvider):
    method = ProcessingMethod.CLOUD_VISION

    def __init__(self, confidence=0.8, success=True):
        self.confidence = confidence
        self.success = success
        self.calls = 0

    def acquire(self, image):
        self.calls += 1
        if not self.success:
            return OCRAcquisitionResult(success=False, method=self.method, error="HTTP 503")
        return OCRAcquisitionResult(
            success=True,
            method=self.method,
            confidence=self.confidence,
            recognized_text=RecognizedText(full_text="COSTCO\nTotal $54.10", confidence=self.confidence),
        )


def _selector(primary, fallback=None, **kwargs):
    return HybridStrategySelector(
        primary=AcquisitionTier(primary, DocumentEntityExtractionStrategy(SUITE)),
        fallback=AcquisitionTier(fallback, TextPatternExtractionStrategy(SUITE)) if fallback else None,
        **kwargs,
    )


def test_confident_primary_skips_fallback():
    primary, fallback = FakeDocumentAI(confidence=0.9), FakeCloudVision()

    result = _selector(primary, fallback).select(b"image")

    assert result.success
    assert result.state == SelectorState.DONE
    assert result.provenance.method == ProcessingMethod.DOCUMENT_AI
    assert not result.provenance.fallback_used
    assert result.fields.merchant_name == "Target"
    assert result.fields.total_amount == 12.0
    assert fallback.calls == 0
    assert result.transitions == [SelectorState.PRIMARY_ATTEMPT, SelectorState.DONE]


def test_failed_primary_uses_fallback():
    primary = FakeDocumentAI(success=False, error="Document AI HTTP 403: Forbidden")
    fallback = FakeCloudVision(confidence=0.8)

    result = _selector(primary, fallback).select(b"image")

    assert result.success
    assert result.provenance.method == ProcessingMethod.CLOUD_VISION
    assert result.provenance.fallback_used
    assert result.provenance.primary_error == "Document AI HTTP 403: Forbidden"
    assert result.fields.merchant_name == "Costco"
    assert result.fields.total_amount == 54.10
    assert result.transitions == [
        SelectorState.PRIMARY_ATTEMPT,
        SelectorState.FALLBACK_ATTEMPT,
        SelectorState.DONE,
    ]


def test_confidence_at_threshold_is_not_accepted():
    primary, fallback = FakeDocumentAI(confidence=0.7), FakeCloudVision(confidence=0.4)

    result = _selector(primary, fallback).select(b"image")

    assert fallback.calls == 1
    assert result.provenance.method == ProcessingMethod.CLOUD_VISION
    # fallback output is accepted at any confidence
    assert result.success
    assert result.provenance.low_confidence


def test_low_confidence_primary_and_failed_fallback():
    primary, fallback = FakeDocumentAI(confidence=0.3), FakeCloudVision(success=False)

    result = _selector(primary, fallback).select(b"image")

    assert not result.success
    assert result.state == SelectorState.FAILED
    assert result.error == "Both DOCUMENT_AI and CLOUD_VISION processing failed"
    assert result.fields is None


def test_fallback_disabled_keeps_low_confidence_primary():
    primary, fallback = FakeDocumentAI(confidence=0.3), FakeCloudVision()

    result = _selector(primary, fallback, fallback_enabled=False).select(b"image")

    assert result.success
    assert result.provenance.method == ProcessingMethod.DOCUMENT_AI
    assert result.provenance.low_confidence
    assert fallback.calls == 0


def test_fallback_disabled_with_failed_primary():
    primary = FakeDocumentAI(success=False, error="timeout")

    result = _selector(primary).select(b"image")

    assert not result.success
    assert result.error == "DOCUMENT_AI processing failed: timeout"
    assert result.transitions == [SelectorState.PRIMARY_ATTEMPT, SelectorState.FAILED]


class ExplodingProvider(TextAcquisitionProvider):
    method = ProcessingMethod.DOCUMENT_AI

    def acquire(self, image):
        raise TypeError("float() argument must be a string or a real number, not 'NoneType'")


def test_provider_exception_falls_back():
    fallback = FakeCloudVision(confidence=0.8)

    result = _selector(ExplodingProvider(), fallback).select(b"image")

    assert result.success
    assert result.provenance.method == ProcessingMethod.CLOUD_VISION
    assert result.provenance.fallback_used
    assert result.provenance.primary_error.startswith("TypeError")
