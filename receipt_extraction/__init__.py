"""
Receipt Extraction - Structured receipt data from photos and emails

📂 acquisition/ - Image to text
   ├─ DocumentAIClient: document-understanding service (primary tier)
   ├─ CloudVisionClient: cloud OCR (fallback tier)
   ├─ OnDeviceTextRecognizer: local Tesseract OCR
   └─ RetryExecutor: bounded retry with linear backoff

📂 extraction/ - Field extractors and strategies
   ├─ field_extractors/: merchant, amount, currency, date, category, items,
   │                     payment method, transaction id, summary amounts, contact
   └─ TextPatternExtractionStrategy / DocumentEntityExtractionStrategy

📂 scoring/ - ConfidenceScorer (checklist score, auto-accept gate)
📂 assembly/ - ReceiptSchemaAssembler
📂 orchestration/ - HybridStrategySelector, ReceiptExtractionPipeline
📂 models/ - RecognizedText, AcquisitionResult, ReceiptSchema, LineItem
📂 config/ - PipelineConfig, ConfigManager

QUICK START:
    from receipt_extraction import build_pipeline, EmailReceipt

    pipeline = build_pipeline()
    outcome = pipeline.extract(EmailReceipt(
        from_address="auto-confirm@amazon.com",
        subject="Your Amazon.com order #123",
        body="Total: $45.99 Order Date: December 15, 2024",
    ))
    outcome.receipt.merchant_name   # 'Amazon'
    outcome.auto_accept             # True
"""

from .models import EmailReceipt, LineItem, ProcessingMethod, ReceiptSchema, validate_receipt
from .orchestration import ExtractionOutcome, ReceiptExtractionPipeline, build_pipeline
from .logger_utils import setup_logging

__version__ = "1.0.0"

__all__ = [
    'EmailReceipt',
    'LineItem',
    'ProcessingMethod',
    'ReceiptSchema',
    'validate_receipt',
    'ExtractionOutcome',
    'ReceiptExtractionPipeline',
    'build_pipeline',
    'setup_logging'
]
