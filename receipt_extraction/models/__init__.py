"""
Models Package
"""
from .extraction_models import (
    ProcessingMethod,
    BoundingBox,
    TextElement,
    TextLine,
    TextBlock,
    RecognizedText,
    TextAnnotation,
    DocumentEntity,
    AcquisitionResult,
    OCRAcquisitionResult,
    DocumentAcquisitionResult,
    FieldResult,
    ExtractedFields,
    ProcessingProvenance,
    EmailReceipt,
)
from .receipt_schema import LineItem, ReceiptSchema, ValidationResult, validate_receipt

__all__ = [
    'ProcessingMethod',
    'BoundingBox',
    'TextElement',
    'TextLine',
    'TextBlock',
    'RecognizedText',
    'TextAnnotation',
    'DocumentEntity',
    'AcquisitionResult',
    'OCRAcquisitionResult',
    'DocumentAcquisitionResult',
    'FieldResult',
    'ExtractedFields',
    'ProcessingProvenance',
    'EmailReceipt',
    'LineItem',
    'ReceiptSchema',
    'ValidationResult',
    'validate_receipt'
]
