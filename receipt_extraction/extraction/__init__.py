"""
Extraction Package - Field extractors and extraction strategies

Exports:
- FieldExtractorSuite: every field extractor over one config
- ExtractionStrategy: strategy interface
- TextPatternExtractionStrategy: regex/keyword path for OCR, email and plain text
- DocumentEntityExtractionStrategy: typed-entity path for the document service
"""

from . import field_extractors
from . import shared_utils
from .strategies import (
    FieldExtractorSuite,
    ExtractionStrategy,
    TextPatternExtractionStrategy,
    DocumentEntityExtractionStrategy,
)

__all__ = [
    'field_extractors',
    'shared_utils',
    'FieldExtractorSuite',
    'ExtractionStrategy',
    'TextPatternExtractionStrategy',
    'DocumentEntityExtractionStrategy'
]
