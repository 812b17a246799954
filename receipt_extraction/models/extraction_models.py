"""
Extraction Models - Data classes for recognized text, acquisition results and extracted fields
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List, Tuple, Iterator


class ProcessingMethod(str, Enum):
    """Which acquisition method produced a result."""
    DOCUMENT_AI = "DOCUMENT_AI"
    CLOUD_VISION = "CLOUD_VISION"
    ON_DEVICE = "ON_DEVICE"
    EMAIL_TEXT = "EMAIL_TEXT"
    PLAIN_TEXT = "PLAIN_TEXT"


@dataclass(frozen=True)
class BoundingBox:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @classmethod
    def from_vertices(cls, vertices: List[Dict[str, Any]]) -> Optional['BoundingBox']:
        """Build an axis-aligned box from polygon vertices (missing coords are 0)."""
        if not vertices:
            return None
        xs = [float(v.get('x', 0)) for v in vertices]
        ys = [float(v.get('y', 0)) for v in vertices]
        return cls(left=min(xs), top=min(ys), right=max(xs), bottom=max(ys))


@dataclass(frozen=True)
class TextElement:
    text: str
    bounding_box: Optional[BoundingBox] = None
    confidence: float = 0.0


@dataclass(frozen=True)
class TextLine:
    text: str
    elements: Tuple[TextElement, ...] = ()
    bounding_box: Optional[BoundingBox] = None
    confidence: float = 0.0


@dataclass(frozen=True)
class TextBlock:
    text: str
    lines: Tuple[TextLine, ...] = ()
    bounding_box: Optional[BoundingBox] = None
    confidence: float = 0.0


@dataclass(frozen=True)
class RecognizedText:
    """Immutable output of one acquisition call: full text plus block/line/element hierarchy."""
    full_text: str
    blocks: Tuple[TextBlock, ...] = ()
    confidence: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.full_text.strip()

    def lines(self) -> Iterator[TextLine]:
        for block in self.blocks:
            yield from block.lines


@dataclass(frozen=True)
class TextAnnotation:
    """One entry of an OCR provider's textAnnotations list."""
    description: str
    bounding_box: Optional[BoundingBox] = None
    confidence: Optional[float] = None
    locale: Optional[str] = None


@dataclass(frozen=True)
class DocumentEntity:
    """Typed entity returned by the document-understanding provider."""
    type: str
    mention_text: str = ""
    confidence: float = 0.0
    normalized_value: Optional[str] = None
    properties: Tuple['DocumentEntity', ...] = ()

    def property_value(self, *types: str) -> Optional[str]:
        """First non-blank mention text among nested properties of the given types."""
        for wanted in types:
            for prop in self.properties:
                if prop.type == wanted and prop.mention_text.strip():
                    return prop.mention_text.strip()
        return None


@dataclass
class AcquisitionResult:
    """Single-use result of a provider call."""
    success: bool
    method: ProcessingMethod
    confidence: float = 0.0
    error: Optional[str] = None
    processing_time_ms: int = 0

    @property
    def text(self) -> str:
        return ""


@dataclass
class OCRAcquisitionResult(AcquisitionResult):
    annotations: List[TextAnnotation] = field(default_factory=list)
    recognized_text: Optional[RecognizedText] = None

    @property
    def text(self) -> str:
        if self.recognized_text is not None:
            return self.recognized_text.full_text
        if self.annotations:
            return self.annotations[0].description
        return ""


@dataclass
class DocumentAcquisitionResult(AcquisitionResult):
    entities: List[DocumentEntity] = field(default_factory=list)
    document_text: str = ""

    @property
    def text(self) -> str:
        return self.document_text

    def entities_of(self, entity_type: str) -> List[DocumentEntity]:
        return [e for e in self.entities if e.type == entity_type]

    def first_entity(self, *entity_types: str) -> Optional[DocumentEntity]:
        for entity_type in entity_types:
            for entity in self.entities:
                if entity.type == entity_type and entity.mention_text.strip():
                    return entity
        return None


@dataclass(frozen=True)
class FieldResult:
    """Result of one field extractor. ``found`` is False when ``value`` is a default."""
    value: Any
    found: bool
    extraction_method: str
    raw_text: str = ""
    pattern_used: Optional[str] = None


@dataclass
class ExtractedFields:
    """
    Partial receipt fields produced by an extraction strategy.

    ``total_amount`` of 0.0 and a defaulted ``transaction_date`` are sentinels;
    ``amount_found`` and ``date_defaulted`` tell them apart from real values.
    """
    merchant_name: str = "Unknown Merchant"
    merchant_address: Optional[str] = None
    phone_number: Optional[str] = None
    transaction_date: Optional[datetime] = None
    date_defaulted: bool = True
    transaction_time: Optional[str] = None
    total_amount: float = 0.0
    amount_found: bool = False
    subtotal_amount: Optional[float] = None
    tax_amount: Optional[float] = None
    tip_amount: Optional[float] = None
    discount_amount: Optional[float] = None
    currency: str = "USD"
    category: str = "Other"
    payment_method: str = "Unknown"
    transaction_id: str = ""
    line_items: List[Any] = field(default_factory=list)
    raw_text: str = ""
    combined_text: str = ""
    field_sources: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['transaction_date'] = self.transaction_date.isoformat() if self.transaction_date else None
        return data


@dataclass(frozen=True)
class ProcessingProvenance:
    """Which method produced the data and how we got there."""
    method: ProcessingMethod
    fallback_used: bool = False
    provider_confidence: float = 0.0
    processing_time_ms: int = 0
    low_confidence: bool = False
    primary_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['method'] = self.method.value
        return data


@dataclass(frozen=True)
class EmailReceipt:
    """An emailed receipt: matched on "subject body", plus the sender address."""
    from_address: str
    subject: str
    body: str
    email_id: str = ""
