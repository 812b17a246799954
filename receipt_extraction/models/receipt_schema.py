"""
Receipt Schema - Canonical structured receipt record

The schema is immutable. It is created once per pipeline run by the assembler
and may later be replaced through ``with_annotation`` when a person verifies it.
"""
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List, Tuple

from .extraction_models import ProcessingMethod

TOTAL_MISMATCH_TOLERANCE = 0.50
ITEM_SUM_TOLERANCE = 1.00


def _round_cents(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(float(value), 2)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class LineItem:
    """One purchased item. ``total_price`` is what makes an item usable."""
    name: str
    total_price: float
    quantity: float = 1.0
    unit_price: Optional[float] = None
    description: Optional[str] = None
    category: Optional[str] = None
    sku: Optional[str] = None
    barcode: Optional[str] = None
    discount: Optional[float] = None
    tax: Optional[float] = None
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description,
            'quantity': self.quantity,
            'unit_price': _round_cents(self.unit_price),
            'total_price': _round_cents(self.total_price),
            'category': self.category,
            'sku': self.sku,
            'barcode': self.barcode,
            'discount': _round_cents(self.discount),
            'tax': _round_cents(self.tax),
            'confidence': self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineItem':
        return cls(
            name=data['name'],
            total_price=float(data['total_price']),
            quantity=float(data.get('quantity', 1.0)),
            unit_price=data.get('unit_price'),
            description=data.get('description'),
            category=data.get('category'),
            sku=data.get('sku'),
            barcode=data.get('barcode'),
            discount=data.get('discount'),
            tax=data.get('tax'),
            confidence=float(data.get('confidence', 0.0)),
        )


@dataclass(frozen=True)
class ReceiptSchema:
    id: str
    merchant_name: Optional[str] = None
    merchant_address: Optional[str] = None
    phone_number: Optional[str] = None
    transaction_date: Optional[datetime] = None
    transaction_time: Optional[str] = None
    total_amount: Optional[float] = None
    subtotal_amount: Optional[float] = None
    tax_amount: Optional[float] = None
    tip_amount: Optional[float] = None
    discount_amount: Optional[float] = None
    line_items: Tuple[LineItem, ...] = ()
    category: str = "Other"
    payment_method: str = "Unknown"
    transaction_id: str = ""
    currency: str = "USD"
    confidence: float = 0.0
    is_manually_verified: bool = False
    annotation_notes: str = ""
    raw_text: str = ""
    image_uri: Optional[str] = None
    processing_method: ProcessingMethod = ProcessingMethod.PLAIN_TEXT
    fallback_used: bool = False
    provider_confidence: float = 0.0
    defaulted_fields: Tuple[str, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Provider-agnostic map representation (ISO dates, amounts rounded to cents)."""
        return {
            'id': self.id,
            'merchant_name': self.merchant_name,
            'merchant_address': self.merchant_address,
            'phone_number': self.phone_number,
            'transaction_date': _iso(self.transaction_date),
            'transaction_time': self.transaction_time,
            'total_amount': _round_cents(self.total_amount),
            'subtotal_amount': _round_cents(self.subtotal_amount),
            'tax_amount': _round_cents(self.tax_amount),
            'tip_amount': _round_cents(self.tip_amount),
            'discount_amount': _round_cents(self.discount_amount),
            'line_items': [item.to_dict() for item in self.line_items],
            'category': self.category,
            'payment_method': self.payment_method,
            'transaction_id': self.transaction_id,
            'currency': self.currency,
            'confidence': self.confidence,
            'is_manually_verified': self.is_manually_verified,
            'annotation_notes': self.annotation_notes,
            'raw_text': self.raw_text,
            'image_uri': self.image_uri,
            'processing_method': self.processing_method.value,
            'fallback_used': self.fallback_used,
            'provider_confidence': self.provider_confidence,
            'defaulted_fields': list(self.defaulted_fields),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReceiptSchema':
        return cls(
            id=data['id'],
            merchant_name=data.get('merchant_name'),
            merchant_address=data.get('merchant_address'),
            phone_number=data.get('phone_number'),
            transaction_date=_parse_iso(data.get('transaction_date')),
            transaction_time=data.get('transaction_time'),
            total_amount=data.get('total_amount'),
            subtotal_amount=data.get('subtotal_amount'),
            tax_amount=data.get('tax_amount'),
            tip_amount=data.get('tip_amount'),
            discount_amount=data.get('discount_amount'),
            line_items=tuple(LineItem.from_dict(item) for item in data.get('line_items', [])),
            category=data.get('category', 'Other'),
            payment_method=data.get('payment_method', 'Unknown'),
            transaction_id=data.get('transaction_id', ''),
            currency=data.get('currency', 'USD'),
            confidence=float(data.get('confidence', 0.0)),
            is_manually_verified=bool(data.get('is_manually_verified', False)),
            annotation_notes=data.get('annotation_notes', ''),
            raw_text=data.get('raw_text', ''),
            image_uri=data.get('image_uri'),
            processing_method=ProcessingMethod(data.get('processing_method', ProcessingMethod.PLAIN_TEXT.value)),
            fallback_used=bool(data.get('fallback_used', False)),
            provider_confidence=float(data.get('provider_confidence', 0.0)),
            defaulted_fields=tuple(data.get('defaulted_fields', ())),
            created_at=_parse_iso(data.get('created_at')),
            updated_at=_parse_iso(data.get('updated_at')),
        )

    def with_annotation(self, notes: str = "", updated_at: Optional[datetime] = None, **corrections) -> 'ReceiptSchema':
        """
        Manual verification path: return a verified copy with corrected fields.

        Corrected fields are dropped from ``defaulted_fields``.
        """
        unknown = set(corrections) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            raise ValueError(f"Unknown receipt fields: {sorted(unknown)}")
        if 'line_items' in corrections:
            corrections['line_items'] = tuple(corrections['line_items'])
        remaining_defaults = tuple(f for f in self.defaulted_fields if f not in corrections)
        return dataclasses.replace(
            self,
            is_manually_verified=True,
            annotation_notes=notes or self.annotation_notes,
            defaulted_fields=remaining_defaults,
            updated_at=updated_at or datetime.now(timezone.utc),
            **corrections,
        )


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    adjusted_confidence: float = 0.0


def _comparable(value: datetime, reference: datetime) -> Tuple[datetime, datetime]:
    """Make aware/naive datetimes comparable by dropping tzinfo from the aware one."""
    if (value.tzinfo is None) != (reference.tzinfo is None):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        else:
            reference = reference.astimezone(timezone.utc).replace(tzinfo=None)
    return value, reference


def summary_total_mismatch(
    total: Optional[float],
    subtotal: Optional[float],
    tax: Optional[float] = None,
    tip: Optional[float] = None,
    discount: Optional[float] = None,
) -> Optional[str]:
    """Warning text when subtotal + tax + tip - discount misses the total by more than 0.50."""
    if not total or subtotal is None:
        return None
    expected = subtotal + (tax or 0.0) + (tip or 0.0) - (discount or 0.0)
    if abs(expected - total) > TOTAL_MISMATCH_TOLERANCE:
        return f"Total amount mismatch: expected {expected:.2f}, got {total:.2f}"
    return None


def validate_receipt(receipt: ReceiptSchema, now: Optional[datetime] = None) -> ValidationResult:
    """
    Consistency checks on an assembled receipt.

    Errors make the receipt invalid; warnings only lower the confidence.
    """
    errors: List[str] = []
    warnings: List[str] = []
    now = now or datetime.now()

    if receipt.total_amount is None or receipt.total_amount <= 0:
        errors.append("Total amount is required and must be positive")

    if not receipt.merchant_name or not receipt.merchant_name.strip():
        errors.append("Merchant name is required")

    if receipt.transaction_date is None:
        errors.append("Transaction date is required")
    else:
        tx_date, reference = _comparable(receipt.transaction_date, now)
        if tx_date > reference:
            errors.append("Transaction date cannot be in the future")
        elif tx_date < reference - timedelta(days=365):
            warnings.append("Transaction date is more than 1 year old")

    mismatch = summary_total_mismatch(
        receipt.total_amount,
        receipt.subtotal_amount,
        receipt.tax_amount,
        receipt.tip_amount,
        receipt.discount_amount,
    )
    if mismatch:
        warnings.append(mismatch)

    if not receipt.line_items:
        warnings.append("No line items found")
    elif receipt.subtotal_amount is not None:
        item_sum = sum(item.total_price for item in receipt.line_items)
        if abs(item_sum - receipt.subtotal_amount) > ITEM_SUM_TOLERANCE:
            warnings.append(
                f"Line items total ({item_sum:.2f}) doesn't match subtotal ({receipt.subtotal_amount:.2f})"
            )

    adjusted = receipt.confidence - 0.1 * len(errors) - 0.05 * len(warnings)
    return ValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        adjusted_confidence=round(max(0.0, adjusted), 4),
    )
