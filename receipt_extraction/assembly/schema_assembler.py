"""
Receipt Schema Assembler - Merges extracted fields and provenance into one ReceiptSchema
"""
import uuid
import logging
from datetime import datetime, timezone
from typing import Optional

from ..models.extraction_models import ExtractedFields, ProcessingProvenance
from ..models.receipt_schema import ReceiptSchema
from ..scoring.confidence_scorer import ConfidenceResult

logger = logging.getLogger(__name__)


class ReceiptSchemaAssembler:
    """
    Pure merge step. Given the same inputs, ``receipt_id`` and ``created_at``
    it always returns an equal schema.
    """

    def assemble(
        self,
        fields: ExtractedFields,
        provenance: ProcessingProvenance,
        confidence: ConfidenceResult,
        receipt_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        image_uri: Optional[str] = None,
    ) -> ReceiptSchema:
        created_at = created_at or datetime.now(timezone.utc)

        defaulted = []
        if not fields.amount_found:
            defaulted.append('total_amount')
        if fields.date_defaulted:
            defaulted.append('transaction_date')

        receipt = ReceiptSchema(
            id=receipt_id or uuid.uuid4().hex,
            merchant_name=fields.merchant_name,
            merchant_address=fields.merchant_address,
            phone_number=fields.phone_number,
            transaction_date=fields.transaction_date,
            transaction_time=fields.transaction_time,
            total_amount=fields.total_amount,
            subtotal_amount=fields.subtotal_amount,
            tax_amount=fields.tax_amount,
            tip_amount=fields.tip_amount,
            discount_amount=fields.discount_amount,
            line_items=tuple(fields.line_items),
            category=fields.category,
            payment_method=fields.payment_method,
            transaction_id=fields.transaction_id,
            currency=fields.currency,
            confidence=confidence.overall_confidence,
            raw_text=fields.raw_text,
            image_uri=image_uri,
            processing_method=provenance.method,
            fallback_used=provenance.fallback_used,
            provider_confidence=round(provenance.provider_confidence, 4),
            defaulted_fields=tuple(defaulted),
            created_at=created_at,
            updated_at=created_at,
        )
        logger.debug(f"📦 Assembled receipt {receipt.id} via {provenance.method.value}")
        return receipt
