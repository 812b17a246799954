"""
Extraction Strategies - Raw provider output to ExtractedFields

Two interchangeable strategies produce the same ExtractedFields shape:
- TextPatternExtractionStrategy: regex/keyword extractors over recognized text
- DocumentEntityExtractionStrategy: typed entities from the document service,
  with the text extractors covering fields that have no entity

Each acquisition tier pairs a provider with its strategy, so the selector
never has to branch on result types.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .field_extractors import (
    AmountExtractor,
    CategoryExtractor,
    ContactExtractor,
    CurrencyExtractor,
    DateExtractor,
    LineItemExtractor,
    MerchantExtractor,
    PaymentMethodExtractor,
    SummaryAmountExtractor,
    TransactionIdExtractor,
    parse_with_formats,
)
from .shared_utils import PatternMatcher, TextCleaner
from ..config.config_manager import ConfigManager, get_config_manager
from ..models.extraction_models import (
    AcquisitionResult,
    DocumentAcquisitionResult,
    DocumentEntity,
    ExtractedFields,
)
from ..models.receipt_schema import LineItem

logger = logging.getLogger(__name__)

ISO_DATE_FORMAT = '%Y-%m-%d'


class FieldExtractorSuite:
    """All field extractors built over one ConfigManager."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        self.config_manager = config_manager or get_config_manager()
        self.pattern_matcher = PatternMatcher()
        self.text_cleaner = TextCleaner()

        cm, pm = self.config_manager, self.pattern_matcher
        self.merchant = MerchantExtractor(cm, pm, self.text_cleaner)
        self.amount = AmountExtractor(cm, pm)
        self.currency = CurrencyExtractor(cm)
        self.date = DateExtractor(cm, pm)
        self.category = CategoryExtractor(cm)
        self.line_items = LineItemExtractor(cm, pm)
        self.payment_method = PaymentMethodExtractor(cm, pm)
        self.transaction_id = TransactionIdExtractor(cm, pm)
        self.summary = SummaryAmountExtractor(cm, pm)
        self.contact = ContactExtractor(cm, pm)


class ExtractionStrategy(ABC):
    """Turns one successful acquisition into partial receipt fields."""

    @abstractmethod
    def extract(self, acquisition: AcquisitionResult, originating_address: str = "") -> ExtractedFields:
        ...


class TextPatternExtractionStrategy(ExtractionStrategy):

    def __init__(self, suite: Optional[FieldExtractorSuite] = None):
        self.suite = suite or FieldExtractorSuite()

    def extract(self, acquisition: AcquisitionResult, originating_address: str = "") -> ExtractedFields:
        return self.extract_text(acquisition.text, originating_address)

    def extract_text(
        self,
        raw_text: str,
        originating_address: str = "",
        combined_text: Optional[str] = None,
    ) -> ExtractedFields:
        """
        Run every extractor independently.

        Args:
            raw_text: source text, case preserved
            originating_address: sender address for email receipts
            combined_text: lowercased text to match against; derived from raw_text if omitted
        """
        s = self.suite
        normalized = s.text_cleaner.normalize_document_text(raw_text)
        combined = combined_text if combined_text is not None else normalized.lower()

        merchant = s.merchant.extract(combined, originating_address)
        amount = s.amount.extract(combined, originating_address)
        currency = s.currency.extract(combined, originating_address)
        date = s.date.extract(combined, originating_address)
        category = s.category.extract(combined, originating_address)
        payment = s.payment_method.extract(combined, originating_address)
        transaction_id = s.transaction_id.extract(combined, originating_address)
        items = s.line_items.extract(combined, originating_address)
        summary = s.summary.extract(normalized)
        contact = s.contact.extract(normalized)

        fields = ExtractedFields(
            merchant_name=merchant.value,
            merchant_address=contact['merchant_address'],
            phone_number=contact['phone_number'],
            transaction_date=date.value,
            date_defaulted=not date.found,
            transaction_time=contact['transaction_time'],
            total_amount=amount.value,
            amount_found=amount.found,
            subtotal_amount=summary['subtotal'],
            tax_amount=summary['tax'],
            tip_amount=summary['tip'],
            discount_amount=summary['discount'],
            currency=currency.value,
            category=category.value,
            payment_method=payment.value,
            transaction_id=transaction_id.value,
            line_items=items,
            raw_text=raw_text or "",
            combined_text=combined,
            field_sources={
                'merchant_name': merchant.extraction_method,
                'total_amount': amount.extraction_method,
                'currency': currency.extraction_method,
                'transaction_date': date.extraction_method,
                'category': category.extraction_method,
                'payment_method': payment.extraction_method,
                'transaction_id': transaction_id.extraction_method,
            },
        )
        logger.info(
            f"🔍 Text extraction: merchant='{fields.merchant_name}', amount={fields.total_amount}, "
            f"category={fields.category}, items={len(items)}"
        )
        return fields


class DocumentEntityExtractionStrategy(ExtractionStrategy):
    """Reads provider entities; text extractors fill the gaps."""

    def __init__(self, suite: Optional[FieldExtractorSuite] = None):
        self.suite = suite or FieldExtractorSuite()
        self.text_strategy = TextPatternExtractionStrategy(self.suite)
        self.entity_date_formats = self.suite.config_manager.get_date_formats('entity')

    def extract(self, acquisition: DocumentAcquisitionResult, originating_address: str = "") -> ExtractedFields:
        fields = self.text_strategy.extract_text(acquisition.document_text, originating_address)
        sources = dict(fields.field_sources)
        doc = acquisition

        supplier = doc.first_entity('supplier_name')
        if supplier:
            fields.merchant_name = " ".join(supplier.mention_text.split())
            sources['merchant_name'] = 'entity'

        total = self._amount(doc, 'total_amount')
        if total is not None and total > 0:
            fields.total_amount = total
            fields.amount_found = True
            sources['total_amount'] = 'entity'

        receipt_date = self._date(doc.first_entity('receipt_date', 'invoice_date'))
        if receipt_date is not None:
            fields.transaction_date = receipt_date
            fields.date_defaulted = False
            sources['transaction_date'] = 'entity'

        time_entity = doc.first_entity('purchase_time', 'receipt_time')
        if time_entity:
            fields.transaction_time = time_entity.mention_text.strip()

        for attr, types in (
            ('subtotal_amount', ('net_amount', 'subtotal_amount')),
            ('tax_amount', ('total_tax_amount', 'tax_amount')),
            ('tip_amount', ('tip_amount',)),
            ('discount_amount', ('discount_amount',)),
        ):
            value = self._amount(doc, *types)
            if value is not None:
                setattr(fields, attr, value)

        address = doc.first_entity('supplier_address')
        if address:
            fields.merchant_address = " ".join(address.mention_text.split())
        phone = doc.first_entity('supplier_phone')
        if phone:
            fields.phone_number = phone.mention_text.strip()

        currency = doc.first_entity('currency')
        if currency:
            detected = self.suite.currency.extract(currency.mention_text)
            if detected.found:
                fields.currency = detected.value
                sources['currency'] = 'entity'

        payment = doc.first_entity('payment_type')
        if payment:
            fields.payment_method = self.suite.payment_method.normalize(payment.mention_text)
            sources['payment_method'] = 'entity'

        receipt_id = doc.first_entity('receipt_id', 'invoice_id')
        if receipt_id:
            fields.transaction_id = receipt_id.mention_text.strip()
            sources['transaction_id'] = 'entity'

        # category keywords see the supplier name as well as the document text
        category = self.suite.category.extract(f"{fields.merchant_name} {fields.combined_text}")
        fields.category = category.value
        sources['category'] = category.extraction_method

        line_item_entities = doc.entities_of('line_item')
        if line_item_entities:
            fields.line_items = self._line_items(line_item_entities)
            sources['line_items'] = 'entity'

        fields.field_sources = sources
        logger.info(
            f"🔍 Entity extraction: merchant='{fields.merchant_name}', amount={fields.total_amount}, "
            f"items={len(fields.line_items)}, entities={len(doc.entities)}"
        )
        return fields

    def _amount(self, doc: DocumentAcquisitionResult, *types: str) -> Optional[float]:
        entity = doc.first_entity(*types)
        if entity is None:
            return None
        return TextCleaner.parse_amount(entity.normalized_value or entity.mention_text)

    def _date(self, entity: Optional[DocumentEntity]) -> Optional[datetime]:
        if entity is None:
            return None
        if entity.normalized_value:
            parsed = parse_with_formats(entity.normalized_value, (ISO_DATE_FORMAT,))
            if parsed is not None:
                return parsed
        return parse_with_formats(entity.mention_text, self.entity_date_formats)

    def _line_items(self, entities: List[DocumentEntity]) -> List[LineItem]:
        items = []
        for entity in entities:
            name = entity.property_value('line_item/description', 'line_item_description')
            total = TextCleaner.parse_amount(
                entity.property_value('line_item/amount', 'line_item_total_price', 'line_item/total_price')
            )
            if not name or total is None:
                logger.debug(f"Skipping unusable line item: '{entity.mention_text}'")
                continue
            quantity = TextCleaner.parse_amount(
                entity.property_value('line_item/quantity', 'line_item_quantity')
            )
            unit_price = TextCleaner.parse_amount(
                entity.property_value('line_item/unit_price', 'line_item_unit_price')
            )
            items.append(LineItem(
                name=name,
                quantity=quantity if quantity else 1.0,
                unit_price=unit_price,
                total_price=total,
                confidence=entity.confidence,
            ))
        return items
