from datetime import datetime

import pytest

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

SUITE = FieldExtractorSuite(ConfigManager())


def _entity(entity_type, text, confidence=0.9, normalized=None, properties=()):
    return DocumentEntity(
        type=entity_type,
        mention_text=text,
        confidence=confidence,
        normalized_value=normalized,
        properties=tuple(properties),
    )


def test_email_text_scenario():
    strategy = TextPatternExtractionStrategy(SUITE)
    combined = "your amazon.com order #123 total: $45.99 order date: december 15, 2024"

    fields = strategy.extract_text(
        "Your Amazon.com order #123\nTotal: $45.99 Order Date: December 15, 2024",
        originating_address="auto-confirm@amazon.com",
        combined_text=combined,
    )

    assert fields.merchant_name == "Amazon"
    assert fields.total_amount == 45.99
    assert fields.amount_found
    assert fields.currency == "USD"
    assert fields.category == "Shopping"
    assert fields.transaction_date == datetime(2024, 12, 15)
    assert not fields.date_defaulted
    assert fields.transaction_id == "123"
    assert fields.field_sources['merchant_name'] == 'known_merchant_table'


def test_ocr_acquisition_uses_recognized_text():
    text = "WALMART\n1 Bananas $1.20\nSubtotal $1.20\nTax $0.10\nTotal $1.30\nVISA"
    acquisition = OCRAcquisitionResult(
        success=True,
        method=ProcessingMethod.CLOUD_VISION,
        recognized_text=RecognizedText(full_text=text, confidence=0.9),
    )

    fields = TextPatternExtractionStrategy(SUITE).extract(acquisition)

    assert fields.merchant_name == "Walmart"
    assert fields.total_amount == 1.30
    assert fields.subtotal_amount == 1.20
    assert fields.tax_amount == 0.10
    assert fields.payment_method == "Visa"
    assert fields.category == "Groceries"
    assert fields.raw_text == text


def test_entity_strategy_reads_entities():
    acquisition = DocumentAcquisitionResult(
        success=True,
        method=ProcessingMethod.DOCUMENT_AI,
        confidence=0.9,
        document_text="Akira Sushi\nThank you\nTotal $93.58",
        entities=[
            _entity('supplier_name', 'Akira  Sushi'),
            _entity('total_amount', '$93.58', normalized='93.58'),
            _entity('net_amount', '86.65'),
            _entity('total_tax_amount', '6.93'),
            _entity('receipt_date', '11/18/2018', normalized='2018-11-18'),
            _entity('purchase_time', '18:58'),
            _entity('payment_type', 'MASTERCARD'),
            _entity('line_item', '1 Sushi Deluxe 20.75', properties=[
                _entity('line_item/description', 'Sushi Deluxe'),
                _entity('line_item/quantity', '1'),
                _entity('line_item/amount', '20.75'),
            ]),
            _entity('line_item', 'Noodle', properties=[
                _entity('line_item/description', 'Noodle'),
            ]),
            _entity('line_item', '2 Tuna Roll 13.00', properties=[
                _entity('line_item_description', 'Tuna Roll'),
                _entity('line_item_quantity', '2'),
                _entity('line_item_unit_price', '6.50'),
                _entity('line_item_total_price', '13.00'),
            ]),
        ],
    )

    fields = DocumentEntityExtractionStrategy(SUITE).extract(acquisition)

    assert fields.merchant_name == "Akira Sushi"
    assert fields.total_amount == 93.58
    assert fields.subtotal_amount == 86.65
    assert fields.tax_amount == 6.93
    assert fields.transaction_date == datetime(2018, 11, 18)
    assert fields.transaction_time == "18:58"
    assert fields.payment_method == "Mastercard"
    assert [i.name for i in fields.line_items] == ["Sushi Deluxe", "Tuna Roll"]
    assert fields.line_items[1].quantity == 2.0
    assert fields.line_items[1].unit_price == 6.50
    assert fields.field_sources['merchant_name'] == 'entity'


def test_entity_strategy_falls_back_to_text():
    acquisition = DocumentAcquisitionResult(
        success=True,
        method=ProcessingMethod.DOCUMENT_AI,
        document_text="Starbucks Coffee\nTotal: $6.75\n01/02/2024",
        entities=[_entity('receipt_date', 'Feb 1, 2024')],
    )

    fields = DocumentEntityExtractionStrategy(SUITE).extract(acquisition)

    assert fields.merchant_name == "Starbucks"
    assert fields.total_amount == 6.75
    assert fields.field_sources['total_amount'] == 'regex_pattern'
    assert fields.transaction_date == datetime(2024, 2, 1)
    assert fields.category == "Food"


def test_both_strategies_return_same_shape():
    ocr = OCRAcquisitionResult(
        success=True, method=ProcessingMethod.ON_DEVICE,
        recognized_text=RecognizedText(full_text="Total $5.00"),
    )
    doc = DocumentAcquisitionResult(success=True, method=ProcessingMethod.DOCUMENT_AI, document_text="Total $5.00")

    a = TextPatternExtractionStrategy(SUITE).extract(ocr)
    b = DocumentEntityExtractionStrategy(SUITE).extract(doc)

    assert type(a) is type(b)
    assert a.total_amount == b.total_amount == pytest.approx(5.0)
