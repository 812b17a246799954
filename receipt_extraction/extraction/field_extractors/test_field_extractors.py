from datetime import datetime

import pytest

from receipt_extraction.config.config_manager import ConfigManager
from receipt_extraction.extraction.field_extractors import (
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
)
from receipt_extraction.extraction.shared_utils import PatternMatcher, TextCleaner

CONFIG = ConfigManager()
MATCHER = PatternMatcher()


def _merchant():
    return MerchantExtractor(CONFIG, MATCHER, TextCleaner())


@pytest.mark.parametrize("key,display_name", CONFIG.get_known_merchants())
def test_known_merchant_wins_over_regex_phrase(key, display_name):
    text = f"receipt from corner deli for your {key.upper()} purchase"

    result = _merchant().extract(text.lower())

    assert result.value == display_name
    assert result.extraction_method == 'known_merchant_table'


def test_known_merchant_matches_sender_address():
    result = _merchant().extract("thanks for riding", "receipts@uber.com")

    assert result.value == "Uber"


def test_merchant_regex_phrase_is_title_cased():
    result = _merchant().extract("store: blue bottle cafe\ntotal $4.00")

    assert result.value == "Blue Bottle Cafe"
    assert result.extraction_method == 'regex_pattern'


def test_merchant_from_sender_domain():
    result = _merchant().extract("thanks!", "billing@shopify.com")

    assert result.value == "Shopify"
    assert result.extraction_method == 'sender_domain'


def test_unknown_merchant():
    result = _merchant().extract("thanks!", "")

    assert result.value == "Unknown Merchant"
    assert not result.found


@pytest.mark.parametrize("text,expected", [
    ("total: $1,234.56", 1234.56),
    ("amount 45.99", 45.99),
    ("you paid $12,000.00 today", 12000.00),
    ("charged 19.99 usd", 19.99),
])
def test_amount_strips_thousands_separators(text, expected):
    result = AmountExtractor(CONFIG, MATCHER).extract(text)

    assert result.found
    assert result.value == pytest.approx(expected)


def test_amount_ignores_subtotal_keyword():
    result = AmountExtractor(CONFIG, MATCHER).extract("subtotal 10.00 then total: $12.50")

    assert result.value == 12.50


def test_amount_not_found_is_zero_sentinel():
    result = AmountExtractor(CONFIG, MATCHER).extract("no money mentioned")

    assert result.value == 0.0
    assert not result.found


@pytest.mark.parametrize("text,expected", [
    ("total $5", "USD"),
    ("total 5 eur", "EUR"),
    ("£3.20", "GBP"),
    ("¥500", "JPY"),
    ("nothing here", "USD"),
])
def test_currency(text, expected):
    assert CurrencyExtractor(CONFIG).extract(text).value == expected


@pytest.mark.parametrize("text,expected", [
    ("paid on 12/15/2024", datetime(2024, 12, 15)),
    ("paid on 3/7/24", datetime(2024, 3, 7)),
    ("date 2024-01-05", datetime(2024, 1, 5)),
    ("order date: december 15, 2024", datetime(2024, 12, 15)),
    ("shipped dec 2, 2023", datetime(2023, 12, 2)),
])
def test_date_patterns(text, expected):
    result = DateExtractor(CONFIG, MATCHER).extract(text)

    assert result.found
    assert result.value == expected


def test_date_defaults_to_clock():
    fixed = datetime(2025, 1, 1, 9, 30)
    extractor = DateExtractor(CONFIG, MATCHER, clock=lambda: fixed)

    result = extractor.extract("no date here, 99/99/9999")

    assert result.value == fixed
    assert not result.found


def test_category_table_order_breaks_ties():
    # "coffee" (food) and "amazon" (shopping) both match; food comes first
    result = CategoryExtractor(CONFIG).extract("amazon gift card for coffee")

    assert result.value == "Food"


def test_category_uses_sender_address():
    assert CategoryExtractor(CONFIG).extract("your trip", "noreply@lyft.com").value == "Transportation"


def test_category_default():
    assert CategoryExtractor(CONFIG).extract("hello").value == "Other"


def test_line_items_unit_price_is_derived():
    text = "2x avocado toast $18.00 1 latte $4.50"

    items = LineItemExtractor(CONFIG, MATCHER).extract(text)

    assert [i.name for i in items] == ["avocado toast", "latte"]
    assert items[0].quantity == 2.0
    assert items[0].unit_price == pytest.approx(9.0)
    assert items[0].total_price == 18.0
    assert items[1].unit_price == pytest.approx(4.5)


def test_line_items_zero_quantity_has_no_unit_price():
    items = LineItemExtractor(CONFIG, MATCHER).extract("0 sample $1.00")

    assert items[0].unit_price is None


def test_line_items_skip_summary_lines():
    items = LineItemExtractor(CONFIG, MATCHER).extract("1 bagel $2.50\n1 sales tax $0.20\n1 cash back $5.00\n1 tax $0.10")

    assert [i.name for i in items] == ["bagel"]


def test_line_items_keep_names_containing_summary_words():
    items = LineItemExtractor(CONFIG, MATCHER).extract("1 cash register tape $5.00\n2 tax guide $10.00\n1 tip jar $8.00")

    assert [i.name for i in items] == ["cash register tape", "tax guide", "tip jar"]
    assert items[1].unit_price == 5.0


@pytest.mark.parametrize("text,expected", [
    ("paid with visa ending 1234", "Visa"),
    ("mastercard **** 9999", "Mastercard"),
    ("charged to your american express card", "American Express"),
    ("apple pay", "Apple Pay"),
    ("visa and paypal", "Visa"),
    ("advisable to keep this", "Unknown"),
])
def test_payment_method_priority(text, expected):
    assert PaymentMethodExtractor(CONFIG, MATCHER).extract(text).value == expected


def test_payment_normalize_provider_label():
    extractor = PaymentMethodExtractor(CONFIG, MATCHER)

    assert extractor.normalize("VISA CREDIT") == "Visa"
    assert extractor.normalize("store card") == "Store Card"


@pytest.mark.parametrize("text,expected", [
    ("transaction id: ab-123", "ab-123"),
    ("order number 998877", "998877"),
    ("confirmation code xk9q", "xk9q"),
    ("your amazon.com order #123 total", "123"),
    ("nothing", ""),
])
def test_transaction_id(text, expected):
    assert TransactionIdExtractor(CONFIG, MATCHER).extract(text).value == expected


AKIRA = """Akira
385 Rt 9 W
Glenmont , NY 12077
518-434-8880
2018-11-18 18:58:34
1 Sushi Deluxe $20.75
Subtotal $86.65
Tax $6.93
Tip $10.00
Total $103.58"""


def test_summary_amounts_bottom_up():
    summary = SummaryAmountExtractor(CONFIG, MATCHER).extract(AKIRA)

    assert summary == {'subtotal': 86.65, 'tax': 6.93, 'tip': 10.00, 'discount': None}


def test_contact_details():
    contact = ContactExtractor(CONFIG, MATCHER).extract(AKIRA)

    assert contact['phone_number'] == "518-434-8880"
    assert contact['transaction_time'] == "18:58:34"
    assert contact['merchant_address'] == "385 Rt 9 W, Glenmont , NY 12077"
