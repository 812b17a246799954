"""
Field Extractors Package
"""
from .merchant_extractor import MerchantExtractor, UNKNOWN_MERCHANT
from .amount_extractor import AmountExtractor
from .currency_extractor import CurrencyExtractor
from .date_extractor import DateExtractor, parse_with_formats
from .category_extractor import CategoryExtractor, DEFAULT_CATEGORY
from .line_item_extractor import LineItemExtractor
from .payment_method_extractor import PaymentMethodExtractor
from .transaction_id_extractor import TransactionIdExtractor
from .summary_amount_extractor import SummaryAmountExtractor
from .contact_extractor import ContactExtractor

__all__ = [
    'MerchantExtractor',
    'UNKNOWN_MERCHANT',
    'AmountExtractor',
    'CurrencyExtractor',
    'DateExtractor',
    'parse_with_formats',
    'CategoryExtractor',
    'DEFAULT_CATEGORY',
    'LineItemExtractor',
    'PaymentMethodExtractor',
    'TransactionIdExtractor',
    'SummaryAmountExtractor',
    'ContactExtractor'
]
