"""
Payment Method Extractor - Issuer and wallet keyword sniffing
"""
from typing import Optional

from ..shared_utils.pattern_matcher import PatternMatcher
from ...config.config_manager import ConfigManager
from ...models.extraction_models import FieldResult

UNKNOWN_PAYMENT_METHOD = "Unknown"


class PaymentMethodExtractor:
    """First payment table keyword found as a whole word wins."""

    def __init__(self, config_manager: ConfigManager, pattern_matcher: PatternMatcher):
        self.pattern_matcher = pattern_matcher
        self.payment_methods = config_manager.get_payment_methods()

    def extract(self, combined_text: str, originating_address: str = "") -> FieldResult:
        text = combined_text or ""
        for keyword, method in self.payment_methods:
            if self.pattern_matcher.contains_word(text, keyword):
                return FieldResult(method, True, 'keyword_table', raw_text=keyword)
        return FieldResult(UNKNOWN_PAYMENT_METHOD, False, 'default')

    def normalize(self, value: Optional[str]) -> Optional[str]:
        """Map a provider payment label (e.g. 'VISA CREDIT') onto the display names."""
        if not value:
            return None
        result = self.extract(value)
        return result.value if result.found else value.strip().title()
