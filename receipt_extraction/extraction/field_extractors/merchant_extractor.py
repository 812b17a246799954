"""
Merchant Extractor - Resolves the merchant name from combined text and sender address
"""
import logging

from ..shared_utils.pattern_matcher import PatternMatcher
from ..shared_utils.text_cleaner import TextCleaner
from ...config.config_manager import ConfigManager
from ...models.extraction_models import FieldResult

logger = logging.getLogger(__name__)

UNKNOWN_MERCHANT = "Unknown Merchant"


class MerchantExtractor:
    """
    Fixed precedence:
    1. known-merchant table (text or sender address), first table entry wins
    2. regex phrases ("from <name>", "receipt from <name>", "store: <name>")
    3. sender domain label
    4. "Unknown Merchant"
    """

    def __init__(self, config_manager: ConfigManager, pattern_matcher: PatternMatcher, text_cleaner: TextCleaner):
        self.pattern_matcher = pattern_matcher
        self.text_cleaner = text_cleaner
        self.known_merchants = config_manager.get_known_merchants()
        self.merchant_patterns = config_manager.get_patterns('merchant_patterns')

    def extract(self, combined_text: str, originating_address: str = "") -> FieldResult:
        text = (combined_text or "").lower()
        address = (originating_address or "").lower()

        for key, display_name in self.known_merchants:
            if key in text or key in address:
                logger.debug(f"🏪 Known merchant '{display_name}' matched on '{key}'")
                return FieldResult(display_name, True, 'known_merchant_table', raw_text=key)

        for pattern_config in self.merchant_patterns:
            match = self.pattern_matcher.search_pattern(text, pattern_config['pattern'])
            if not match:
                continue
            name = self.text_cleaner.clean_merchant_name(match.group(1))
            if name:
                logger.debug(f"🏪 Merchant '{name}' from pattern: {pattern_config['description']}")
                return FieldResult(
                    name, True, 'regex_pattern',
                    raw_text=match.group(0),
                    pattern_used=pattern_config['description'],
                )

        domain_name = self.merchant_from_address(originating_address)
        if domain_name:
            return FieldResult(domain_name, True, 'sender_domain', raw_text=originating_address)

        return FieldResult(UNKNOWN_MERCHANT, False, 'default')

    @staticmethod
    def merchant_from_address(address: str) -> str:
        """'receipts@shop-name.com' -> 'Shop-name'. Empty when there is no usable label."""
        if not address or "@" not in address:
            return ""
        label = address.split("@", 1)[1].split(".", 1)[0].strip(" <>\"'")
        if not label:
            return ""
        return label[0].upper() + label[1:]
