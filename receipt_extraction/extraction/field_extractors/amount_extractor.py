"""
Amount Extractor - Extracts the receipt total
"""
import logging

from ..shared_utils.pattern_matcher import PatternMatcher
from ..shared_utils.text_cleaner import TextCleaner
from ...config.config_manager import ConfigManager
from ...models.extraction_models import FieldResult

logger = logging.getLogger(__name__)

AMOUNT_NOT_FOUND = 0.0


class AmountExtractor:
    """Tries the ordered amount patterns; the first positive decimal wins."""

    def __init__(self, config_manager: ConfigManager, pattern_matcher: PatternMatcher):
        self.pattern_matcher = pattern_matcher
        self.amount_patterns = config_manager.get_patterns('amount_patterns')

    def extract(self, combined_text: str, originating_address: str = "") -> FieldResult:
        """
        Returns 0.0 with ``found=False`` when no pattern yields a positive amount.
        0.0 is a "not found" sentinel, not a measured zero.
        """
        hit = self.pattern_matcher.first_valid_capture(
            combined_text or "", self.amount_patterns, TextCleaner.parse_positive_amount
        )
        if hit is None:
            logger.debug("💰 No amount found")
            return FieldResult(AMOUNT_NOT_FOUND, False, 'default')

        amount, pattern_config, match = hit
        logger.debug(f"💰 Amount {amount} via {pattern_config['description']}")
        return FieldResult(
            amount, True, 'regex_pattern',
            raw_text=match.group(0),
            pattern_used=pattern_config['description'],
        )
