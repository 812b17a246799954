"""
Summary Amount Extractor - Subtotal, tax, tip and discount lines

Summary lines sit near the bottom of a receipt, so lines are scanned
bottom-up and only prices with a currency symbol and two decimals count.
"""
import logging
from typing import Dict, List, Optional

from ..shared_utils.pattern_matcher import PatternMatcher
from ..shared_utils.text_cleaner import TextCleaner
from ...config.config_manager import ConfigManager

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = ('subtotal', 'tax', 'tip', 'discount')


class SummaryAmountExtractor:

    def __init__(self, config_manager: ConfigManager, pattern_matcher: PatternMatcher):
        self.config_manager = config_manager
        self.pattern_matcher = pattern_matcher
        self.price_patterns = config_manager.get_patterns('strict_price_patterns')
        self.subtotal_keywords = config_manager.get_summary_keywords('subtotal')

    def extract(self, combined_text: str, originating_address: str = "") -> Dict[str, Optional[float]]:
        lines = [line.strip() for line in (combined_text or "").splitlines() if line.strip()]
        results = {}
        for field_name in SUMMARY_FIELDS:
            results[field_name] = self._find_amount(lines, field_name)
        found = {k: v for k, v in results.items() if v is not None}
        if found:
            logger.debug(f"🧮 Summary amounts: {found}")
        return results

    def _find_amount(self, lines: List[str], field_name: str) -> Optional[float]:
        keywords = self.config_manager.get_summary_keywords(field_name)
        for line in reversed(lines):
            if not any(self.pattern_matcher.contains_word(line, k) for k in keywords):
                continue
            if field_name != 'subtotal' and self._is_total_line(line):
                continue
            price = self._last_price(line)
            if price is not None:
                return price
        return None

    def _is_total_line(self, line: str) -> bool:
        return (
            self.pattern_matcher.contains_word(line, 'total')
            or any(self.pattern_matcher.contains_word(line, k) for k in self.subtotal_keywords)
        )

    def _last_price(self, line: str) -> Optional[float]:
        for pattern_config in self.price_patterns:
            matches = self.pattern_matcher.find_all_matches(line, pattern_config['pattern'])
            if matches:
                return TextCleaner.parse_amount(matches[-1].group(1))
        return None
