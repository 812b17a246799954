"""
Line Item Extractor - "<qty>x? <name> $<price>" items
"""
import logging
from typing import List

from ..shared_utils.pattern_matcher import PatternMatcher
from ..shared_utils.text_cleaner import TextCleaner
from ...config.config_manager import ConfigManager
from ...models.receipt_schema import LineItem

logger = logging.getLogger(__name__)

PATTERN_ITEM_CONFIDENCE = 0.5


class LineItemExtractor:
    """
    Applies the item pattern globally and keeps every non-overlapping match,
    except lines whose whole label is a summary label ("tax", "sales tax",
    "cash back"). Items that merely contain such a word ("tax guide") are kept.

    Unit price is always derived as price / quantity, never re-parsed, so a
    mis-read quantity yields a wrong unit price. Total vs quantity * unit price
    is not checked here.
    """

    def __init__(self, config_manager: ConfigManager, pattern_matcher: PatternMatcher):
        self.pattern_matcher = pattern_matcher
        self.item_patterns = config_manager.get_patterns('line_item_patterns')
        self.non_item_markers = config_manager.get_non_item_markers()

    def extract(self, combined_text: str, originating_address: str = "") -> List[LineItem]:
        items: List[LineItem] = []
        for pattern_config in self.item_patterns:
            for match in self.pattern_matcher.find_all_matches(combined_text or "", pattern_config['pattern']):
                quantity_str, name, price_str = match.group(1), match.group(2), match.group(3)
                price = TextCleaner.parse_amount(price_str)
                name = " ".join(name.split())
                if price is None or not name or self._is_summary_line(name):
                    continue
                try:
                    quantity = float(quantity_str)
                except ValueError:
                    quantity = 1.0
                items.append(LineItem(
                    name=name,
                    quantity=quantity,
                    unit_price=price / quantity if quantity else None,
                    total_price=price,
                    confidence=PATTERN_ITEM_CONFIDENCE,
                ))
        if items:
            logger.debug(f"🧾 Extracted {len(items)} line items")
        return items

    def _is_summary_line(self, name: str) -> bool:
        return " ".join(name.rstrip(":").split()) in self.non_item_markers
