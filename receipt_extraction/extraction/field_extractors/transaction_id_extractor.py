"""
Transaction ID Extractor
"""
from ..shared_utils.pattern_matcher import PatternMatcher
from ...config.config_manager import ConfigManager
from ...models.extraction_models import FieldResult


class TransactionIdExtractor:
    """Ordered id patterns; first capture wins, empty string otherwise."""

    def __init__(self, config_manager: ConfigManager, pattern_matcher: PatternMatcher):
        self.pattern_matcher = pattern_matcher
        self.id_patterns = config_manager.get_patterns('transaction_id_patterns')

    def extract(self, combined_text: str, originating_address: str = "") -> FieldResult:
        hit = self.pattern_matcher.first_valid_capture(
            combined_text or "", self.id_patterns, lambda captured: captured or None
        )
        if hit is None:
            return FieldResult("", False, 'default')
        value, pattern_config, match = hit
        return FieldResult(value, True, 'regex_pattern', raw_text=match.group(0), pattern_used=pattern_config['description'])
