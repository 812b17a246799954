"""
Date Extractor - Extracts the transaction date
"""
import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from ..shared_utils.pattern_matcher import PatternMatcher
from ...config.config_manager import ConfigManager
from ...models.extraction_models import FieldResult

logger = logging.getLogger(__name__)


def parse_with_formats(value: str, formats: Iterable[str]) -> Optional[datetime]:
    """Try each strptime format in order; None if none fits."""
    value = " ".join(value.split())
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


class DateExtractor:
    """
    Ordered date patterns, each capture tried against the ordered format list.

    When nothing parses the current time is returned with ``found=False``;
    callers must treat it as "unknown, defaulted".
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        pattern_matcher: PatternMatcher,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.pattern_matcher = pattern_matcher
        self.date_patterns = config_manager.get_patterns('date_patterns')
        self.date_formats = config_manager.get_date_formats('text')
        self.clock = clock

    def extract(self, combined_text: str, originating_address: str = "") -> FieldResult:
        hit = self.pattern_matcher.first_valid_capture(
            combined_text or "",
            self.date_patterns,
            lambda captured: parse_with_formats(captured, self.date_formats),
        )
        if hit is None:
            logger.debug("📅 No date found, defaulting to now")
            return FieldResult(self.clock(), False, 'default')

        parsed, pattern_config, match = hit
        return FieldResult(
            parsed, True, 'regex_pattern',
            raw_text=match.group(1),
            pattern_used=pattern_config['description'],
        )
