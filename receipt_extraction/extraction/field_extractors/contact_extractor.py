"""
Contact Extractor - Phone number, transaction time and merchant address
"""
import re
from typing import Dict, List, Optional

from ..shared_utils.pattern_matcher import PatternMatcher
from ...config.config_manager import ConfigManager

HEADER_LINES = 10


class ContactExtractor:
    """Header-area heuristics: phone and address come from the top lines, time from anywhere."""

    def __init__(self, config_manager: ConfigManager, pattern_matcher: PatternMatcher):
        self.pattern_matcher = pattern_matcher
        self.phone_patterns = config_manager.get_patterns('phone_patterns')
        self.time_patterns = config_manager.get_patterns('time_patterns')
        self.address_markers = config_manager.get_address_markers()

    def extract(self, combined_text: str, originating_address: str = "") -> Dict[str, Optional[str]]:
        lines = [line.strip() for line in (combined_text or "").splitlines() if line.strip()]
        return {
            'phone_number': self.extract_phone(lines),
            'transaction_time': self.extract_time(combined_text or ""),
            'merchant_address': self.extract_address(lines),
        }

    def extract_phone(self, lines: List[str]) -> Optional[str]:
        for line in lines[:HEADER_LINES]:
            for pattern_config in self.phone_patterns:
                match = self.pattern_matcher.search_pattern(line, pattern_config['pattern'])
                if match:
                    return match.group(1)
        return None

    def extract_time(self, text: str) -> Optional[str]:
        for pattern_config in self.time_patterns:
            for match in self.pattern_matcher.find_all_matches(text, pattern_config['pattern']):
                value = match.group(1).strip()
                if self._is_valid_time(value):
                    return value
        return None

    @staticmethod
    def _is_valid_time(value: str) -> bool:
        parts = re.match(r'(\d{1,2}):(\d{2})(?::(\d{2}))?\s*(am|pm)?', value, re.IGNORECASE)
        if not parts:
            return False
        hour, minute = int(parts.group(1)), int(parts.group(2))
        second = int(parts.group(3) or 0)
        max_hour = 12 if parts.group(4) else 23
        return hour <= max_hour and minute < 60 and second < 60

    def extract_address(self, lines: List[str]) -> Optional[str]:
        header = lines[:HEADER_LINES]
        for index, line in enumerate(header):
            if not re.search(r'\d', line):
                continue
            if not any(self.pattern_matcher.contains_word(line, marker) for marker in self.address_markers):
                continue
            parts = [line]
            if index + 1 < len(lines) and re.search(r'\b\d{5}(?:-\d{4})?\b', lines[index + 1]):
                parts.append(lines[index + 1])
            return ", ".join(parts)
        return None
