"""
Pattern Matcher - Handles regex pattern matching for extraction
"""
import re
from typing import Callable, Iterable, List, Mapping, Optional, Match, Pattern, Tuple, TypeVar

T = TypeVar('T')


class PatternMatcher:
    """Cached regex operations shared by the field extractors."""

    def __init__(self):
        self.cache = {}  # Cache compiled patterns for performance

    def compile_pattern(self, pattern_str: str, flags: int = re.IGNORECASE) -> Pattern:
        """Compile and cache regex pattern."""
        cache_key = (pattern_str, flags)
        if cache_key not in self.cache:
            self.cache[cache_key] = re.compile(pattern_str, flags)
        return self.cache[cache_key]

    def find_all_matches(self, text: str, pattern_str: str, flags: int = re.IGNORECASE) -> List[Match]:
        """Find all matches for a pattern in text."""
        pattern = self.compile_pattern(pattern_str, flags)
        return list(pattern.finditer(text))

    def search_pattern(self, text: str, pattern_str: str, flags: int = re.IGNORECASE) -> Optional[Match]:
        """Search for pattern in text (first match)."""
        pattern = self.compile_pattern(pattern_str, flags)
        return pattern.search(text)

    def first_valid_capture(
        self,
        text: str,
        patterns: Iterable[Mapping[str, str]],
        convert: Callable[[str], Optional[T]],
        group: int = 1,
    ) -> Optional[Tuple[T, Mapping[str, str], Match]]:
        """
        Walk an ordered pattern list and return the first capture that converts.

        For each pattern, matches are tried left to right; ``convert`` returns
        None for a capture that should be skipped.

        Returns:
            (converted value, pattern config, match) or None
        """
        for pattern_config in patterns:
            for match in self.find_all_matches(text, pattern_config['pattern']):
                captured = match.group(group)
                if captured is None:
                    continue
                value = convert(captured)
                if value is not None:
                    return value, pattern_config, match
        return None

    def contains_word(self, text: str, keyword: str) -> bool:
        """Case-insensitive test with word boundaries around the keyword."""
        return self.search_pattern(text, rf'(?<!\w){re.escape(keyword)}(?!\w)') is not None
