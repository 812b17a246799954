"""
Shared Utilities Package
"""
from .pattern_matcher import PatternMatcher
from .text_cleaner import TextCleaner

__all__ = [
    'PatternMatcher',
    'TextCleaner'
]
