"""
Category Extractor - Keyword table lookup
"""
from ...config.config_manager import ConfigManager
from ...models.extraction_models import FieldResult

DEFAULT_CATEGORY = "Other"


class CategoryExtractor:
    """First category (in table order) with any keyword in text + sender wins."""

    def __init__(self, config_manager: ConfigManager):
        self.category_keywords = config_manager.get_category_keywords()

    def extract(self, combined_text: str, originating_address: str = "") -> FieldResult:
        haystack = f"{combined_text or ''} {originating_address or ''}".lower()
        for category, keywords in self.category_keywords:
            for keyword in keywords:
                if keyword in haystack:
                    return FieldResult(category.capitalize(), True, 'keyword_table', raw_text=keyword)
        return FieldResult(DEFAULT_CATEGORY, False, 'default')
