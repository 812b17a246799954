"""
Currency Extractor - Extracts currency information from receipts
"""
from ...config.config_manager import ConfigManager
from ...models.extraction_models import FieldResult

DEFAULT_CURRENCY = "USD"


class CurrencyExtractor:
    """Symbol/keyword sniffing in table order ($/USD, €/EUR, £/GBP, ¥/JPY)."""

    def __init__(self, config_manager: ConfigManager):
        self.currency_indicators = config_manager.get_currency_indicators()

    def extract(self, combined_text: str, originating_address: str = "") -> FieldResult:
        text = (combined_text or "").lower()
        for code, markers in self.currency_indicators:
            for marker in markers:
                if marker in text:
                    return FieldResult(code, True, 'symbol_or_keyword', raw_text=marker)
        return FieldResult(DEFAULT_CURRENCY, False, 'default')
