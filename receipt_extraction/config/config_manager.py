"""
Configuration Manager for the Receipt Extraction Pipeline

Two layers:
- PipelineConfig: runtime settings (endpoints, credentials, retry policy, thresholds)
- ConfigManager: ordered lookup tables and regex patterns used by the field extractors

Both load an optional JSON or YAML file and fall back to in-code defaults.
"""
import os
import json
import logging
from pathlib import Path
from types import MappingProxyType
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)


def _read_config_file(path: Path) -> Dict[str, Any]:
    """Read a JSON or YAML config file into a dict."""
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")
    return data


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class PipelineConfig:
    """Runtime configuration for acquisition and scoring."""

    config_path: str = ""

    # Cloud credentials
    cloud_api_key: str = ""
    document_ai_project_id: str = ""
    document_ai_location: str = "us"
    document_ai_processor_id: str = ""

    # Endpoints
    vision_endpoint: str = "https://vision.googleapis.com/v1/images:annotate"
    document_ai_endpoint_template: str = (
        "https://documentai.googleapis.com/v1/projects/{project}/locations/{location}"
        "/processors/{processor}:process"
    )

    # Retry policy
    max_retries: int = 3
    retry_base_delay: float = 1.0
    request_timeout: float = 30.0

    # Thresholds
    acceptance_threshold: float = 0.7
    auto_accept_threshold: float = 0.5
    fallback_enabled: bool = True

    # On-device recognizer
    tesseract_cmd: str = ""
    tesseract_lang: str = "eng"
    preprocess_images: bool = True

    log_level: str = "INFO"
    log_file: str = ""

    ENV_OVERRIDES = {
        "RECEIPT_CLOUD_API_KEY": "cloud_api_key",
        "RECEIPT_DOCUMENT_AI_PROJECT": "document_ai_project_id",
        "RECEIPT_DOCUMENT_AI_LOCATION": "document_ai_location",
        "RECEIPT_DOCUMENT_AI_PROCESSOR": "document_ai_processor_id",
        "RECEIPT_FALLBACK_ENABLED": "fallback_enabled",
        "RECEIPT_LOG_LEVEL": "log_level",
        "RECEIPT_LOG_FILE": "log_file",
        "TESSERACT_CMD": "tesseract_cmd",
    }

    def __post_init__(self):
        """Load from file if available, then apply environment overrides."""
        if not self.config_path:
            self.config_path = os.getenv("RECEIPT_PIPELINE_CONFIG", "")
        self.load_config()
        self.apply_env_overrides()

    def load_config(self):
        """Load settings from the config file if it exists."""
        if not self.config_path or not os.path.exists(self.config_path):
            return
        try:
            data = _read_config_file(Path(self.config_path))
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"⚠️ Could not load pipeline config from {self.config_path}: {e}")
            return

        known = {f.name for f in fields(self)}
        for key, value in data.get("pipeline", data).items():
            if key in known and key != "config_path":
                setattr(self, key, value)
            else:
                logger.warning(f"⚠️ Ignoring unknown pipeline config key: {key}")

    def apply_env_overrides(self):
        for env_name, attr in self.ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value is None or value == "":
                continue
            if attr == "fallback_enabled":
                setattr(self, attr, _as_bool(value))
            else:
                setattr(self, attr, value)

    @property
    def cloud_configured(self) -> bool:
        return bool(self.cloud_api_key)

    @property
    def document_ai_configured(self) -> bool:
        return bool(self.cloud_api_key and self.document_ai_project_id and self.document_ai_processor_id)

    def document_ai_endpoint(self) -> str:
        return self.document_ai_endpoint_template.format(
            project=self.document_ai_project_id,
            location=self.document_ai_location,
            processor=self.document_ai_processor_id,
        )


class ConfigManager:
    """
    Serves the ordered lookup tables and pattern lists for extraction.

    Tables are frozen after load: tuples of (key, value) pairs where order
    decides precedence, and read-only mappings elsewhere.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self.config = self.load_configuration()
        self._freeze_tables()
        logger.info(
            f"✅ ConfigManager initialized: {len(self.known_merchants)} merchants, "
            f"{len(self.category_keywords)} categories"
        )

    def load_configuration(self) -> Dict[str, Any]:
        """Load configuration, overlaying file tables on the defaults."""
        config = self._get_default_config()
        if self.config_path is None:
            return config
        try:
            overrides = _read_config_file(self.config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"⚠️ Could not load extraction config from {self.config_path}: {e}")
            return config

        for key, value in overrides.items():
            if value:
                config[key] = value
            else:
                logger.warning(f"⚠️ Empty table '{key}' in {self.config_path}, keeping defaults")
        return config

    def _get_default_config(self) -> Dict[str, Any]:
        """Built-in tables. List order is match precedence."""
        return {
            'known_merchants': [
                ['amazon', 'Amazon'],
                ['walmart', 'Walmart'],
                ['target', 'Target'],
                ['costco', 'Costco'],
                ['starbucks', 'Starbucks'],
                ['mcdonalds', "McDonald's"],
                ['uber', 'Uber'],
                ['lyft', 'Lyft'],
                ['airbnb', 'Airbnb'],
                ['booking', 'Booking.com'],
                ['expedia', 'Expedia'],
                ['paypal', 'PayPal'],
                ['stripe', 'Stripe'],
                ['square', 'Square'],
            ],
            'category_keywords': [
                ['food', ['restaurant', 'food', 'dining', 'cafe', 'coffee', 'pizza', 'burger']],
                ['groceries', ['grocery', 'supermarket', 'market', 'walmart', 'target', 'costco']],
                ['transportation', ['uber', 'lyft', 'taxi', 'gas', 'fuel', 'parking', 'metro', 'bus']],
                ['shopping', ['amazon', 'store', 'shop', 'retail', 'clothing', 'fashion']],
                ['travel', ['hotel', 'airbnb', 'flight', 'airline', 'booking', 'expedia', 'travel']],
                ['utilities', ['electric', 'gas', 'water', 'internet', 'phone', 'cable']],
                ['entertainment', ['movie', 'theater', 'netflix', 'spotify', 'game', 'concert']],
            ],
            'payment_methods': [
                ['visa', 'Visa'],
                ['mastercard', 'Mastercard'],
                ['amex', 'American Express'],
                ['american express', 'American Express'],
                ['paypal', 'PayPal'],
                ['apple pay', 'Apple Pay'],
                ['google pay', 'Google Pay'],
                ['samsung pay', 'Samsung Pay'],
                ['discover', 'Discover'],
                ['venmo', 'Venmo'],
                ['debit', 'Debit Card'],
                ['cash', 'Cash'],
            ],
            'receipt_indicators': ['receipt', 'order', 'purchase', 'transaction', 'payment', 'invoice'],
            'currency_indicators': [
                ['USD', ['$', 'usd']],
                ['EUR', ['€', 'eur']],
                ['GBP', ['£', 'gbp']],
                ['JPY', ['¥', 'jpy']],
            ],
            'extraction_patterns': {
                'amount_patterns': [
                    {'pattern': r'\b(?:total|amount|sum)\s*:?\s*\$?([0-9,]+\.?[0-9]*)', 'description': 'Keyword total'},
                    {'pattern': r'\$([0-9,]+\.?[0-9]*)', 'description': 'Dollar sign amount'},
                    {'pattern': r'([0-9,]+\.?[0-9]*)\s*(?:usd|\$)', 'description': 'Trailing currency amount'},
                ],
                'merchant_patterns': [
                    {'pattern': r'from\s+([\w\s&.-]+?)(?:\s|$)', 'description': 'From <name>'},
                    {'pattern': r'receipt\s+from\s+([\w\s&.-]+)', 'description': 'Receipt from <name>'},
                    {'pattern': r'(?:store|shop|merchant)\s*:?\s*([\w\s&.-]+)', 'description': 'Store label'},
                ],
                'date_patterns': [
                    {'pattern': r'(\d{1,2}/\d{1,2}/\d{2,4})', 'description': 'Slash delimited'},
                    {'pattern': r'(\d{4}-\d{1,2}-\d{1,2})', 'description': 'ISO date'},
                    {'pattern': r'(\w+\s+\d{1,2},\s+\d{4})', 'description': 'Month DD, YYYY'},
                ],
                'line_item_patterns': [
                    {'pattern': r'(?<![\d.,$])(\d+(?:\.\d+)?)x?\s+([\w\s]+?)\s+\$([0-9.]+)', 'description': 'Qty name $price'},
                ],
                'transaction_id_patterns': [
                    {'pattern': r'(?:transaction|order|receipt)\s+(?:id|number)\s*:?\s*([a-z0-9-]+)', 'description': 'Transaction/order id'},
                    {'pattern': r'confirmation\s+(?:code|number)\s*:?\s*([a-z0-9-]+)', 'description': 'Confirmation code'},
                    {'pattern': r'order\s*#\s*([a-z0-9-]+)', 'description': 'Order hash number'},
                ],
                'strict_price_patterns': [
                    {'pattern': r'[$€£¥₹₩₪₦₨₱₡₽₴₫]\s*([0-9]{1,3}(?:,?[0-9]{3})*\.[0-9]{2})', 'description': 'Currency symbol price'},
                ],
                'phone_patterns': [
                    {'pattern': r'(\(?\d{3}\)?[-\s.]?\d{3}[-\s.]?\d{4})', 'description': 'North American phone'},
                ],
                'time_patterns': [
                    {'pattern': r'(\d{1,2}:\d{2}\s?(?:am|pm))', 'description': '12 hour'},
                    {'pattern': r'(\d{1,2}:\d{2}:\d{2}\s?(?:am|pm)?)', 'description': 'With seconds'},
                    {'pattern': r'(\d{1,2}:\d{2})', 'description': '24 hour'},
                ],
            },
            'summary_keywords': {
                'subtotal': ['subtotal', 'sub total', 'sub-total'],
                'tax': ['sales tax', 'tax', 'gst', 'hst', 'pst', 'vat'],
                'tip': ['tip', 'gratuity'],
                'discount': ['discount', 'savings', 'coupon'],
            },
            'address_markers': ['street', 'st', 'avenue', 'ave', 'road', 'rd', 'boulevard', 'blvd', 'drive', 'dr', 'lane', 'ln', 'way', 'highway', 'hwy', 'route', 'rt'],
            'non_item_markers': [
                'total', 'subtotal', 'sub total', 'grand total', 'total due', 'tax', 'sales tax',
                'tip', 'gratuity', 'change', 'change due', 'balance', 'balance due', 'amount due',
                'cash', 'cash back', 'discount',
            ],
            'date_formats': {
                'text': ['%m/%d/%Y', '%m/%d/%y', '%Y-%m-%d', '%B %d, %Y', '%b %d, %Y'],
                'entity': ['%m/%d/%Y', '%d/%m/%Y', '%Y-%m-%d', '%b %d, %Y', '%d %b %Y'],
            },
        }

    def _freeze_tables(self):
        """Convert loaded tables to immutable ordered structures."""
        cfg = self.config
        self.known_merchants: Tuple[Tuple[str, str], ...] = tuple(
            (str(k).lower(), str(v)) for k, v in cfg['known_merchants']
        )
        self.category_keywords: Tuple[Tuple[str, Tuple[str, ...]], ...] = tuple(
            (str(name), tuple(str(w).lower() for w in words)) for name, words in cfg['category_keywords']
        )
        self.payment_methods: Tuple[Tuple[str, str], ...] = tuple(
            (str(k).lower(), str(v)) for k, v in cfg['payment_methods']
        )
        self.receipt_indicators: Tuple[str, ...] = tuple(str(w).lower() for w in cfg['receipt_indicators'])
        self.currency_indicators: Tuple[Tuple[str, Tuple[str, ...]], ...] = tuple(
            (str(code), tuple(str(s).lower() for s in markers)) for code, markers in cfg['currency_indicators']
        )
        self.extraction_patterns: Mapping[str, Tuple[Mapping[str, str], ...]] = MappingProxyType({
            key: tuple(MappingProxyType(dict(p)) for p in patterns)
            for key, patterns in cfg['extraction_patterns'].items()
        })
        self.summary_keywords: Mapping[str, Tuple[str, ...]] = MappingProxyType({
            key: tuple(words) for key, words in cfg['summary_keywords'].items()
        })
        self.address_markers: Tuple[str, ...] = tuple(cfg['address_markers'])
        self.non_item_markers: Tuple[str, ...] = tuple(str(w).lower() for w in cfg['non_item_markers'])
        self.date_formats: Mapping[str, Tuple[str, ...]] = MappingProxyType({
            key: tuple(formats) for key, formats in cfg['date_formats'].items()
        })

    def get_patterns(self, pattern_key: str) -> Tuple[Mapping[str, str], ...]:
        """Get an ordered pattern list, empty if the key is unknown."""
        return self.extraction_patterns.get(pattern_key, ())

    def get_known_merchants(self) -> Tuple[Tuple[str, str], ...]:
        return self.known_merchants

    def get_category_keywords(self) -> Tuple[Tuple[str, Tuple[str, ...]], ...]:
        return self.category_keywords

    def get_payment_methods(self) -> Tuple[Tuple[str, str], ...]:
        return self.payment_methods

    def get_receipt_indicators(self) -> Tuple[str, ...]:
        return self.receipt_indicators

    def get_currency_indicators(self) -> Tuple[Tuple[str, Tuple[str, ...]], ...]:
        return self.currency_indicators

    def get_summary_keywords(self, field_name: str) -> Tuple[str, ...]:
        return self.summary_keywords.get(field_name, ())

    def get_non_item_markers(self) -> Tuple[str, ...]:
        return self.non_item_markers

    def get_address_markers(self) -> Tuple[str, ...]:
        return self.address_markers

    def get_date_formats(self, key: str = 'text') -> Tuple[str, ...]:
        return self.date_formats.get(key, ())


# Singletons
_config_manager: Optional[ConfigManager] = None
_pipeline_config: Optional[PipelineConfig] = None


def get_config_manager(config_path: Optional[str] = None) -> ConfigManager:
    """Get or create the shared ConfigManager."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_path or os.getenv("RECEIPT_EXTRACTION_TABLES"))
    return _config_manager


def get_pipeline_config() -> PipelineConfig:
    """Get or create the shared PipelineConfig."""
    global _pipeline_config
    if _pipeline_config is None:
        _pipeline_config = PipelineConfig()
    return _pipeline_config


def reset_config_singletons():
    global _config_manager, _pipeline_config
    _config_manager = None
    _pipeline_config = None
