#!/usr/bin/env python3
"""
Confidence Scorer - Checklist confidence for extracted receipt fields

Additive checklist (partial credit is kept):
    merchant resolved          +0.3
    amount > 0                 +0.4
    date resolved (not default) +0.1
    category != "Other"        +0.1
    receipt indicator keyword  +0.1

The total is in [0, 1] and gates auto-accept (>= 0.5 by default).
Consistency validation (total = subtotal + tax + tip - discount) is
reported alongside but never changes the gate.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config.config_manager import ConfigManager, get_config_manager
from ..extraction.field_extractors import DEFAULT_CATEGORY, UNKNOWN_MERCHANT
from ..models.extraction_models import ExtractedFields
from ..models.receipt_schema import summary_total_mismatch

logger = logging.getLogger(__name__)



@dataclass
class ConfidenceResult:
    """Structured confidence result with full breakdown."""
    overall_confidence: float

    # Gate flags
    auto_accepted: bool
    needs_review: bool

    # Per-check breakdown (weight earned, 0.0 when the check failed)
    field_confidences: Dict[str, float]
    checks_passed: List[str]

    # Validation results
    validation_passed: bool
    validation_errors: List[str]
    validation_warnings: List[str]

    # Weights used
    weights: Dict[str, float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ConfidenceScorer:
    """
    Checklist scorer for extracted receipt fields.

    Weights are applied in DEFAULT_WEIGHTS order; each check is independent.
    """

    DEFAULT_WEIGHTS = {
        'merchant': 0.3,
        'amount': 0.4,
        'date': 0.1,
        'category': 0.1,
        'receipt_keywords': 0.1,
    }

    AUTO_ACCEPT_THRESHOLD = 0.5

    def __init__(
        self,
        weights: Optional[Dict[str, float]] = None,
        auto_accept_threshold: float = AUTO_ACCEPT_THRESHOLD,
        config_manager: Optional[ConfigManager] = None,
    ):
        """
        Initialize confidence scorer.

        Args:
            weights: Custom weights per check (must cover every check)
            auto_accept_threshold: At or above this the record can be saved without review
            config_manager: Source of the receipt indicator keywords
        """
        self.weights = dict(weights or self.DEFAULT_WEIGHTS)
        missing = set(self.DEFAULT_WEIGHTS) - set(self.weights)
        if missing:
            raise ValueError(f"Missing weights for checks: {sorted(missing)}")

        weight_sum = sum(self.weights.values())
        if weight_sum > 1.0 + 1e-9:
            logger.warning(f"Weights sum to {weight_sum}, normalizing to 1.0")
            for key in self.weights:
                self.weights[key] /= weight_sum

        self.auto_accept_threshold = auto_accept_threshold
        self.receipt_indicators = (config_manager or get_config_manager()).get_receipt_indicators()

        self._checks: Tuple[Tuple[str, Callable[[ExtractedFields], bool]], ...] = (
            ('merchant', self._merchant_resolved),
            ('amount', lambda f: f.total_amount > 0),
            ('date', lambda f: f.transaction_date is not None and not f.date_defaulted),
            ('category', lambda f: bool(f.category) and f.category != DEFAULT_CATEGORY),
            ('receipt_keywords', self._has_receipt_keyword),
        )
        logger.info(f"✅ ConfidenceScorer initialized with weights: {self.weights}")

    @staticmethod
    def _merchant_resolved(fields: ExtractedFields) -> bool:
        name = (fields.merchant_name or "").strip()
        return bool(name) and name != UNKNOWN_MERCHANT

    def _has_receipt_keyword(self, fields: ExtractedFields) -> bool:
        text = (fields.combined_text or fields.raw_text or "").lower()
        return any(keyword in text for keyword in self.receipt_indicators)

    def score(self, fields: ExtractedFields) -> ConfidenceResult:
        """
        Score extracted fields.

        Returns:
            ConfidenceResult with per-check breakdown and validation notes
        """
        field_confidences: Dict[str, float] = {}
        checks_passed: List[str] = []
        overall = 0.0

        for name, check in self._checks:
            passed = check(fields)
            earned = self.weights[name] if passed else 0.0
            field_confidences[name] = earned
            overall += earned
            if passed:
                checks_passed.append(name)

        overall = round(max(0.0, min(1.0, overall)), 4)
        auto_accepted = overall >= self.auto_accept_threshold

        validation_errors, validation_warnings = self._validate_extraction(fields)

        result = ConfidenceResult(
            overall_confidence=overall,
            auto_accepted=auto_accepted,
            needs_review=not auto_accepted,
            field_confidences=field_confidences,
            checks_passed=checks_passed,
            validation_passed=not validation_errors,
            validation_errors=validation_errors,
            validation_warnings=validation_warnings,
            weights=self.weights.copy(),
        )

        logger.debug(f"Confidence: {overall:.3f} (passed: {', '.join(checks_passed) or 'none'})")
        return result

    def _validate_extraction(self, fields: ExtractedFields) -> Tuple[List[str], List[str]]:
        """
        Validate extracted fields for consistency.

        Returns:
            (errors, warnings)
        """
        errors: List[str] = []
        warnings: List[str] = []

        if not fields.amount_found:
            warnings.append("Total amount not found (0.0 is a default)")
        if fields.date_defaulted:
            warnings.append("Transaction date not found (defaulted to processing time)")

        for name in ('total_amount', 'subtotal_amount', 'tax_amount', 'tip_amount', 'discount_amount'):
            value = getattr(fields, name)
            if value is not None and value < 0:
                errors.append(f"Negative {name.replace('_', ' ')}: {value:.2f}")

        if fields.amount_found:
            mismatch = summary_total_mismatch(
                fields.total_amount,
                fields.subtotal_amount,
                fields.tax_amount,
                fields.tip_amount,
                fields.discount_amount,
            )
            if mismatch:
                warnings.append(mismatch)

        for item in fields.line_items:
            if item.total_price is not None and item.total_price < 0 and not item.discount:
                warnings.append(f"Negative line item price: {item.name}")

        return errors, warnings
