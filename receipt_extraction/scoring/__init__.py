"""
Scoring Package
"""
from .confidence_scorer import ConfidenceResult, ConfidenceScorer

__all__ = [
    'ConfidenceResult',
    'ConfidenceScorer'
]
