"""
Text Acquisition Provider interface
"""
from abc import ABC, abstractmethod
from typing import Any

from ..models.extraction_models import AcquisitionResult, ProcessingMethod


class TextAcquisitionProvider(ABC):
    """Turns an image into recognized text or entities."""

    method: ProcessingMethod

    @property
    def name(self) -> str:
        return self.method.value

    @abstractmethod
    def acquire(self, image: Any) -> AcquisitionResult:
        """Process one image. Failures come back as ``success=False``, never as exceptions."""
