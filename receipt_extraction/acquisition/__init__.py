"""
Acquisition Package - Image to text providers

Exports:
- TextAcquisitionProvider: provider interface
- CloudVisionClient: cloud OCR (fallback tier)
- DocumentAIClient: document-understanding service (primary tier)
- OnDeviceTextRecognizer: local Tesseract OCR
- RetryExecutor: bounded retry with linear backoff
"""

from .base import TextAcquisitionProvider
from .errors import (
    ProviderError,
    TransientProviderError,
    TerminalProviderError,
    ResponseParseError,
    ImageLoadError,
)
from .retry_executor import HttpRequest, RetryExecutor
from .image_utils import load_image, encode_image_base64
from .cloud_vision_client import CloudVisionClient
from .document_ai_client import DocumentAIClient
from .on_device_recognizer import OnDeviceTextRecognizer

__all__ = [
    'TextAcquisitionProvider',
    'ProviderError',
    'TransientProviderError',
    'TerminalProviderError',
    'ResponseParseError',
    'ImageLoadError',
    'HttpRequest',
    'RetryExecutor',
    'load_image',
    'encode_image_base64',
    'CloudVisionClient',
    'DocumentAIClient',
    'OnDeviceTextRecognizer'
]
