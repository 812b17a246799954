#!/usr/bin/env python3
"""
Cloud Vision Client - Receipt OCR via the images:annotate endpoint

Sends a base64 JPEG with text/document detection features and turns the
response into:
- textAnnotations (first entry holds the full text)
- a RecognizedText hierarchy built from fullTextAnnotation
  (pages -> blocks -> paragraphs -> words -> symbols)
"""

import time
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from .base import TextAcquisitionProvider
from .errors import ImageLoadError, ProviderError, ResponseParseError, TerminalProviderError
from .image_utils import encode_image_base64
from .retry_executor import HttpRequest, RetryExecutor
from ..models.extraction_models import (
    BoundingBox,
    OCRAcquisitionResult,
    ProcessingMethod,
    RecognizedText,
    TextAnnotation,
    TextBlock,
    TextElement,
    TextLine,
)

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"

# (feature type, maxResults)
DEFAULT_FEATURES: Tuple[Tuple[str, int], ...] = (
    ("TEXT_DETECTION", 1),
    ("DOCUMENT_TEXT_DETECTION", 1),
)
ALL_FEATURES: Dict[str, int] = {
    "TEXT_DETECTION": 1,
    "DOCUMENT_TEXT_DETECTION": 1,
    "OBJECT_LOCALIZATION": 10,
    "LOGO_DETECTION": 10,
}

LINE_ENDING_BREAKS = ("EOL_SURE_SPACE", "LINE_BREAK")


def decode_json_response(response: requests.Response, provider: str) -> Dict[str, Any]:
    """Raise on 4xx, otherwise parse JSON into a dict."""
    if response.status_code >= 400:
        raise TerminalProviderError(
            f"{provider} error: {response.status_code} - {response.text[:300]}",
            status_code=response.status_code,
            provider=provider,
        )
    try:
        data = response.json()
    except ValueError as e:
        raise ResponseParseError(f"{provider} returned invalid JSON: {e}", provider=provider) from e
    if not isinstance(data, dict):
        raise ResponseParseError(f"{provider} returned {type(data).__name__}, expected object", provider=provider)
    return data


class CloudVisionClient(TextAcquisitionProvider):
    """OCR provider backed by the Cloud Vision annotate API."""

    method = ProcessingMethod.CLOUD_VISION

    def __init__(
        self,
        api_key: str,
        endpoint: str = DEFAULT_ENDPOINT,
        executor: Optional[RetryExecutor] = None,
        features: Tuple[Tuple[str, int], ...] = DEFAULT_FEATURES,
    ):
        unknown = [name for name, _ in features if name not in ALL_FEATURES]
        if unknown:
            raise ValueError(f"Unknown Cloud Vision features: {unknown}")
        self.api_key = api_key
        self.endpoint = endpoint
        self.executor = executor or RetryExecutor(provider="Cloud Vision")
        self.features = features
        logger.info(f"✅ CloudVisionClient initialized: {self.endpoint}")

    def build_request(self, image_content: str) -> Dict[str, Any]:
        return {
            "requests": [
                {
                    "image": {"content": image_content},
                    "features": [
                        {"type": feature_type, "maxResults": max_results}
                        for feature_type, max_results in self.features
                    ],
                }
            ]
        }

    def acquire(self, image: Any) -> OCRAcquisitionResult:
        start = time.perf_counter()
        try:
            content = encode_image_base64(image)
            response = self.executor.execute(
                HttpRequest(url=f"{self.endpoint}?key={self.api_key}", json=self.build_request(content))
            )
            data = decode_json_response(response, "Cloud Vision")
            annotations, recognized, confidence = self.parse_response(data)
        except (ProviderError, ImageLoadError) as e:
            elapsed = int((time.perf_counter() - start) * 1000)
            logger.error(f"❌ Cloud Vision OCR failed: {e}")
            return OCRAcquisitionResult(
                success=False, method=self.method, error=str(e), processing_time_ms=elapsed
            )

        elapsed = int((time.perf_counter() - start) * 1000)
        logger.info(
            f"✅ Cloud Vision OCR complete: {len(recognized.full_text)} chars, "
            f"confidence {confidence:.2f} in {elapsed}ms"
        )
        return OCRAcquisitionResult(
            success=True,
            method=self.method,
            confidence=confidence,
            processing_time_ms=elapsed,
            annotations=annotations,
            recognized_text=recognized,
        )

    def parse_response(self, data: Dict[str, Any]) -> Tuple[List[TextAnnotation], RecognizedText, float]:
        """
        Parse an annotate response.

        Raises:
            TerminalProviderError: the first response carries an error object
            ResponseParseError: no responses in the body, or fields of the wrong shape
        """
        try:
            return self._parse_annotate_response(data)
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            raise ResponseParseError(
                f"Malformed Cloud Vision response: {type(e).__name__}: {e}", provider="Cloud Vision"
            ) from e

    def _parse_annotate_response(self, data: Dict[str, Any]) -> Tuple[List[TextAnnotation], RecognizedText, float]:
        responses = data.get("responses")
        if not isinstance(responses, list) or not responses:
            raise ResponseParseError("Cloud Vision response has no 'responses'", provider="Cloud Vision")

        first = responses[0] or {}
        if not isinstance(first, dict):
            raise ResponseParseError(
                f"Cloud Vision response entry is {type(first).__name__}, expected object", provider="Cloud Vision"
            )
        if first.get("error"):
            error = first["error"]
            if not isinstance(error, dict):
                error = {"message": str(error)}
            raise TerminalProviderError(
                f"Cloud Vision error: {error.get('message', error)}",
                status_code=error.get("code"),
                provider="Cloud Vision",
            )

        annotations = [
            TextAnnotation(
                description=a.get("description") or "",
                bounding_box=BoundingBox.from_vertices((a.get("boundingPoly") or {}).get("vertices") or []),
                confidence=a.get("confidence"),
                locale=a.get("locale"),
            )
            for a in first.get("textAnnotations") or []
        ]

        full_annotation = first.get("fullTextAnnotation")
        if full_annotation:
            recognized = self._parse_full_text(full_annotation, annotations)
        else:
            recognized = self._from_annotations(annotations)

        return annotations, recognized, recognized.confidence

    def _parse_full_text(self, full: Dict[str, Any], annotations: List[TextAnnotation]) -> RecognizedText:
        blocks: List[TextBlock] = []
        page_confidences: List[float] = []

        for page in full.get("pages") or []:
            if page.get("confidence") is not None:
                page_confidences.append(float(page["confidence"]))
            for block in page.get("blocks") or []:
                blocks.append(self._parse_block(block))

        text = full.get("text") or (annotations[0].description if annotations else "")
        return RecognizedText(
            full_text=text,
            blocks=tuple(blocks),
            confidence=self._overall_confidence(page_confidences, annotations),
        )

    def _parse_block(self, block: Dict[str, Any]) -> TextBlock:
        lines: List[TextLine] = []
        current: List[TextElement] = []

        def close_line():
            if current:
                line_text = " ".join(e.text for e in current)
                boxes = [e.bounding_box for e in current if e.bounding_box]
                lines.append(TextLine(
                    text=line_text,
                    elements=tuple(current),
                    bounding_box=_union(boxes),
                    confidence=sum(e.confidence for e in current) / len(current),
                ))
                current.clear()

        for paragraph in block.get("paragraphs") or []:
            for word in paragraph.get("words") or []:
                symbols = word.get("symbols") or []
                current.append(TextElement(
                    text="".join(s.get("text") or "" for s in symbols),
                    bounding_box=BoundingBox.from_vertices((word.get("boundingBox") or {}).get("vertices") or []),
                    confidence=float(word.get("confidence") or 0.0),
                ))
                last_break = ((symbols[-1].get("property") or {}).get("detectedBreak") or {}) if symbols else {}
                if last_break.get("type") in LINE_ENDING_BREAKS:
                    close_line()
            close_line()

        return TextBlock(
            text="\n".join(line.text for line in lines),
            lines=tuple(lines),
            bounding_box=BoundingBox.from_vertices((block.get("boundingBox") or {}).get("vertices") or []),
            confidence=float(block.get("confidence") or 0.0),
        )

    def _from_annotations(self, annotations: List[TextAnnotation]) -> RecognizedText:
        """No fullTextAnnotation: one block with a line per row of the full description."""
        if not annotations:
            return RecognizedText(full_text="", confidence=0.0)
        text = annotations[0].description
        lines = tuple(TextLine(text=row.strip()) for row in text.splitlines() if row.strip())
        block = TextBlock(text=text, lines=lines, bounding_box=annotations[0].bounding_box)
        return RecognizedText(
            full_text=text,
            blocks=(block,),
            confidence=self._overall_confidence([], annotations),
        )

    @staticmethod
    def _overall_confidence(page_confidences: List[float], annotations: List[TextAnnotation]) -> float:
        if page_confidences:
            return sum(page_confidences) / len(page_confidences)
        scored = [a.confidence for a in annotations if a.confidence is not None]
        if scored:
            return sum(scored) / len(scored)
        return 0.0


def _union(boxes: List[BoundingBox]) -> Optional[BoundingBox]:
    if not boxes:
        return None
    return BoundingBox(
        left=min(b.left for b in boxes),
        top=min(b.top for b in boxes),
        right=max(b.right for b in boxes),
        bottom=max(b.bottom for b in boxes),
    )
