#!/usr/bin/env python3
"""
Document AI Client - Receipt entity extraction via a document processor

Posts {rawDocument: {content, mimeType}} to a processor endpoint and returns
typed entities (supplier_name, total_amount, line_item, ...) along with the
document text.
"""

import time
import logging
from typing import Any, Dict, List, Optional, Tuple

from .base import TextAcquisitionProvider
from .cloud_vision_client import decode_json_response
from .errors import ImageLoadError, ProviderError, ResponseParseError
from .image_utils import encode_image_base64
from .retry_executor import HttpRequest, RetryExecutor
from ..models.extraction_models import DocumentAcquisitionResult, DocumentEntity, ProcessingMethod

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"
NO_ENTITY_CONFIDENCE = 0.5


class DocumentAIClient(TextAcquisitionProvider):
    """Document-understanding provider: high-fidelity primary tier."""

    method = ProcessingMethod.DOCUMENT_AI

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        executor: Optional[RetryExecutor] = None,
        mime_type: str = DEFAULT_MIME_TYPE,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.executor = executor or RetryExecutor(provider="Document AI")
        self.mime_type = mime_type
        logger.info(f"✅ DocumentAIClient initialized: {self.endpoint}")

    def build_request(self, image_content: str) -> Dict[str, Any]:
        return {"rawDocument": {"content": image_content, "mimeType": self.mime_type}}

    def acquire(self, image: Any) -> DocumentAcquisitionResult:
        start = time.perf_counter()
        try:
            content = encode_image_base64(image)
            response = self.executor.execute(
                HttpRequest(url=f"{self.endpoint}?key={self.api_key}", json=self.build_request(content))
            )
            data = decode_json_response(response, "Document AI")
            entities, document_text, confidence = self.parse_response(data)
        except (ProviderError, ImageLoadError) as e:
            elapsed = int((time.perf_counter() - start) * 1000)
            logger.error(f"❌ Document AI processing failed: {e}")
            return DocumentAcquisitionResult(
                success=False, method=self.method, error=str(e), processing_time_ms=elapsed
            )

        elapsed = int((time.perf_counter() - start) * 1000)
        logger.info(f"✅ Document AI complete: {len(entities)} entities, confidence {confidence:.2f}")
        return DocumentAcquisitionResult(
            success=True,
            method=self.method,
            confidence=confidence,
            processing_time_ms=elapsed,
            entities=entities,
            document_text=document_text,
        )

    def parse_response(self, data: Dict[str, Any]) -> Tuple[List[DocumentEntity], str, float]:
        """
        Parse a process response.

        Raises:
            ResponseParseError: no document, an entity without a type, or fields of the wrong shape
        """
        try:
            return self._parse_document(data)
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            raise ResponseParseError(
                f"Malformed Document AI response: {type(e).__name__}: {e}", provider="Document AI"
            ) from e

    def _parse_document(self, data: Dict[str, Any]) -> Tuple[List[DocumentEntity], str, float]:
        document = data.get("document")
        if not isinstance(document, dict):
            raise ResponseParseError("Document AI response has no 'document'", provider="Document AI")

        entities = [self._parse_entity(e) for e in document.get("entities") or []]
        if entities:
            confidence = sum(e.confidence for e in entities) / len(entities)
        else:
            confidence = NO_ENTITY_CONFIDENCE
        return entities, document.get("text") or "", confidence

    def _parse_entity(self, entity: Dict[str, Any]) -> DocumentEntity:
        if "type" not in entity:
            raise ResponseParseError("Document AI entity without 'type'", provider="Document AI")
        normalized = entity.get("normalizedValue") or {}
        return DocumentEntity(
            type=entity["type"],
            mention_text=entity.get("mentionText") or "",
            confidence=float(entity.get("confidence") or 0.0),
            normalized_value=normalized.get("text"),
            properties=tuple(self._parse_entity(p) for p in entity.get("properties") or []),
        )
