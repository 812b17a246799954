import base64
import io

import pytest
from PIL import Image

from receipt_extraction.acquisition.cloud_vision_client import CloudVisionClient
from receipt_extraction.acquisition.document_ai_client import DocumentAIClient
from receipt_extraction.acquisition.image_utils import encode_image_base64, load_image
from receipt_extraction.acquisition.retry_executor import RetryExecutor
from receipt_extraction.acquisition.test_retry_executor import FakeResponse, ScriptedSessions
from receipt_extraction.models import ProcessingMethod


def _image():
    return Image.new("RGB", (20, 10), "white")


def _executor(sessions):
    return RetryExecutor(max_retries=1, sleep=lambda _: None, session_factory=sessions)


def _word(text, confidence=0.9, line_break=False):
    symbols = [{"text": ch} for ch in text]
    if line_break:
        symbols[-1]["property"] = {"detectedBreak": {"type": "EOL_SURE_SPACE"}}
    return {
        "symbols": symbols,
        "confidence": confidence,
        "boundingBox": {"vertices": [{"x": 0, "y": 0}, {"x": 10, "y": 5}]},
    }


VISION_RESPONSE = {
    "responses": [{
        "textAnnotations": [
            {"description": "STARBUCKS\nTotal $4.50", "boundingPoly": {"vertices": [{"x": 1, "y": 2}, {"x": 30, "y": 40}]}},
            {"description": "STARBUCKS"},
        ],
        "fullTextAnnotation": {
            "text": "STARBUCKS\nTotal $4.50",
            "pages": [{
                "confidence": 0.92,
                "blocks": [{
                    "confidence": 0.9,
                    "paragraphs": [
                        {"words": [_word("STARBUCKS", line_break=True)]},
                        {"words": [_word("Total"), _word("$4.50", line_break=True)]},
                    ],
                }],
            }],
        },
    }]
}


def test_cloud_vision_request_body():
    client = CloudVisionClient(api_key="k", executor=_executor(ScriptedSessions([])))

    body = client.build_request("abc")

    assert body == {
        "requests": [{
            "image": {"content": "abc"},
            "features": [
                {"type": "TEXT_DETECTION", "maxResults": 1},
                {"type": "DOCUMENT_TEXT_DETECTION", "maxResults": 1},
            ],
        }]
    }


def test_cloud_vision_parses_hierarchy():
    sessions = ScriptedSessions([FakeResponse(200, VISION_RESPONSE)])
    client = CloudVisionClient(api_key="k", executor=_executor(sessions))

    result = client.acquire(_image())

    assert result.success
    assert result.method == ProcessingMethod.CLOUD_VISION
    assert result.confidence == 0.92
    assert result.text == "STARBUCKS\nTotal $4.50"
    lines = [line.text for line in result.recognized_text.lines()]
    assert lines == ["STARBUCKS", "Total $4.50"]
    assert result.annotations[0].bounding_box.right == 30


def test_cloud_vision_error_object_is_failure():
    payload = {"responses": [{"error": {"code": 3, "message": "Bad image data"}}]}
    client = CloudVisionClient(api_key="k", executor=_executor(ScriptedSessions([FakeResponse(200, payload)])))

    result = client.acquire(_image())

    assert not result.success
    assert "Bad image data" in result.error


def test_cloud_vision_client_error_status_is_failure():
    client = CloudVisionClient(api_key="k", executor=_executor(ScriptedSessions([FakeResponse(400, {"error": "x"})])))

    result = client.acquire(_image())

    assert not result.success
    assert "400" in result.error


def test_cloud_vision_missing_responses_is_failure():
    client = CloudVisionClient(api_key="k", executor=_executor(ScriptedSessions([FakeResponse(200, {})])))

    result = client.acquire(_image())

    assert not result.success


def test_document_ai_parses_entities():
    payload = {
        "document": {
            "text": "Akira\nTotal $93.58",
            "entities": [
                {"type": "supplier_name", "mentionText": "Akira", "confidence": 0.9},
                {"type": "total_amount", "mentionText": "$93.58", "confidence": 0.7},
                {
                    "type": "line_item",
                    "mentionText": "1 Sushi Deluxe $20.75",
                    "confidence": 0.8,
                    "properties": [
                        {"type": "line_item/description", "mentionText": "Sushi Deluxe", "confidence": 0.8},
                        {"type": "line_item/amount", "mentionText": "$20.75", "confidence": 0.8},
                    ],
                },
            ],
        }
    }
    client = DocumentAIClient(api_key="k", endpoint="https://docai.test", executor=_executor(ScriptedSessions([FakeResponse(200, payload)])))

    result = client.acquire(_image())

    assert result.success
    assert result.confidence == (0.9 + 0.7 + 0.8) / 3
    assert result.first_entity("supplier_name").mention_text == "Akira"
    item = result.entities_of("line_item")[0]
    assert item.property_value("line_item/description") == "Sushi Deluxe"


def test_document_ai_without_entities_has_half_confidence():
    client = DocumentAIClient(
        api_key="k",
        endpoint="https://docai.test",
        executor=_executor(ScriptedSessions([FakeResponse(200, {"document": {"text": "hi"}})])),
    )

    result = client.acquire(_image())

    assert result.success
    assert result.confidence == 0.5


def test_document_ai_request_body():
    client = DocumentAIClient(api_key="k", endpoint="https://docai.test")

    assert client.build_request("abc") == {"rawDocument": {"content": "abc", "mimeType": "image/jpeg"}}


def test_encode_image_from_data_uri():
    buffer = io.BytesIO()
    Image.new("RGBA", (4, 4), (255, 0, 0, 255)).save(buffer, format="PNG")
    uri = "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()

    encoded = encode_image_base64(uri)
    decoded = load_image(base64.b64decode(encoded))

    assert decoded.format == "JPEG"
    assert decoded.size == (4, 4)


def _document_ai(payload):
    return DocumentAIClient(
        api_key="k",
        endpoint="https://docai.test",
        executor=_executor(ScriptedSessions([FakeResponse(200, payload)])),
    )


def test_document_ai_null_fields_are_treated_as_absent():
    payload = {"document": {"text": None, "entities": [
        {"type": "total_amount", "mentionText": "12.00", "confidence": None, "properties": None},
    ]}}

    result = _document_ai(payload).acquire(_image())

    assert result.success
    assert result.document_text == ""
    assert result.entities[0].confidence == 0.0
    assert result.entities[0].properties == ()


@pytest.mark.parametrize("payload", [
    {"document": {"entities": ["total_amount"]}},
    {"document": {"entities": [{"type": "total_amount", "confidence": "high"}]}},
    {"document": {"entities": [{"type": "line_item", "properties": [{"mentionText": "x"}]}]}},
])
def test_document_ai_malformed_entities_are_failures(payload):
    result = _document_ai(payload).acquire(_image())

    assert not result.success
    assert "Document AI" in result.error


def test_cloud_vision_null_annotations_are_treated_as_absent():
    client = CloudVisionClient(
        api_key="k",
        executor=_executor(ScriptedSessions([FakeResponse(200, {"responses": [{"textAnnotations": None}]})])),
    )

    result = client.acquire(_image())

    assert result.success
    assert result.text == ""
    assert result.confidence == 0.0


@pytest.mark.parametrize("payload", [
    {"responses": ["not an object"]},
    {"responses": [{"error": "quota exceeded"}]},
    {"responses": [{"textAnnotations": [{"description": "x", "boundingPoly": {"vertices": [{"x": "left"}]}}]}]},
    {"responses": [{"fullTextAnnotation": {"pages": [{"confidence": "n/a"}]}}]},
])
def test_cloud_vision_malformed_responses_are_failures(payload):
    client = CloudVisionClient(api_key="k", executor=_executor(ScriptedSessions([FakeResponse(200, payload)])))

    result = client.acquire(_image())

    assert not result.success
    assert "Cloud Vision" in result.error
