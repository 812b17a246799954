import pandas as pd
import pytesseract
from PIL import Image

from receipt_extraction.acquisition.on_device_recognizer import OnDeviceTextRecognizer


def _words(rows):
    columns = ['level', 'page_num', 'block_num', 'par_num', 'line_num', 'word_num',
               'left', 'top', 'width', 'height', 'conf', 'text']
    return pd.DataFrame(rows, columns=columns)


TESSERACT_ROWS = [
    [1, 1, 0, 0, 0, 0, 0, 0, 200, 100, -1, None],
    [5, 1, 1, 1, 1, 1, 10, 5, 60, 12, 96, 'WALMART'],
    [5, 1, 1, 1, 2, 1, 10, 20, 30, 12, 90, 'Total'],
    [5, 1, 1, 1, 2, 2, 45, 20, 40, 12, 80, '$12.50'],
    [5, 1, 2, 1, 1, 1, 10, 60, 50, 12, 70, 'Thanks'],
]


def test_build_recognized_text_groups_lines():
    recognized = OnDeviceTextRecognizer.build_recognized_text(_words(TESSERACT_ROWS))

    assert recognized.full_text == "WALMART\nTotal $12.50\nThanks"
    assert len(recognized.blocks) == 2
    line = recognized.blocks[0].lines[1]
    assert line.text == "Total $12.50"
    assert line.bounding_box.left == 10
    assert line.bounding_box.right == 85
    assert recognized.confidence == round((0.96 + 0.90 + 0.80 + 0.70) / 4, 4)


def test_acquire_uses_tesseract_dataframe(monkeypatch):
    captured = {}

    def fake_image_to_data(image, lang=None, config=None, output_type=None):
        captured['output_type'] = output_type
        captured['mode'] = image.mode
        return _words(TESSERACT_ROWS)

    monkeypatch.setattr(pytesseract, "image_to_data", fake_image_to_data)
    recognizer = OnDeviceTextRecognizer()

    result = recognizer.acquire(Image.new("RGB", (200, 100), "white"))

    assert result.success
    assert captured['output_type'] == pytesseract.Output.DATAFRAME
    assert captured['mode'] == "L"
    assert "Total $12.50" in result.text


def test_acquire_without_text_is_failure(monkeypatch):
    monkeypatch.setattr(pytesseract, "image_to_data", lambda *a, **k: _words(TESSERACT_ROWS[:1]))

    result = OnDeviceTextRecognizer().acquire(Image.new("RGB", (10, 10), "white"))

    assert not result.success
    assert result.error == "No text recognized"


def test_unreadable_image_is_failure():
    result = OnDeviceTextRecognizer().acquire(b"not an image")

    assert not result.success


def test_preprocessing_can_be_disabled(monkeypatch):
    modes = []

    def fake_image_to_data(image, **kwargs):
        modes.append(image.mode)
        return _words(TESSERACT_ROWS)

    monkeypatch.setattr(pytesseract, "image_to_data", fake_image_to_data)

    OnDeviceTextRecognizer(preprocess=False).acquire(Image.new("RGB", (20, 10), "white"))

    assert modes == ["RGB"]
