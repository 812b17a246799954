"""
On-Device Text Recognizer - Tesseract OCR without network access

Images are cleaned up with Pillow (see image_preprocessing) before
recognition. Word boxes from pytesseract.image_to_data are grouped into the
block -> line -> element hierarchy with pandas.
"""
import time
import logging
from typing import Any, Optional

import pandas as pd
import pytesseract

from .base import TextAcquisitionProvider
from .errors import ImageLoadError
from .image_preprocessing import preprocess_for_ocr
from .image_utils import load_image
from ..models.extraction_models import (
    BoundingBox,
    OCRAcquisitionResult,
    ProcessingMethod,
    RecognizedText,
    TextBlock,
    TextElement,
    TextLine,
)

logger = logging.getLogger(__name__)


def _box(left, top, width, height) -> BoundingBox:
    return BoundingBox(left=float(left), top=float(top), right=float(left + width), bottom=float(top + height))


class OnDeviceTextRecognizer(TextAcquisitionProvider):
    """Local recognizer used when no cloud credentials are configured."""

    method = ProcessingMethod.ON_DEVICE

    def __init__(self, tesseract_cmd: Optional[str] = None, lang: str = "eng", psm: int = 6, preprocess: bool = True):
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.lang = lang
        self.tesseract_config = f"--psm {psm}"
        self.preprocess = preprocess
        logger.info(f"✅ OnDeviceTextRecognizer initialized (lang={lang}, psm={psm})")

    def acquire(self, image: Any) -> OCRAcquisitionResult:
        start = time.perf_counter()
        try:
            pil_image = load_image(image)
            if self.preprocess:
                pil_image = preprocess_for_ocr(pil_image)
            words = pytesseract.image_to_data(
                pil_image,
                lang=self.lang,
                config=self.tesseract_config,
                output_type=pytesseract.Output.DATAFRAME,
            )
        except (ImageLoadError, pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            elapsed = int((time.perf_counter() - start) * 1000)
            logger.error(f"❌ On-device OCR failed: {e}")
            return OCRAcquisitionResult(
                success=False, method=self.method, error=str(e), processing_time_ms=elapsed
            )

        recognized = self.build_recognized_text(words)
        elapsed = int((time.perf_counter() - start) * 1000)
        if recognized.is_empty:
            logger.warning("⚠️ On-device OCR found no text")
            return OCRAcquisitionResult(
                success=False,
                method=self.method,
                error="No text recognized",
                processing_time_ms=elapsed,
                recognized_text=recognized,
            )

        logger.info(f"✅ On-device OCR complete: {len(recognized.blocks)} blocks, confidence {recognized.confidence:.2f}")
        return OCRAcquisitionResult(
            success=True,
            method=self.method,
            confidence=recognized.confidence,
            processing_time_ms=elapsed,
            recognized_text=recognized,
        )

    @staticmethod
    def build_recognized_text(words: pd.DataFrame) -> RecognizedText:
        """Group Tesseract word rows (level 5) into blocks and lines."""
        if words is None or words.empty:
            return RecognizedText(full_text="")

        df = words.copy()
        df = df[df['conf'].astype(float) >= 0].copy()
        df['text'] = df['text'].fillna('').astype(str).str.strip()
        df = df[df['text'] != ''].copy()
        if df.empty:
            return RecognizedText(full_text="")

        df['conf'] = df['conf'].astype(float) / 100.0
        df = df.sort_values(['block_num', 'par_num', 'line_num', 'word_num'])

        blocks = []
        for _, block_df in df.groupby('block_num', sort=True):
            lines = []
            for _, line_df in block_df.groupby(['par_num', 'line_num'], sort=True):
                elements = tuple(
                    TextElement(
                        text=row.text,
                        bounding_box=_box(row.left, row.top, row.width, row.height),
                        confidence=float(row.conf),
                    )
                    for row in line_df.itertuples(index=False)
                )
                lines.append(TextLine(
                    text=" ".join(e.text for e in elements),
                    elements=elements,
                    bounding_box=_box(
                        line_df['left'].min(),
                        line_df['top'].min(),
                        (line_df['left'] + line_df['width']).max() - line_df['left'].min(),
                        (line_df['top'] + line_df['height']).max() - line_df['top'].min(),
                    ),
                    confidence=float(line_df['conf'].mean()),
                ))
            blocks.append(TextBlock(
                text="\n".join(line.text for line in lines),
                lines=tuple(lines),
                bounding_box=_box(
                    block_df['left'].min(),
                    block_df['top'].min(),
                    (block_df['left'] + block_df['width']).max() - block_df['left'].min(),
                    (block_df['top'] + block_df['height']).max() - block_df['top'].min(),
                ),
                confidence=float(block_df['conf'].mean()),
            ))

        return RecognizedText(
            full_text="\n".join(block.text for block in blocks),
            blocks=tuple(blocks),
            confidence=round(float(df['conf'].mean()), 4),
        )
