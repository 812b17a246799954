"""
Text Cleaner - Handles OCR text cleaning and normalization
"""
import re
import string
from typing import Optional


class TextCleaner:
    """Cleans and normalizes text for extraction."""

    def clean_text_line_for_ocr(self, line):
        """
        Normalize OCR artifacts: replace unicode spaces/dashes and collapse whitespace.
        """
        if not line:
            return ""

        # Replace all dash variants with standard dash
        line = re.sub(r"[\u2010-\u2015\u2212]", "-", line)
        line = line.replace("\u00a0", " ")

        # Normalize spacing
        line = re.sub(r"[ \t]+", " ", line)

        return line.strip()

    def build_combined_text(self, *parts: str) -> str:
        """Join text parts with single spaces and lowercase them."""
        joined = " ".join(p for p in parts if p)
        return self.clean_text_line_for_ocr(joined).lower()

    def normalize_document_text(self, text: str) -> str:
        """Clean each line but keep line breaks."""
        if not text:
            return ""
        lines = (self.clean_text_line_for_ocr(line) for line in text.splitlines())
        return "\n".join(line for line in lines if line)

    def clean_merchant_name(self, name: Optional[str]) -> str:
        """Trim a regex-captured merchant phrase and title-case it."""
        if not name:
            return ""
        # captures never span lines
        name = name.split("\n", 1)[0]
        name = re.sub(r"\s+", " ", name).strip(" .-&")
        return string.capwords(name)

    @staticmethod
    def parse_amount(value: Optional[str]) -> Optional[float]:
        """
        Parse a money string such as "$1,234.56" into a float.

        Everything except digits and the decimal point is dropped.
        Returns None when nothing numeric remains.
        """
        if value is None:
            return None
        cleaned = re.sub(r"[^0-9.]", "", str(value))
        if not cleaned or cleaned.count(".") > 1:
            return None
        try:
            return float(cleaned)
        except ValueError:
            return None

    @staticmethod
    def parse_positive_amount(value: Optional[str]) -> Optional[float]:
        amount = TextCleaner.parse_amount(value)
        return amount if amount is not None and amount > 0 else None
