"""OCR services package."""

from tripbook.services.ocr.amount_extractor import (
    AmountExtractor,
    extract_currency_amount,
    parse_amount,
)
from tripbook.services.ocr.interface import (
    OCRError,
    TextRecognitionError,
    TextRecognizerInterface,
)
from tripbook.services.ocr.mindee_service import MindeeTextRecognizer

__all__ = [
    "AmountExtractor",
    "extract_currency_amount",
    "parse_amount",
    "OCRError",
    "TextRecognitionError",
    "TextRecognizerInterface",
    "MindeeTextRecognizer",
]
