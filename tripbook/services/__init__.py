"""Services package."""

from tripbook.services.currency import (
    CurrencyConverter,
    ExchangeRateError,
    ExchangeRates,
    ExchangeRateService,
)
from tripbook.services.ocr import (
    AmountExtractor,
    MindeeTextRecognizer,
    OCRError,
    TextRecognitionError,
    TextRecognizerInterface,
)
from tripbook.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    StorageError,
    StorageFullError,
)

__all__ = [
    # Currency services
    "CurrencyConverter",
    "ExchangeRateError",
    "ExchangeRates",
    "ExchangeRateService",
    # OCR services
    "AmountExtractor",
    "MindeeTextRecognizer",
    "OCRError",
    "TextRecognitionError",
    "TextRecognizerInterface",
    # Storage services
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "StorageError",
    "StorageFullError",
]
