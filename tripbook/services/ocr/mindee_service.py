"""
Text Recognition using Mindee

DESIGN DECISION: Mindee is used only as a text recogniser.
Its own receipt field extraction is tuned for other markets and does
not know which currencies a traveller meets, so we take the full OCR
text and run our own amount extractor over it.

This service handles:
1. Sending image bytes to Mindee
2. Returning the page text
3. Retrying transient failures
"""

from typing import Optional

from mindee import Client, PredictResponse
from mindee.product import ReceiptV5
from tenacity import retry, stop_after_attempt, wait_exponential

from tripbook.config import get_settings
from tripbook.config.settings import MindeeSettings
from tripbook.services.ocr.interface import TextRecognitionError, TextRecognizerInterface


class MindeeTextRecognizer(TextRecognizerInterface):
    """
    OCR engine backed by the Mindee receipt API.

    The client is created lazily so constructing the recogniser does
    not require network access.
    """

    def __init__(
        self,
        settings: Optional[MindeeSettings] = None,
        client: Optional[Client] = None,
    ):
        self._settings = settings
        self._client = client

    def _get_client(self) -> Client:
        """Get or create Mindee client."""
        if self._client is None:
            settings = self._settings or get_settings().mindee
            self._client = Client(api_key=settings.api_key)
        return self._client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def recognize_text(self, image_bytes: bytes, filename: str = "receipt.jpg") -> str:
        """
        Recognise the text on a receipt image.

        Raises:
            TextRecognitionError: empty image or Mindee failure
        """
        if not image_bytes:
            raise TextRecognitionError("Image is empty")

        client = self._get_client()
        try:
            input_doc = client.source_from_bytes(image_bytes, filename)
            result: PredictResponse = client.parse(ReceiptV5, input_doc, include_words=True)
        except Exception as e:
            raise TextRecognitionError(f"Mindee request failed: {e}") from e

        ocr = result.document.ocr
        return str(ocr) if ocr is not None else ""
