"""
Text Recognition Interface

The OCR engine is an external collaborator: image bytes in, recognised
text out. The amount extractor only ever sees the text, so any engine
that implements this interface can be plugged in.
"""

from abc import ABC, abstractmethod


class OCRError(Exception):
    """Base exception for OCR errors."""
    pass


class TextRecognitionError(OCRError):
    """The engine could not recognise text in the image."""
    pass


class TextRecognizerInterface(ABC):
    """Abstract OCR engine."""

    @abstractmethod
    def recognize_text(self, image_bytes: bytes, filename: str = "receipt.jpg") -> str:
        """
        Recognise the text printed on an image.

        Returns:
            The full recognised text (may be empty)

        Raises:
            TextRecognitionError: the engine failed
        """
        pass
