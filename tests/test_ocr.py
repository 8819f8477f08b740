"""
Tests for receipt text recognition and amount extraction.

No real API calls: the Mindee client is replaced by a stub object.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest
from tenacity import wait_none

from tripbook.config import MindeeSettings, OcrSettings
from tripbook.models.trip import Currency
from tripbook.services.ocr import (
    AmountExtractor,
    MindeeTextRecognizer,
    TextRecognitionError,
    extract_currency_amount,
    parse_amount,
)


@pytest.fixture
def extractor():
    return AmountExtractor(OcrSettings())


class TestAmountExtractor:
    """Tests for the pattern cascade."""

    def test_euro_with_comma(self, extractor):
        """Test the comma as a decimal separator."""
        result = extractor.extract("Total: €45,90")
        assert result.amount == Decimal("45.90")
        assert result.currency == Currency.EUR
        assert result.is_fallback is False
        assert result.matched_text == "€45,90"

    def test_euro_suffix(self, extractor):
        result = extractor.extract("SUMME 12,50 €")
        assert result.amount == Decimal("12.50")
        assert result.currency == Currency.EUR

    @pytest.mark.parametrize("text,amount,currency", [
        ("Amount due $ 12.99", "12.99", Currency.USD),
        ("USD 100", "100", Currency.USD),
        ("合计 88.00元", "88.00", Currency.CNY),
        ("RMB 42", "42", Currency.CNY),
        ("お会計 3000円", "3000", Currency.JPY),
        ("JPY 1200", "1200", Currency.JPY),
        ("¥1500", "1500", Currency.JPY),
        ("980 ￥", "980", Currency.JPY),
    ])
    def test_markers(self, extractor, text, amount, currency):
        result = extractor.extract(text)
        assert result.amount == Decimal(amount)
        assert result.currency == currency

    def test_currency_code_beats_yen_sign(self, extractor):
        """Test that an unambiguous marker wins over the shared yen sign."""
        result = extractor.extract("¥1,200\nRMB 88.00")
        assert result.currency == Currency.CNY
        assert result.amount == Decimal("88.00")

    def test_euro_beats_dollar(self, extractor):
        result = extractor.extract("$ 20.00 or € 18.50")
        assert result.currency == Currency.EUR

    def test_no_digits(self, extractor):
        assert extractor.extract("Thank you for shopping") is None
        assert extractor.extract("") is None

    def test_fallback_uses_default_currency(self, extractor):
        result = extractor.extract("TOTAL 23.50")
        assert result.amount == Decimal("23.50")
        assert result.currency == Currency.EUR
        assert result.is_fallback is True

    def test_fallback_default_is_configurable(self):
        extractor = AmountExtractor(OcrSettings(default_currency="usd"))
        assert extractor.default_currency == Currency.USD
        assert extractor.extract("TOTAL 23.50").currency == Currency.USD

    def test_zero_rejected(self, extractor):
        assert extractor.extract("€0.00") is None

    def test_rejected_match_moves_on(self, extractor):
        """Test that an out-of-bounds value does not stop the cascade."""
        result = extractor.extract("€0.00 then $5.00")
        assert result.currency == Currency.USD
        assert result.amount == Decimal("5.00")

    def test_ceiling_with_minor_unit(self, extractor):
        assert extractor.extract("€ 100000.00") is None
        assert extractor.extract("€ 99999.99").amount == Decimal("99999.99")

    def test_ceiling_without_minor_unit(self, extractor):
        assert extractor.ceiling(Currency.JPY) == Decimal("10000000")
        assert extractor.extract("¥9999999").amount == Decimal("9999999")

    def test_module_helper(self):
        assert extract_currency_amount("€5").amount == Decimal("5")


class TestParseAmount:

    def test_comma(self):
        assert parse_amount("1,5") == Decimal("1.5")

    def test_dot(self):
        assert parse_amount("12.34") == Decimal("12.34")

    def test_garbage(self):
        assert parse_amount("abc") is None


class StubClient:
    """Stands in for mindee.Client."""

    def __init__(self, ocr_text=None, error=None):
        self.ocr_text = ocr_text
        self.error = error
        self.calls = 0

    def source_from_bytes(self, data, filename):
        return SimpleNamespace(data=data, filename=filename)

    def parse(self, product, input_doc, include_words=False):
        self.calls += 1
        if self.error:
            raise self.error
        return SimpleNamespace(document=SimpleNamespace(ocr=self.ocr_text))


@pytest.fixture
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(MindeeTextRecognizer.recognize_text.retry, "wait", wait_none())


class TestMindeeTextRecognizer:
    """Tests for the Mindee-backed recogniser."""

    def test_returns_page_text(self):
        recognizer = MindeeTextRecognizer(client=StubClient(ocr_text="TOTAL €12,00"))
        assert recognizer.recognize_text(b"\xff\xd8") == "TOTAL €12,00"

    def test_no_text(self):
        recognizer = MindeeTextRecognizer(client=StubClient(ocr_text=None))
        assert recognizer.recognize_text(b"\xff\xd8") == ""

    def test_failure_is_wrapped_after_retries(self, no_retry_wait):
        client = StubClient(error=RuntimeError("503"))
        recognizer = MindeeTextRecognizer(client=client)
        with pytest.raises(TextRecognitionError):
            recognizer.recognize_text(b"\xff\xd8")
        assert client.calls == 3

    def test_empty_image(self, no_retry_wait):
        recognizer = MindeeTextRecognizer(client=StubClient(ocr_text="x"))
        with pytest.raises(TextRecognitionError):
            recognizer.recognize_text(b"")

    def test_client_built_from_settings(self, monkeypatch):
        built = {}

        class FakeClient(StubClient):
            def __init__(self, api_key):
                super().__init__(ocr_text="ok")
                built["api_key"] = api_key

        monkeypatch.setattr("tripbook.services.ocr.mindee_service.Client", FakeClient)
        recognizer = MindeeTextRecognizer(settings=MindeeSettings(api_key="secret"))
        assert recognizer.recognize_text(b"img") == "ok"
        assert built == {"api_key": "secret"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
