"""
Main Orchestrator for Tripbook

This module ties together all the components and defines the
end-to-end flows for:
1. Camera expense (image -> text -> amount -> pending expense)
2. Expense entry (display amount -> base amount -> store)

DESIGN DECISION: The orchestrator enforces the boundaries:
- An amount read from a receipt is only a proposal; it is parked as the
  trip's pending camera expense and never saved as an expense directly
- Money reaches the store in base currency, converted exactly once
- Every step is audited

The store, the recogniser and the rate service are all injected, so
each flow can run against fakes in tests.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from tripbook.audit import AuditLogger, create_correlation_id
from tripbook.config import get_settings
from tripbook.models.audit import AuditEventBuilder
from tripbook.models.receipt import CameraScanResult
from tripbook.models.trip import (
    SHARED_OWNER_ID,
    ActivityExpense,
    Currency,
    ExpenseCategory,
    PendingCameraExpense,
    TripExpense,
)
from tripbook.services.currency import CurrencyConverter, ExchangeRateService, next_currency
from tripbook.services.ocr import (
    AmountExtractor,
    MindeeTextRecognizer,
    TextRecognitionError,
    TextRecognizerInterface,
)
from tripbook.services.storage import AuditStorageInterface
from tripbook.store import TripStore


class CameraExpenseFlow:
    """
    Orchestrates a receipt scan.

    Flow:
    1. Recognise → OCR engine turns the image into text
    2. Extract → amount extractor finds (amount, currency)
    3. Park → the amount becomes the trip's pending camera expense

    When nothing is found, or the engine fails, the result asks for
    manual entry instead. A scan never raises.
    """

    def __init__(
        self,
        store: TripStore,
        recognizer: Optional[TextRecognizerInterface] = None,
        extractor: Optional[AmountExtractor] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._recognizer = recognizer or MindeeTextRecognizer()
        self._extractor = extractor or AmountExtractor()
        self._audit_logger = audit_logger

    def scan_receipt(
        self,
        image_bytes: bytes,
        filename: str = "receipt.jpg",
        correlation_id: Optional[UUID] = None,
    ) -> CameraScanResult:
        """Recognise a receipt image and propose its amount."""
        correlation_id = correlation_id or create_correlation_id()

        try:
            text = self._recognizer.recognize_text(image_bytes, filename)
        except TextRecognitionError as e:
            if self._audit_logger:
                self._audit_logger.log_external_service_error(
                    service="ocr",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return CameraScanResult(
                message="The receipt could not be read. Please enter the amount manually.",
            )

        return self.scan_text(text, correlation_id)

    def scan_text(
        self,
        text: str,
        correlation_id: Optional[UUID] = None,
    ) -> CameraScanResult:
        """Propose an amount from already-recognised receipt text."""
        correlation_id = correlation_id or create_correlation_id()
        result = CameraScanResult(recognized_text=text, message="")

        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.text_recognized(
                scan_id=result.scan_id,
                char_count=len(text),
                correlation_id=correlation_id,
            ))

        extracted = self._extractor.extract(text)

        if extracted is None:
            if self._audit_logger:
                self._audit_logger.log(AuditEventBuilder.amount_not_found(
                    scan_id=result.scan_id,
                    correlation_id=correlation_id,
                ))
            return result.model_copy(update={
                "message": "No amount found on the receipt. Please enter it manually.",
            })

        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.amount_extracted(
                scan_id=result.scan_id,
                amount=str(extracted.amount),
                currency=extracted.currency.value,
                is_fallback=extracted.is_fallback,
                correlation_id=correlation_id,
            ))

        self._store.set_pending_camera_expense(PendingCameraExpense(
            amount=extracted.amount,
            currency=extracted.currency.value,
        ))

        message = f"Found {extracted.amount} {extracted.currency.value}"
        if extracted.is_fallback:
            message += " (currency assumed)"
        return result.model_copy(update={"extracted": extracted, "message": message})


class ExpenseEntryFlow:
    """
    Turns amounts typed in a display currency into stored expenses.

    The rate comes from the rate service when one is given, otherwise
    from the built-in defaults. A manual rate overrides both. Amounts in
    the base currency, or with a manual rate, never consult the rate
    service.

    `display_currency` is the currency used when none is given; it
    starts at the configured default and cycles with
    cycle_display_currency().
    """

    def __init__(
        self,
        store: TripStore,
        rate_service: Optional[ExchangeRateService] = None,
        display_currency: Optional[Union[Currency, str]] = None,
    ):
        settings = get_settings().currency
        self._store = store
        self._rate_service = rate_service
        self.base_currency = Currency(
            rate_service.base_currency if rate_service else settings.base_currency
        )
        self.display_currency = Currency(display_currency or settings.default_display_currency)

    def cycle_display_currency(self) -> Currency:
        self.display_currency = next_currency(self.display_currency)
        return self.display_currency

    def converter_for(
        self,
        currency: Optional[Union[Currency, str]] = None,
        manual_rate: Optional[Decimal] = None,
    ) -> CurrencyConverter:
        currency = Currency(currency or self.display_currency)
        fetched = None
        needs_rate = currency != self.base_currency and not (manual_rate and manual_rate > 0)
        if self._rate_service and needs_rate:
            fetched = self._rate_service.get_rates().rates
        return CurrencyConverter.for_currency(
            currency, fetched=fetched, manual=manual_rate, base_currency=self.base_currency,
        )

    def add_expense(
        self,
        amount: Decimal,
        currency: Union[Currency, str],
        description: str,
        category: ExpenseCategory = ExpenseCategory.OTHER,
        owner: str = SHARED_OWNER_ID,
        day_id: Optional[str] = None,
        expense_date: Optional[date] = None,
        manual_rate: Optional[Decimal] = None,
    ) -> Optional[TripExpense]:
        """
        Add a global expense entered in `currency`.

        Returns the stored expense, or None if the store refused it
        (no active trip, unknown owner).
        """
        converter = self.converter_for(currency, manual_rate)
        expense = TripExpense(
            amount=converter.to_base(Decimal(amount)),
            currency=converter.display_currency.value,
            description=description,
            category=category,
            owner=owner,
            day_id=day_id,
            expense_date=expense_date,
        )
        return expense if self._store.add_expense(expense) else None

    def add_activity_expense(
        self,
        day_id: str,
        activity_id: str,
        amount: Decimal,
        currency: Union[Currency, str],
        description: str = "",
        owner: str = SHARED_OWNER_ID,
        manual_rate: Optional[Decimal] = None,
    ) -> Optional[ActivityExpense]:
        converter = self.converter_for(currency, manual_rate)
        expense = ActivityExpense(
            amount=converter.to_base(Decimal(amount)),
            currency=converter.display_currency.value,
            description=description,
            owner=owner,
        )
        if self._store.add_activity_expense(day_id, activity_id, expense):
            return expense
        return None

    def take_pending(self) -> Optional[PendingCameraExpense]:
        """Hand over the pending camera expense and clear it."""
        trip = self._store.current_trip
        if trip is None or trip.pending_camera_expense is None:
            return None
        pending = trip.pending_camera_expense
        self._store.set_pending_camera_expense(None)
        return pending

    def add_pending_expense(
        self,
        description: str,
        category: ExpenseCategory = ExpenseCategory.OTHER,
        owner: str = SHARED_OWNER_ID,
        day_id: Optional[str] = None,
        expense_date: Optional[date] = None,
    ) -> Optional[TripExpense]:
        """
        Store the pending camera expense as a global expense.

        The pending value is only cleared once the expense is stored.
        """
        trip = self._store.current_trip
        if trip is None or trip.pending_camera_expense is None:
            return None
        pending = trip.pending_camera_expense
        expense = self.add_expense(
            amount=pending.amount,
            currency=pending.currency,
            description=description,
            category=category,
            owner=owner,
            day_id=day_id,
            expense_date=expense_date,
        )
        if expense is not None:
            self._store.set_pending_camera_expense(None)
        return expense


def create_app_components(
    audit_storage: Optional[AuditStorageInterface] = None,
    store: Optional[TripStore] = None,
) -> tuple[TripStore, CameraExpenseFlow, ExpenseEntryFlow, ExchangeRateService]:
    """
    Factory function to create all application components.

    Args:
        audit_storage: Where audit events are persisted.
                       If None, events are only logged locally.
        store: An existing store to wire up. A fresh one by default.

    Returns:
        (store, camera_flow, entry_flow, rate_service)
    """
    audit_logger = AuditLogger(audit_storage)
    store = store or TripStore(audit_logger=audit_logger)
    rate_service = ExchangeRateService(audit_logger=audit_logger)

    camera_flow = CameraExpenseFlow(store, audit_logger=audit_logger)
    entry_flow = ExpenseEntryFlow(store, rate_service=rate_service)

    return store, camera_flow, entry_flow, rate_service
