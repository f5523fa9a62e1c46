import re
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any

from claim_payments.domain.exceptions import (
    IllegalStateTransitionError,
    InvalidAmountError,
    InvalidInputError,
    InvalidPaymentMethodError,
    InvalidTransactionReferenceError,
)


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    def can_transition_to(self, new_status: "PaymentStatus") -> bool:
        return can_transition(self, new_status)

    @classmethod
    def parse(cls, raw: str | None) -> "PaymentStatus":
        normalized = (raw or "").strip().upper()
        try:
            return cls[normalized]
        except KeyError:
            raise InvalidInputError("status", f"unknown payment status {raw!r}") from None


TERMINAL_STATUSES = frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.REFUNDED})

ALLOWED_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PROCESSING, PaymentStatus.FAILED}),
    PaymentStatus.PROCESSING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}


def can_transition(current: PaymentStatus, requested: PaymentStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS[current]


class PaymentMethod(Enum):
    BANK_TRANSFER = "BANK_TRANSFER"
    CHECK = "CHECK"
    CREDIT_CARD = "CREDIT_CARD"
    CASH = "CASH"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def parse(cls, raw: str | None) -> "PaymentMethod":
        """Case-insensitive lookup by member name.

        Raises InvalidPaymentMethodError for anything that is not one of the
        four known methods, including None and blank strings.
        """
        normalized = (raw or "").strip().upper()
        try:
            return cls[normalized]
        except KeyError:
            raise InvalidPaymentMethodError(raw) from None


class ClaimStatus(Enum):
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CLOSED = "CLOSED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: str | None) -> "ClaimStatus":
        """Map a status written by the claims system; unrecognized values become UNKNOWN."""
        normalized = (raw or "").strip().upper()
        try:
            return cls[normalized]
        except KeyError:
            return cls.UNKNOWN


CENTS = Decimal("0.01")

# payments.amount is NUMERIC(19, 2)
MAX_AMOUNT = Decimal("99999999999999999.99")


@dataclass(frozen=True, order=True)
class MoneyAmount:
    """Positive monetary value held at two decimal places (ROUND_HALF_UP)."""

    value: Decimal

    def __post_init__(self) -> None:
        raw: Any = self.value
        if raw is None:
            raise InvalidAmountError(raw, "amount cannot be null")
        if isinstance(raw, bool):
            raise InvalidAmountError(raw, "amount must be a number")
        if isinstance(raw, float):
            raw = str(raw)
        try:
            amount = raw if isinstance(raw, Decimal) else Decimal(raw)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidAmountError(raw, "amount must be a number") from None
        if not amount.is_finite():
            raise InvalidAmountError(raw, "amount must be finite")
        if amount > MAX_AMOUNT:
            raise InvalidAmountError(raw, "amount is too large")
        rounded = amount.quantize(CENTS, rounding=ROUND_HALF_UP) if amount > 0 else amount
        if rounded <= 0:
            raise InvalidAmountError(raw, "amount must be positive")
        object.__setattr__(self, "value", rounded)

    def greater_than(self, other: "MoneyAmount") -> bool:
        return self.value > other.value

    def less_than_or_equal(self, other: "MoneyAmount") -> bool:
        return self.value <= other.value

    def __str__(self) -> str:
        return str(self.value)


TRANSACTION_REFERENCE_PATTERN = re.compile(r"[A-Z0-9]{8,32}")


@dataclass(frozen=True)
class TransactionReference:
    """External transaction identifier, stored trimmed and upper-cased."""

    value: str

    def __post_init__(self) -> None:
        if self.value is None or not str(self.value).strip():
            raise InvalidTransactionReferenceError(self.value, "cannot be null or blank")
        normalized = self.normalize(self.value)
        if not TRANSACTION_REFERENCE_PATTERN.fullmatch(normalized):
            raise InvalidTransactionReferenceError(self.value, "must be 8-32 alphanumeric characters")
        object.__setattr__(self, "value", normalized)

    @staticmethod
    def normalize(raw: str) -> str:
        return str(raw).strip().upper()

    def __str__(self) -> str:
        return self.value


@dataclass
class Claim:
    id: int
    status: ClaimStatus
    claimed_amount: MoneyAmount | None

    @property
    def is_approved(self) -> bool:
        return self.status == ClaimStatus.APPROVED


@dataclass
class Payment:
    """A payment recorded against an approved claim.

    The constructor accepts an explicit status and payment date so stored
    payments can be rebuilt as they were saved; new payments go through
    ``Payment.create`` which always starts them PENDING with today's date.
    After creation only ``status`` changes, through the ``mark_as_*`` methods.
    """

    claim_id: int
    amount: MoneyAmount
    payment_method: PaymentMethod
    transaction_reference: TransactionReference
    processed_by: str
    notes: str | None = None
    status: PaymentStatus = PaymentStatus.PENDING
    payment_date: date = field(default_factory=date.today)
    id: str | None = None

    def __post_init__(self) -> None:
        if self.claim_id is None:
            raise InvalidInputError("claim_id", "claim ID is required")
        if not isinstance(self.amount, MoneyAmount):
            raise InvalidInputError("amount", "amount is required")
        if not isinstance(self.payment_method, PaymentMethod):
            raise InvalidInputError("payment_method", "payment method is required")
        if not isinstance(self.transaction_reference, TransactionReference):
            raise InvalidInputError("transaction_reference", "transaction reference is required")
        if self.processed_by is None or not self.processed_by.strip():
            raise InvalidInputError("processed_by", "processed by is required")

    @classmethod
    def create(
        cls,
        claim_id: int,
        amount: MoneyAmount,
        payment_method: PaymentMethod,
        transaction_reference: TransactionReference,
        processed_by: str,
        notes: str | None = None,
    ) -> "Payment":
        return cls(
            claim_id=claim_id,
            amount=amount,
            payment_method=payment_method,
            transaction_reference=transaction_reference,
            processed_by=processed_by,
            notes=notes,
            status=PaymentStatus.PENDING,
            payment_date=date.today(),
        )

    def mark_as_processing(self) -> None:
        self._transition_to(PaymentStatus.PROCESSING)

    def mark_as_completed(self) -> None:
        self._transition_to(PaymentStatus.COMPLETED)

    def mark_as_failed(self) -> None:
        self._transition_to(PaymentStatus.FAILED)

    def mark_as_refunded(self) -> None:
        self._transition_to(PaymentStatus.REFUNDED)

    def require_id(self) -> str:
        if self.id is None:
            raise RuntimeError(f"payment {self.transaction_reference} has not been stored")
        return self.id

    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING

    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED

    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def _transition_to(self, new_status: PaymentStatus) -> None:
        if not can_transition(self.status, new_status):
            raise IllegalStateTransitionError(self.status.value, new_status.value)
        self.status = new_status
