from collections import Counter
from dataclasses import dataclass
from decimal import Context, Decimal, DivisionByZero, Inexact, InvalidOperation, Overflow
from enum import Enum
from typing import Optional

# Amounts must be below 10**15 and carry at most 28 fractional digits.
MAX_AMOUNT_EXPONENT = 14
MAX_AMOUNT_SCALE = 28

# Sums of bounded amounts fit in 60 digits; any rounding raises Inexact.
LEDGER_CONTEXT = Context(prec=60, traps=[InvalidOperation, DivisionByZero, Overflow, Inexact])


def amount_in_range(amount: Decimal) -> bool:
    """True for finite amounts within the magnitude and scale the ledger handles exactly."""
    if not amount.is_finite():
        return False
    if amount.is_zero():
        return True
    return amount.adjusted() <= MAX_AMOUNT_EXPONENT and -amount.as_tuple().exponent <= MAX_AMOUNT_SCALE


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class DisputeState(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    SUCCESS = "success"
    INVALID_AMOUNT = "invalid_amount"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    LOCKED_ACCOUNT = "locked_account"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    CLIENT_MISMATCH = "client_mismatch"
    NOT_DISPUTABLE = "not_disputable"
    INVALID_STATE_TRANSITION = "invalid_state_transition"


@dataclass
class Transaction:
    """An input event. Only deposits and withdrawals carry an amount."""

    transaction_type: TransactionType
    client_id: int
    tx_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.tx_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    """A stored deposit or withdrawal, kept for dispute lookups."""

    tx_id: int
    client_id: int
    transaction_type: TransactionType
    amount: Decimal
    dispute_state: DisputeState = DisputeState.NORMAL

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionRecord":
        return cls(
            tx_id=transaction.tx_id,
            client_id=transaction.client_id,
            transaction_type=transaction.transaction_type,
            amount=transaction.amount,
        )


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount

    def lock(self) -> None:
        self.locked = True


class ProcessingStats:
    """Counters for tracking processing outcomes."""

    def __init__(self):
        self.results: Counter = Counter()
        self.skipped_rows = 0

    def record(self, result: ProcessingResult) -> None:
        self.results[result] += 1

    def record_skipped_row(self) -> None:
        self.skipped_rows += 1

    @property
    def processed(self) -> int:
        return self.results[ProcessingResult.SUCCESS]

    @property
    def rejected(self) -> int:
        return sum(count for result, count in self.results.items() if result != ProcessingResult.SUCCESS)

    def summary(self) -> str:
        parts = [f"Processed: {self.processed}", f"Rejected: {self.rejected}"]
        for result in ProcessingResult:
            if result != ProcessingResult.SUCCESS and self.results[result]:
                parts.append(f"{result.value}: {self.results[result]}")
        if self.skipped_rows:
            parts.append(f"Skipped rows: {self.skipped_rows}")
        return ", ".join(parts)
