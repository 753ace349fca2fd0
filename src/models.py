from collections import Counter
from dataclasses import dataclass, field
from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    ROUND_HALF_EVEN,
    Rounded,
)
from enum import Enum
from typing import Optional

AMOUNT_PLACES = Decimal("0.0001")
ZERO = Decimal("0")

# Significant digits available to a balance, including the 4 fractional places
LEDGER_PRECISION = 40

# Parsing and formatting may round to AMOUNT_PLACES
AMOUNT_CONTEXT = Context(
    prec=LEDGER_PRECISION,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)

# Balance arithmetic must stay exact
LEDGER_CONTEXT = Context(
    prec=LEDGER_PRECISION,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact, Rounded],
)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @classmethod
    def parse(cls, value: str) -> Optional["TransactionType"]:
        """Case-sensitive lookup; unrecognized types yield None."""
        try:
            return cls(value)
        except ValueError:
            return None


class ProcessingResult(Enum):
    APPLIED = "applied"
    REJECTED_UNKNOWN_CLIENT = "rejected_unknown_client"
    REJECTED_INSUFFICIENT_FUNDS = "rejected_insufficient_funds"
    REJECTED_UNKNOWN_TRANSACTION = "rejected_unknown_transaction"
    REJECTED_ALREADY_DISPUTED = "rejected_already_disputed"
    REJECTED_NOT_DISPUTED = "rejected_not_disputed"
    REJECTED_UNKNOWN_TYPE = "rejected_unknown_type"
    # Only produced when the matching hardening switch is enabled
    REJECTED_ACCOUNT_LOCKED = "rejected_account_locked"
    REJECTED_DUPLICATE_TRANSACTION = "rejected_duplicate_transaction"
    REJECTED_CLIENT_MISMATCH = "rejected_client_mismatch"

    @property
    def is_applied(self) -> bool:
        return self is ProcessingResult.APPLIED


@dataclass
class Transaction:
    transaction_type: Optional[TransactionType]
    client_id: int
    transaction_id: int
    amount: Decimal = ZERO
    raw_type: str = ""

    def __post_init__(self):
        if not self.raw_type and self.transaction_type is not None:
            self.raw_type = self.transaction_type.value

    def __repr__(self) -> str:
        return f"Transaction({self.raw_type}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return LEDGER_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        # Both sides are computed first so an arithmetic error leaves the account untouched
        available, held = self.available - amount, self.held + amount
        self.available, self.held = available, held

    def release_hold(self, amount: Decimal) -> None:
        available, held = self.available + amount, self.held - amount
        self.available, self.held = available, held

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount

    def lock(self) -> None:
        self.locked = True


@dataclass
class ProcessingStats:
    """Per-outcome counters for a single run."""

    outcomes: Counter = field(default_factory=Counter)

    def record(self, result: ProcessingResult) -> None:
        self.outcomes[result] += 1

    @property
    def processed(self) -> int:
        return sum(self.outcomes.values())

    @property
    def applied(self) -> int:
        return self.outcomes[ProcessingResult.APPLIED]

    @property
    def rejected(self) -> int:
        return self.processed - self.applied
