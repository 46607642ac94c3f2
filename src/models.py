from dataclasses import dataclass
from decimal import Decimal, Overflow
from enum import Enum
from typing import Optional

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def moves_funds(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    APPLIED = "applied"
    IGNORED = "ignored"


class IgnoreReason(Enum):
    ACCOUNT_LOCKED = "account_locked"
    NEGATIVE_AMOUNT = "negative_amount"
    AMOUNT_OUT_OF_RANGE = "amount_out_of_range"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    NOT_A_DEPOSIT = "not_a_deposit"
    CLIENT_MISMATCH = "client_mismatch"
    ALREADY_DISPUTED = "already_disputed"
    NOT_DISPUTED = "not_disputed"
    ALREADY_CHARGED_BACK = "already_charged_back"


@dataclass(frozen=True)
class Transaction:
    """
    A single input record.
    Deposits and withdrawals carry an amount; dispute, resolve and chargeback
    reference an earlier deposit by its transaction id and carry none.
    """

    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if self.transaction_type.moves_funds and self.amount is None:
            raise ValueError(f"{self.transaction_type.value} requires an amount")
        if not self.transaction_type.moves_funds and self.amount is not None:
            raise ValueError(f"{self.transaction_type.value} does not take an amount")
        if self.amount is not None:
            if not isinstance(self.amount, Decimal):
                raise TypeError(f"amount must be a Decimal, got {type(self.amount).__name__}")
            if not self.amount.is_finite():
                raise ValueError(f"amount {self.amount} is not finite")

    @classmethod
    def deposit(cls, client_id: int, transaction_id: int, amount: Decimal) -> "Transaction":
        return cls(TransactionType.DEPOSIT, client_id, transaction_id, amount)

    @classmethod
    def withdrawal(cls, client_id: int, transaction_id: int, amount: Decimal) -> "Transaction":
        return cls(TransactionType.WITHDRAWAL, client_id, transaction_id, amount)

    @classmethod
    def dispute(cls, client_id: int, transaction_id: int) -> "Transaction":
        return cls(TransactionType.DISPUTE, client_id, transaction_id)

    @classmethod
    def resolve(cls, client_id: int, transaction_id: int) -> "Transaction":
        return cls(TransactionType.RESOLVE, client_id, transaction_id)

    @classmethod
    def chargeback(cls, client_id: int, transaction_id: int) -> "Transaction":
        return cls(TransactionType.CHARGEBACK, client_id, transaction_id)

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    """Stored deposit or withdrawal, with its dispute lifecycle flags."""

    transaction: Transaction
    disputed: bool = False
    chargedback: bool = False

    @property
    def client_id(self) -> int:
        return self.transaction.client_id

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount

    @property
    def is_deposit(self) -> bool:
        return self.transaction.transaction_type == TransactionType.DEPOSIT


@dataclass(frozen=True)
class AccountSummary:
    """Read-only snapshot of a client account."""

    client_id: int
    available: Decimal
    held: Decimal
    locked: bool

    @property
    def total(self) -> Decimal:
        return self.available + self.held


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    # Each update computes every new balance before assigning any of them,
    # so a decimal error leaves the account untouched.

    def credit(self, amount: Decimal) -> None:
        available = self.available + amount
        if not (available + self.held).is_finite():
            raise Overflow(f"total for client {self.client_id} out of range")
        self.available = available

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available, self.held = self.available - amount, self.held + amount

    def release_hold(self, amount: Decimal) -> None:
        self.available, self.held = self.available + amount, self.held - amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount

    def lock(self) -> None:
        self.locked = True

    def summary(self) -> AccountSummary:
        return AccountSummary(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            locked=self.locked,
        )


class ProcessingStats:
    """Counters for applied and ignored records."""

    def __init__(self):
        self.applied = 0
        self.ignored = 0

    def record(self, result: ProcessingResult) -> None:
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        else:
            self.ignored += 1

    @property
    def total(self) -> int:
        return self.applied + self.ignored
