from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from amounts import exact_add, exact_subtract


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


AMOUNT_TRANSACTION_TYPES = frozenset({TransactionType.DEPOSIT, TransactionType.WITHDRAWAL})


class TransactionStatus(Enum):
    OK = "ok"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


class RejectionReason(Enum):
    DUPLICATE_TRANSACTION_ID = "duplicate transaction id"
    ACCOUNT_LOCKED = "account locked"
    INVALID_AMOUNT = "invalid amount for transaction type"
    NEGATIVE_AMOUNT = "negative amount"
    INSUFFICIENT_FUNDS = "insufficient funds"
    UNKNOWN_REFERENCE = "unknown referenced transaction"
    CLIENT_MISMATCH = "client mismatch"
    NOT_DISPUTABLE = "transaction type is not disputable"
    INVALID_STATE_TRANSITION = "invalid state transition"
    AMOUNT_OUT_OF_RANGE = "amount out of representable range"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class MalformedRecord:
    """A CSV row the record source could not turn into a Transaction."""

    line_number: int
    row: List[str]
    error: str


@dataclass
class LedgerEntry:
    """History record of an accepted deposit or withdrawal."""

    transaction_id: int
    transaction_type: TransactionType
    client_id: int
    amount: Decimal
    status: TransactionStatus = TransactionStatus.OK

    def open_dispute(self) -> None:
        self.status = TransactionStatus.DISPUTED

    def resolve_dispute(self) -> None:
        self.status = TransactionStatus.RESOLVED

    def charge_back(self) -> None:
        self.status = TransactionStatus.CHARGED_BACK


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return exact_add(self.available, self.held)

    # New balances are computed before any field is assigned, so an
    # ArithmeticError leaves the account unchanged.

    def credit(self, amount: Decimal) -> None:
        self.available = exact_add(self.available, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = exact_subtract(self.available, amount)

    def hold(self, amount: Decimal) -> None:
        available = exact_subtract(self.available, amount)
        held = exact_add(self.held, amount)
        self.available, self.held = available, held

    def release_hold(self, amount: Decimal) -> None:
        held = exact_subtract(self.held, amount)
        available = exact_add(self.available, amount)
        self.available, self.held = available, held

    def charge_back(self, amount: Decimal) -> None:
        self.held = exact_subtract(self.held, amount)
        self.locked = True


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool

    @classmethod
    def from_account(cls, account: ClientAccount) -> "AccountSnapshot":
        return cls(
            client_id=account.client_id,
            available=account.available,
            held=account.held,
            total=account.total,
            locked=account.locked,
        )


@dataclass(frozen=True)
class ProcessingResult:
    """
    Outcome of processing one transaction.
    A result without a rejection reason means the transaction was applied.
    """

    transaction: Transaction
    rejection: Optional[RejectionReason] = None

    @property
    def applied(self) -> bool:
        return self.rejection is None


class ProcessingStats:
    """Counters for tracking processing statistics of a single run."""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.malformed = 0

    def record_result(self, result: ProcessingResult):
        if result.applied:
            self.applied += 1
        else:
            self.rejected += 1

    def record_malformed(self):
        self.malformed += 1

    def __repr__(self) -> str:
        return f"ProcessingStats(applied={self.applied}, rejected={self.rejected}, malformed={self.malformed})"
