import logging
from typing import FrozenSet, Optional, Tuple

from amounts import is_negative
from models import (
    AMOUNT_TRANSACTION_TYPES,
    ClientAccount,
    LedgerEntry,
    ProcessingResult,
    RejectionReason,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from state_manager import StateManager

logger = logging.getLogger(__name__)

DISPUTABLE_STATUSES = frozenset({TransactionStatus.OK, TransactionStatus.RESOLVED})


class TransactionProcessor:
    """
    Processes transactions against state, one at a time.

    Every transaction yields a ProcessingResult: either applied, or rejected with
    a RejectionReason. Rejections never mutate state; all writes for a transaction
    happen together once every check has passed.
    """

    def __init__(self, state: StateManager, disputable_types: FrozenSet[TransactionType] = AMOUNT_TRANSACTION_TYPES):
        self._state = state
        self._disputable_types = frozenset(disputable_types)

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        The client's account exists after this call whatever the outcome.
        Checks run cheapest and most general first: duplicate id (deposits and
        withdrawals only), then account lock, then the kind-specific rules.
        """
        account = self._state.get_or_create_account(transaction.client_id)

        if transaction.transaction_type in AMOUNT_TRANSACTION_TYPES:
            if self._state.has_transaction(transaction.transaction_id):
                return self._reject(transaction, RejectionReason.DUPLICATE_TRANSACTION_ID)

        if account.locked:
            return self._reject(transaction, RejectionReason.ACCOUNT_LOCKED)

        try:
            return self._dispatch(account, transaction)
        except ArithmeticError as e:
            # Balance updates are all-or-nothing, so the account is untouched
            logger.debug(f"Arithmetic failure for tx {transaction.transaction_id}: {e!r}")
            return self._reject(transaction, RejectionReason.AMOUNT_OUT_OF_RANGE)

    def _dispatch(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)
            case _:
                raise ValueError(f"Unsupported transaction type: {transaction.transaction_type}")

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        rejection = self._validate_amount(transaction)
        if rejection is not None:
            return self._reject(transaction, rejection)

        account.credit(transaction.amount)
        self._state.store_transaction(transaction)
        return ProcessingResult(transaction)

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        rejection = self._validate_amount(transaction)
        if rejection is not None:
            return self._reject(transaction, rejection)

        if account.available < transaction.amount:
            return self._reject(transaction, RejectionReason.INSUFFICIENT_FUNDS)

        account.debit(transaction.amount)
        self._state.store_transaction(transaction)
        return ProcessingResult(transaction)

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry, rejection = self._find_referenced_entry(transaction)
        if rejection is not None:
            return self._reject(transaction, rejection)

        if entry.transaction_type not in self._disputable_types:
            return self._reject(transaction, RejectionReason.NOT_DISPUTABLE)

        if entry.status not in DISPUTABLE_STATUSES:
            return self._reject(transaction, RejectionReason.INVALID_STATE_TRANSITION, entry)

        account.hold(entry.amount)
        entry.open_dispute()
        return ProcessingResult(transaction)

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry, rejection = self._find_referenced_entry(transaction)
        if rejection is not None:
            return self._reject(transaction, rejection)

        if entry.status != TransactionStatus.DISPUTED:
            return self._reject(transaction, RejectionReason.INVALID_STATE_TRANSITION, entry)

        account.release_hold(entry.amount)
        entry.resolve_dispute()
        return ProcessingResult(transaction)

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry, rejection = self._find_referenced_entry(transaction)
        if rejection is not None:
            return self._reject(transaction, rejection)

        if entry.status != TransactionStatus.DISPUTED:
            return self._reject(transaction, RejectionReason.INVALID_STATE_TRANSITION, entry)

        account.charge_back(entry.amount)
        entry.charge_back()
        return ProcessingResult(transaction)

    @staticmethod
    def _validate_amount(transaction: Transaction) -> Optional[RejectionReason]:
        if transaction.amount is None:
            return RejectionReason.INVALID_AMOUNT
        if is_negative(transaction.amount):
            return RejectionReason.NEGATIVE_AMOUNT
        return None

    def _find_referenced_entry(self, transaction: Transaction) -> Tuple[Optional[LedgerEntry], Optional[RejectionReason]]:
        """Look up the deposit/withdrawal a dispute, resolve or chargeback refers to."""
        if transaction.amount is not None:
            return None, RejectionReason.INVALID_AMOUNT

        entry = self._state.get_ledger_entry(transaction.transaction_id)
        if entry is None:
            return None, RejectionReason.UNKNOWN_REFERENCE

        if entry.client_id != transaction.client_id:
            return None, RejectionReason.CLIENT_MISMATCH

        return entry, None

    @staticmethod
    def _reject(transaction: Transaction, reason: RejectionReason, entry: Optional[LedgerEntry] = None) -> ProcessingResult:
        kind = transaction.transaction_type.value.capitalize()
        if entry is not None:
            logger.warning(
                f"{kind} tx {transaction.transaction_id} (client {transaction.client_id}) rejected: "
                f"{reason.value} (transaction is {entry.status.value})"
            )
        else:
            logger.warning(
                f"{kind} tx {transaction.transaction_id} (client {transaction.client_id}) rejected: {reason.value}"
            )
        return ProcessingResult(transaction, reason)
