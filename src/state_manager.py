from typing import Dict, List, Optional

from models import AccountSnapshot, ClientAccount, LedgerEntry, Transaction


class StateManager:
    """
    In-memory state of a single replay run.
    Stores client accounts and the history of deposits/withdrawals for dispute lookups.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._ledger_entries: Dict[int, LedgerEntry] = {}

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Retrieve an account without creating it."""
        return self._accounts.get(client_id)

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        account = self._accounts.get(client_id)
        if account is None:
            account = ClientAccount(client_id=client_id)
            self._accounts[client_id] = account
        return account

    def store_transaction(self, transaction: Transaction) -> LedgerEntry:
        """Record an accepted deposit or withdrawal for future dispute lookups."""
        entry = LedgerEntry(
            transaction_id=transaction.transaction_id,
            transaction_type=transaction.transaction_type,
            client_id=transaction.client_id,
            amount=transaction.amount,
        )
        self._ledger_entries[transaction.transaction_id] = entry
        return entry

    def get_ledger_entry(self, transaction_id: int) -> Optional[LedgerEntry]:
        """Retrieve stored deposit/withdrawal by ID."""
        return self._ledger_entries.get(transaction_id)

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._ledger_entries

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    def get_all_ledger_entries(self) -> Dict[int, LedgerEntry]:
        return dict(self._ledger_entries)

    def snapshot(self) -> List[AccountSnapshot]:
        """Immutable view of every account, sorted by client id."""
        return [
            AccountSnapshot.from_account(self._accounts[client_id])
            for client_id in sorted(self._accounts)
        ]
