from typing import Dict, Iterator, Optional

from models import Transaction, TransactionRecord, ClientAccount


class StateManager:
    """
    Owns client accounts and the transaction history used for dispute lookups.
    Not thread-safe: a single caller drives all mutation.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, TransactionRecord] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create an empty, unlocked one."""
        account = self._accounts.get(client_id)
        if account is None:
            account = ClientAccount(client_id=client_id)
            self._accounts[client_id] = account
        return account

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def record_transaction_if_new(self, transaction: Transaction) -> bool:
        """
        Store a deposit or withdrawal for future dispute lookups.
        Returns False, storing nothing, if the transaction id is already known.
        """
        if transaction.transaction_id in self._transactions:
            return False
        self._transactions[transaction.transaction_id] = TransactionRecord(transaction)
        return True

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def get_transaction(self, transaction_id: int) -> Optional[TransactionRecord]:
        """Retrieve stored transaction record by ID."""
        return self._transactions.get(transaction_id)

    def iter_accounts(self) -> Iterator[ClientAccount]:
        return iter(self._accounts.values())

    def account_count(self) -> int:
        return len(self._accounts)
