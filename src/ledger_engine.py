from typing import Iterable, Iterator, Optional, Tuple

from models import Transaction, AccountSummary, ProcessingResult, ProcessingStats
from state_manager import StateManager
from transaction_processor import TransactionProcessor


class LedgerEngine:
    """
    Applies a stream of transaction records, in the order received, to per-client accounts.

    apply() is the only mutating entry point and never raises for ledger conditions:
    a record that cannot be applied is dropped and the stream carries on.
    Not thread-safe; one engine per single-threaded consumer.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    def apply(self, transaction: Transaction) -> None:
        self.apply_with_result(transaction)

    def apply_with_result(self, transaction: Transaction) -> ProcessingResult:
        """Same as apply(), but reports whether the record was applied or ignored."""
        result = self._processor.process_transaction(transaction)
        self._stats.record(result)
        return result

    def apply_all(self, transactions: Iterable[Transaction]) -> None:
        for transaction in transactions:
            self.apply(transaction)

    def account_summary(self, client_id: int) -> Optional[AccountSummary]:
        account = self._state.get_account(client_id)
        if account is None:
            return None
        return account.summary()

    def all_summaries(self) -> Iterator[Tuple[int, AccountSummary]]:
        """Yield (client id, summary) for every known client, in no particular order."""
        for account in self._state.iter_accounts():
            yield account.client_id, account.summary()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def __len__(self) -> int:
        return self._state.account_count()
