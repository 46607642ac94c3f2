import logging
from decimal import DecimalException
from typing import Optional, Tuple

from models import (
    Transaction,
    TransactionRecord,
    TransactionType,
    ClientAccount,
    ProcessingResult,
    IgnoreReason,
)
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions against state.
    Returns ProcessingResult so callers and tests can tell applied records from ignored ones;
    an ignored record leaves accounts and transaction history exactly as they were.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            APPLIED: balances or dispute flags changed
            IGNORED: nothing changed (locked account, duplicate id, unknown or
                     mismatched transaction, invalid dispute state, ...)
        """
        account = self._state.get_or_create_account(transaction.client_id)

        if account.locked:
            return self._ignore(transaction, IgnoreReason.ACCOUNT_LOCKED)

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

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount < 0:
            return self._ignore(transaction, IgnoreReason.NEGATIVE_AMOUNT)

        if self._state.has_transaction(transaction.transaction_id):
            return self._ignore(transaction, IgnoreReason.DUPLICATE_TRANSACTION)

        # Balance first: a deposit the account cannot hold must not consume its id.
        try:
            account.credit(transaction.amount)
        except DecimalException:
            return self._ignore(transaction, IgnoreReason.AMOUNT_OUT_OF_RANGE)

        self._state.record_transaction_if_new(transaction)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount < 0:
            return self._ignore(transaction, IgnoreReason.NEGATIVE_AMOUNT)

        # The id is consumed even when funds turn out to be insufficient.
        if not self._state.record_transaction_if_new(transaction):
            return self._ignore(transaction, IgnoreReason.DUPLICATE_TRANSACTION)

        if transaction.amount > account.available:
            return self._ignore(transaction, IgnoreReason.INSUFFICIENT_FUNDS)

        # amount <= available, so the difference always fits
        account.debit(transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original, reason = self._find_disputable(transaction)
        if reason is None and (original.disputed or original.chargedback):
            reason = IgnoreReason.ALREADY_CHARGED_BACK if original.chargedback else IgnoreReason.ALREADY_DISPUTED
        if reason is not None:
            return self._ignore(transaction, reason)

        try:
            account.hold(original.amount)
        except DecimalException:
            return self._ignore(transaction, IgnoreReason.AMOUNT_OUT_OF_RANGE)

        original.disputed = True
        return ProcessingResult.APPLIED

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original, reason = self._find_under_dispute(transaction)
        if reason is not None:
            return self._ignore(transaction, reason)

        try:
            account.release_hold(original.amount)
        except DecimalException:
            return self._ignore(transaction, IgnoreReason.AMOUNT_OUT_OF_RANGE)

        original.disputed = False
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original, reason = self._find_under_dispute(transaction)
        if reason is not None:
            return self._ignore(transaction, reason)

        try:
            account.remove_held(original.amount)
        except DecimalException:
            return self._ignore(transaction, IgnoreReason.AMOUNT_OUT_OF_RANGE)

        original.disputed = False
        original.chargedback = True
        account.lock()
        return ProcessingResult.APPLIED

    def _find_disputable(self, transaction: Transaction) -> Tuple[Optional[TransactionRecord], Optional[IgnoreReason]]:
        """Look up the deposit a dispute, resolve or chargeback refers to."""
        original = self._state.get_transaction(transaction.transaction_id)

        if original is None:
            return None, IgnoreReason.UNKNOWN_TRANSACTION

        # Disputes only ever match deposits; a withdrawal id is kept for idempotency alone.
        if not original.is_deposit:
            return None, IgnoreReason.NOT_A_DEPOSIT

        if original.client_id != transaction.client_id:
            return None, IgnoreReason.CLIENT_MISMATCH

        return original, None

    def _find_under_dispute(self, transaction: Transaction) -> Tuple[Optional[TransactionRecord], Optional[IgnoreReason]]:
        original, reason = self._find_disputable(transaction)
        if reason is not None:
            return None, reason
        if original.chargedback:
            return None, IgnoreReason.ALREADY_CHARGED_BACK
        if not original.disputed:
            return None, IgnoreReason.NOT_DISPUTED
        return original, None

    def _ignore(self, transaction: Transaction, reason: IgnoreReason) -> ProcessingResult:
        logger.debug(f"Ignoring {transaction}: {reason.value}")
        return ProcessingResult.IGNORED
