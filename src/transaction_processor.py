import logging
from typing import Optional, Union

from config import Settings
from models import Transaction, TransactionType, ClientAccount, ProcessingResult
from state import AccountStore, TransactionLedger, DisputeTracker, LedgerEntry

logger = logging.getLogger(__name__)

# Resolve and chargeback still settle disputes opened before the account was locked
LOCKABLE_TYPES = frozenset({TransactionType.DEPOSIT, TransactionType.WITHDRAWAL, TransactionType.DISPUTE})


class TransactionProcessor:
    """
    Applies transactions to the account store, ledger and dispute tracker.
    Every rejection is a no-op on state and is reported via ProcessingResult.
    Transactions must be applied in input order.
    """

    def __init__(
        self,
        accounts: AccountStore,
        ledger: TransactionLedger,
        disputes: DisputeTracker,
        settings: Optional[Settings] = None,
    ):
        self._accounts = accounts
        self._ledger = ledger
        self._disputes = disputes
        self._settings = settings or Settings()

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a single transaction.

        Returns:
            APPLIED: State was mutated
            REJECTED_*: Transaction was dropped without touching state
        """
        account = self._accounts.get(transaction.client_id)

        if (
            self._settings.enforce_account_locks
            and transaction.transaction_type in LOCKABLE_TYPES
            and account is not None
            and account.locked
        ):
            return self._reject(transaction, ProcessingResult.REJECTED_ACCOUNT_LOCKED)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                result = self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                result = self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                result = self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                result = self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                result = self._handle_chargeback(account, transaction)
            case _:
                result = ProcessingResult.REJECTED_UNKNOWN_TYPE

        if not result.is_applied:
            return self._reject(transaction, result)
        return result

    def _handle_deposit(self, account: Optional[ClientAccount], transaction: Transaction) -> ProcessingResult:
        if self._is_duplicate(transaction):
            return ProcessingResult.REJECTED_DUPLICATE_TRANSACTION

        if account is None:
            account = ClientAccount(client_id=transaction.client_id)
            self._accounts.upsert(account)

        account.credit(transaction.amount)
        self._ledger.record(transaction.transaction_id, transaction.client_id, transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: Optional[ClientAccount], transaction: Transaction) -> ProcessingResult:
        if account is None:
            return ProcessingResult.REJECTED_UNKNOWN_CLIENT

        if self._is_duplicate(transaction):
            return ProcessingResult.REJECTED_DUPLICATE_TRANSACTION

        if transaction.amount > account.available:
            return ProcessingResult.REJECTED_INSUFFICIENT_FUNDS

        account.debit(transaction.amount)
        self._ledger.record(transaction.transaction_id, transaction.client_id, transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, account: Optional[ClientAccount], transaction: Transaction) -> ProcessingResult:
        if account is None:
            return ProcessingResult.REJECTED_UNKNOWN_CLIENT

        original = self._ledger.lookup(transaction.transaction_id)
        if original is None:
            return ProcessingResult.REJECTED_UNKNOWN_TRANSACTION

        if not self._is_owner(original, transaction):
            return ProcessingResult.REJECTED_CLIENT_MISMATCH

        if self._disputes.is_open(transaction.transaction_id):
            return ProcessingResult.REJECTED_ALREADY_DISPUTED

        # No check against available: a dispute may drive it negative
        account.hold(original.amount)
        self._disputes.open(transaction.transaction_id)
        return ProcessingResult.APPLIED

    def _handle_resolve(self, account: Optional[ClientAccount], transaction: Transaction) -> ProcessingResult:
        original = self._disputed_entry(account, transaction)
        if isinstance(original, ProcessingResult):
            return original

        account.release_hold(original.amount)
        self._disputes.close(transaction.transaction_id)
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, account: Optional[ClientAccount], transaction: Transaction) -> ProcessingResult:
        original = self._disputed_entry(account, transaction)
        if isinstance(original, ProcessingResult):
            return original

        account.remove_held(original.amount)
        account.lock()
        self._disputes.close(transaction.transaction_id)
        return ProcessingResult.APPLIED

    def _disputed_entry(
        self, account: Optional[ClientAccount], transaction: Transaction
    ) -> Union[LedgerEntry, ProcessingResult]:
        """Ledger entry behind an open dispute, or the rejection explaining why there is none."""
        if account is None:
            return ProcessingResult.REJECTED_UNKNOWN_CLIENT

        if not self._disputes.is_open(transaction.transaction_id):
            return ProcessingResult.REJECTED_NOT_DISPUTED

        original = self._ledger.lookup(transaction.transaction_id)
        if not self._is_owner(original, transaction):
            return ProcessingResult.REJECTED_CLIENT_MISMATCH
        return original

    def _is_duplicate(self, transaction: Transaction) -> bool:
        return self._settings.reject_duplicate_transactions and transaction.transaction_id in self._ledger

    def _is_owner(self, entry: LedgerEntry, transaction: Transaction) -> bool:
        if not self._settings.enforce_dispute_ownership:
            return True
        return entry.client_id == transaction.client_id

    def _reject(self, transaction: Transaction, result: ProcessingResult) -> ProcessingResult:
        logger.info(f"Ignoring {transaction}: {result.value}")
        return result
