import logging
from decimal import Inexact, Rounded, localcontext
from typing import Dict, Iterable, Optional

from config import Settings, get_settings
from csv_reader import read_transactions
from models import LEDGER_CONTEXT, LEDGER_PRECISION, Transaction, ClientAccount, ProcessingStats
from state import AccountStore, TransactionLedger, DisputeTracker
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class LedgerOverflowError(ArithmeticError):
    """Raised when a balance no longer fits the ledger's decimal precision."""

    def __init__(self, transaction: Transaction):
        self.transaction = transaction
        super().__init__(f"{transaction} exceeds {LEDGER_PRECISION} significant digits")


class PaymentsEngine:
    """
    Replays a transaction log against client accounts in a single sequential pass.
    Owns the account store, ledger and dispute tracker for the duration of the run.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()
        self._accounts = AccountStore()
        self._ledger = TransactionLedger()
        self._disputes = DisputeTracker()
        self._processor = TransactionProcessor(self._accounts, self._ledger, self._disputes, self._settings)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """
        Process CSV file and return final account states.
        OSError, RecordParseError and LedgerOverflowError propagate; rows before the failure stay applied.
        """
        logger.info(f"Processing {filepath}")
        return self.process_transactions(read_transactions(filepath))

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply transactions strictly in the given order, with exact balance arithmetic."""
        with localcontext(LEDGER_CONTEXT):
            for transaction in transactions:
                try:
                    result = self._processor.apply(transaction)
                    self._verify_total(transaction.client_id)
                except (Inexact, Rounded) as e:
                    raise LedgerOverflowError(transaction) from e
                self._stats.record(result)

        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Applied: {self._stats.applied}, "
            f"Rejected: {self._stats.rejected}, "
            f"Open disputes: {len(self._disputes)}"
        )
        return self._accounts.all_accounts()

    def _verify_total(self, client_id: int) -> None:
        account = self._accounts.get(client_id)
        if account is not None:
            account.total  # raises Rounded once available + held is no longer exact
