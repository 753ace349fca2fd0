from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Set

from models import ClientAccount


class AccountStore:
    """
    Client accounts keyed by client id.
    Accounts are created lazily by the processor and never removed.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def get(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def upsert(self, account: ClientAccount) -> None:
        self._accounts[account.client_id] = account

    def all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts ordered by ascending client id (for final output)."""
        return {client_id: self._accounts[client_id] for client_id in sorted(self._accounts)}

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)


@dataclass(frozen=True)
class LedgerEntry:
    client_id: int
    amount: Decimal


class TransactionLedger:
    """
    Originally applied amounts of deposits and withdrawals, used for dispute lookups.
    A reused transaction id overwrites the previous entry.
    """

    def __init__(self):
        self._entries: Dict[int, LedgerEntry] = {}

    def record(self, transaction_id: int, client_id: int, amount: Decimal) -> None:
        self._entries[transaction_id] = LedgerEntry(client_id=client_id, amount=amount)

    def lookup(self, transaction_id: int) -> Optional[LedgerEntry]:
        return self._entries.get(transaction_id)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class DisputeTracker:
    """Transaction ids with an open dispute."""

    def __init__(self):
        self._open: Set[int] = set()

    def open(self, transaction_id: int) -> None:
        if transaction_id in self._open:
            raise ValueError(f"Dispute for tx {transaction_id} is already open")
        self._open.add(transaction_id)

    def close(self, transaction_id: int) -> None:
        self._open.discard(transaction_id)

    def is_open(self, transaction_id: int) -> bool:
        return transaction_id in self._open

    def __len__(self) -> int:
        return len(self._open)
