import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import Transaction, TransactionType, ClientAccount, ProcessingResult, ProcessingStats


class TestTransactionType:
    def test_parse_known_type(self):
        assert TransactionType.parse("chargeback") == TransactionType.CHARGEBACK

    def test_parse_is_case_sensitive(self):
        assert TransactionType.parse("Deposit") is None

    def test_parse_unknown_type(self):
        assert TransactionType.parse("transfer") is None


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=Decimal("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == Decimal("100.0")
        assert transaction.raw_type == "deposit"

    def test_create_dispute_defaults_amount_to_zero(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount == Decimal("0")

    def test_repr_uses_raw_type_for_unknown(self):
        transaction = Transaction(None, client_id=3, transaction_id=7, raw_type="refund")
        assert repr(transaction) == "Transaction(refund, client=3, tx=7, amount=0)"


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.total == Decimal("0")
        assert account.locked is False

    def test_total_property(self):
        account = ClientAccount(
            client_id=1,
            available=Decimal("100"),
            held=Decimal("50"),
        )
        assert account.total == Decimal("150")

    def test_hold_and_release_keep_total(self):
        account = ClientAccount(client_id=1, available=Decimal("10"))
        account.hold(Decimal("4"))
        assert (account.available, account.held, account.total) == (Decimal("6"), Decimal("4"), Decimal("10"))

        account.release_hold(Decimal("4"))
        assert (account.available, account.held, account.total) == (Decimal("10"), Decimal("0"), Decimal("10"))

    def test_remove_held_reduces_total(self):
        account = ClientAccount(client_id=1, available=Decimal("0"), held=Decimal("10"))
        account.remove_held(Decimal("10"))
        account.lock()
        assert account.total == Decimal("0")
        assert account.locked is True


class TestProcessingResult:
    def test_only_applied_is_applied(self):
        assert ProcessingResult.APPLIED.is_applied
        assert not any(result.is_applied for result in ProcessingResult if result is not ProcessingResult.APPLIED)

    def test_enum_values(self):
        assert ProcessingResult.APPLIED.value == "applied"
        assert ProcessingResult.REJECTED_INSUFFICIENT_FUNDS.value == "rejected_insufficient_funds"
        assert ProcessingResult.REJECTED_NOT_DISPUTED.value == "rejected_not_disputed"


class TestProcessingStats:
    def test_counts(self):
        stats = ProcessingStats()
        stats.record(ProcessingResult.APPLIED)
        stats.record(ProcessingResult.APPLIED)
        stats.record(ProcessingResult.REJECTED_UNKNOWN_CLIENT)

        assert stats.processed == 3
        assert stats.applied == 2
        assert stats.rejected == 1
        assert stats.outcomes[ProcessingResult.REJECTED_UNKNOWN_CLIENT] == 1
