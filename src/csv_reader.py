"""
CSV input for the payments engine.

Rows are streamed in file order. Header names and values are trimmed before
interpretation; a row that cannot be interpreted aborts the run.
"""

import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, List, Optional

from models import AMOUNT_CONTEXT, AMOUNT_PLACES, ZERO, Transaction, TransactionType

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


class RecordParseError(ValueError):
    """Raised when a CSV row cannot be parsed into a transaction."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


def read_transactions(filepath: str) -> Iterator[Transaction]:
    """Yield transactions from a CSV file, one row at a time."""
    with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        try:
            if reader.fieldnames is None:
                logger.warning(f"{filepath} is empty")
                return

            reader.fieldnames = [name.strip() for name in reader.fieldnames]
            missing = [column for column in REQUIRED_COLUMNS if column not in reader.fieldnames]
            if missing:
                raise RecordParseError(f"missing column(s): {', '.join(missing)}", line_number=1)

            for row in reader:
                yield parse_row(row, line_number=reader.line_num)
        except (csv.Error, UnicodeDecodeError) as e:
            raise RecordParseError(f"malformed CSV: {e}", line_number=reader.line_num) from e


def parse_row(row: Dict[Optional[str], object], line_number: Optional[int] = None) -> Transaction:
    """Parse a DictReader row into a Transaction."""
    extra: Optional[List[str]] = row.get(None)  # type: ignore[assignment]
    if extra and any(value.strip() for value in extra):
        raise RecordParseError(f"unexpected extra fields {extra}", line_number)

    normalized = {k: (v or "").strip() for k, v in row.items() if k is not None}

    try:
        raw_type = normalized["type"]
        client = normalized["client"]
        tx = normalized["tx"]
    except KeyError as e:
        raise RecordParseError(f"missing column {e}", line_number) from e

    return Transaction(
        transaction_type=TransactionType.parse(raw_type),
        client_id=_parse_id(client, "client", MAX_CLIENT_ID, line_number),
        transaction_id=_parse_id(tx, "tx", MAX_TRANSACTION_ID, line_number),
        amount=parse_amount(normalized.get("amount", ""), line_number),
        raw_type=raw_type,
    )


def parse_amount(value: str, line_number: Optional[int] = None) -> Decimal:
    """Parse an amount with 4 decimal places; blank amounts are zero."""
    if not value:
        return ZERO
    try:
        amount = Decimal(value)
        if not amount.is_finite():
            raise RecordParseError(f"amount must be finite, got {value!r}", line_number)
        return amount.quantize(AMOUNT_PLACES, context=AMOUNT_CONTEXT)
    except InvalidOperation as e:
        raise RecordParseError(f"invalid amount {value!r}", line_number) from e


def _parse_id(value: str, column: str, upper_bound: int, line_number: Optional[int]) -> int:
    # int() alone would also take "1_0" and non-ASCII digits
    if not (value.isascii() and value.isdigit()):
        raise RecordParseError(f"invalid {column} {value!r}", line_number)
    parsed = int(value)
    if not 0 <= parsed <= upper_bound:
        raise RecordParseError(f"{column} {parsed} out of range 0..{upper_bound}", line_number)
    return parsed
