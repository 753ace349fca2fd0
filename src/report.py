from decimal import Decimal
from typing import Dict, Optional, TextIO

from models import AMOUNT_CONTEXT, ClientAccount

REPORT_HEADER = "client,available,held,total,locked"


def format_decimal(value: Decimal) -> str:
    """Format a ledger amount without trailing zeros; amounts already carry at most 4 decimal places."""
    normalized = value.normalize(AMOUNT_CONTEXT)
    if normalized.is_zero():
        return "0"
    return f"{normalized:f}"


def write_report(accounts: Dict[int, ClientAccount], stream: Optional[TextIO] = None) -> None:
    """
    Write one row per account in ascending client id; defaults to stdout.
    Rows are formatted before anything is written, so a formatting error emits no partial report.
    """
    rows = [REPORT_HEADER]
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        rows.append(
            f"{client_id},"
            f"{format_decimal(account.available)},"
            f"{format_decimal(account.held)},"
            f"{format_decimal(account.total)},"
            f"{str(account.locked).lower()}"
        )
    print("\n".join(rows), file=stream)
