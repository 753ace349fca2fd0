import sys
import logging
from typing import List, Optional

from config import get_settings
from csv_reader import RecordParseError
from payments_engine import LedgerOverflowError, PaymentsEngine
from report import write_report

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(args) != 1:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return EXIT_USAGE

    filepath = args[0]
    engine = PaymentsEngine(settings)
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return EXIT_FAILURE
    except RecordParseError as e:
        logger.error(f"Failed to parse {filepath}: {e}")
        return EXIT_FAILURE
    except LedgerOverflowError as e:
        logger.error(f"Balance overflow in {filepath}: {e}")
        return EXIT_FAILURE

    write_report(accounts)
    return 0


if __name__ == "__main__":
    sys.exit(main())
