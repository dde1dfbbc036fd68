import sys
import logging
from typing import List, Optional

from engine import PaymentsEngine
from csv_io import write_accounts

USAGE = "Usage: payments-ledger <input.csv>"

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print(USAGE, file=sys.stderr)
        return 0

    filepath = args[0]
    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(filepath)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Could not read input file {filepath}: {e}")
        return 0

    try:
        write_accounts(accounts.values(), sys.stdout)
        sys.stdout.flush()
    except OSError as e:
        logger.error(f"Could not write output: {e}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
