import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Iterable, Iterator, Optional, TextIO

from models import Transaction, TransactionType, ClientAccount

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
# amounts of 10**20 and above are rejected
MAX_AMOUNT_DIGITS = 20

OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]


def parse_csv_row(row: Dict[str, str]) -> Transaction:
    """
    Parse CSV row into Transaction.

    Raises KeyError, ValueError or InvalidOperation for a malformed row.
    """
    normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

    transaction_type_str = normalized["type"].lower()
    client_id = int(normalized["client"])
    transaction_id = int(normalized["tx"])

    if not 0 <= client_id <= MAX_CLIENT_ID:
        raise ValueError(f"client id {client_id} out of range")
    if not 0 <= transaction_id <= MAX_TRANSACTION_ID:
        raise ValueError(f"tx id {transaction_id} out of range")

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str:
        amount = Decimal(amount_str)
        if not amount.is_finite():
            raise ValueError(f"amount {amount_str} is not a finite number")
        if amount.adjusted() >= MAX_AMOUNT_DIGITS:
            raise ValueError(f"amount {amount_str} is too large")

    return Transaction(
        transaction_type=TransactionType.parse(transaction_type_str),
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def read_transactions(
    stream: TextIO,
    on_malformed: Optional[Callable[[Dict[str, str], Exception], None]] = None,
) -> Iterator[Transaction]:
    """
    Lazily yield transactions from a CSV stream with a type,client,tx,amount header.
    Malformed rows are logged and skipped.
    """
    reader = csv.DictReader(stream)
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            # the reader drops the offending line and resumes with the next one
            logger.warning(f"Failed to read line {reader.line_num}: {e!r}")
            if on_malformed is not None:
                on_malformed({}, e)
            continue

        try:
            yield parse_csv_row(row)
        except (KeyError, ValueError, InvalidOperation) as e:
            logger.warning(f"Failed to parse row {row}: {e!r}")
            if on_malformed is not None:
                on_malformed(row, e)


def format_decimal(value: Decimal) -> str:
    """Format decimal with up to 4 decimal places, removing trailing zeros."""
    normalized = value.normalize()
    if normalized == 0:
        return "0"
    return f"{normalized:f}"


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> int:
    """
    Write one CSV row per account and return how many rows were written.
    A row that fails to write is logged; the remaining rows are still attempted.
    """
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)

    written = 0
    for account in sorted(accounts, key=lambda a: a.client_id):
        try:
            writer.writerow([
                account.client_id,
                format_decimal(account.available),
                format_decimal(account.held),
                format_decimal(account.total),
                str(account.locked).lower(),
            ])
        except (OSError, csv.Error) as e:
            logger.error(f"Could not write account {account.client_id}: {e}")
            continue
        written += 1
    return written
