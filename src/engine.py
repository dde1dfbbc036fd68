import logging
import sys
from typing import Dict, Iterable, Optional

from models import Transaction, ClientAccount, ProcessingResult, ProcessingStats
from ledger import Ledger, LedgerPolicy
from csv_io import read_transactions

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Feeds transactions, strictly in input order, into a fresh Ledger.
    Every call to process_file or process_transactions starts from empty state.
    """

    def __init__(self, policy: Optional[LedgerPolicy] = None):
        self._policy = policy or LedgerPolicy()
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        # undecodable bytes become U+FFFD so the row fails parsing instead of the whole file
        with open(filepath, "r", encoding="utf-8", errors="replace", newline="") as f:
            transactions = read_transactions(f, on_malformed=lambda row, e: self._stats.record_malformed())
            accounts = self.process_transactions(transactions)

        # Print final processing report to stderr
        print(
            f"Processed: {self._stats.processed}, "
            f"Rejected: {self._stats.rejected}, "
            f"Malformed: {self._stats.malformed}",
            file=sys.stderr
        )

        return accounts

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        self._stats = ProcessingStats()
        ledger = Ledger(self._policy)

        for transaction in transactions:
            result = ledger.process_transaction(transaction)
            if result == ProcessingResult.SUCCESS:
                self._stats.record_success()
            else:
                self._stats.record_rejection()
                logger.info(f"Rejected {transaction}: {result.value}")

        return ledger.get_all_accounts()
