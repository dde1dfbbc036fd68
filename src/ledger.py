import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, Optional

from models import Transaction, TransactionType, ClientAccount, ProcessingResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerPolicy:
    """
    Rules the ledger applies on top of the account operations.

    The defaults reproduce the historical behaviour: a withdrawal has to leave
    a strictly positive balance, negative amounts are applied as-is, and a
    deposit or withdrawal without an amount counts as zero.
    """

    strict_positive_withdrawal: bool = True
    reject_negative_amounts: bool = False
    reject_missing_amounts: bool = False


class Ledger:
    """
    Owns every client account and every disputable transaction.
    Transactions must be fed in input order; dispute handling relies on the
    referenced deposit or withdrawal having been applied already.
    """

    def __init__(self, policy: Optional[LedgerPolicy] = None):
        self._policy = policy or LedgerPolicy()
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Transaction] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored deposit or withdrawal by ID."""
        return self._transactions.get(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a single transaction to its client's account.

        Returns SUCCESS, or the reason the transaction was rejected. A rejected
        transaction never changes any balance.
        """
        account = self.get_or_create_account(transaction.client_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT | TransactionType.WITHDRAWAL:
                return self._handle_funds_movement(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)
            case _:
                logger.warning(f"Unsupported transaction type {transaction.type_name!r} for tx {transaction.transaction_id}, skipping")
                return ProcessingResult.UNSUPPORTED_TYPE

    def _handle_funds_movement(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        amount = transaction.amount
        if amount is None:
            if self._policy.reject_missing_amounts:
                return ProcessingResult.INVALID_AMOUNT
            amount = Decimal("0")
        elif amount < 0 and self._policy.reject_negative_amounts:
            return ProcessingResult.INVALID_AMOUNT

        if transaction.transaction_type == TransactionType.DEPOSIT:
            result = account.deposit(amount)
        else:
            result = account.withdraw(
                amount,
                allow_zero_balance=not self._policy.strict_positive_withdrawal,
            )

        if result == ProcessingResult.SUCCESS:
            self._transactions[transaction.transaction_id] = replace(transaction, amount=amount, disputed=False)
        return result

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = self._transactions.get(transaction.transaction_id)

        if original is None:
            logger.info(f"Dispute for tx {transaction.transaction_id}: transaction not found")
            return ProcessingResult.UNKNOWN_TRANSACTION

        if original.disputed:
            return ProcessingResult.ALREADY_DISPUTED

        result = account.dispute(original)
        if result == ProcessingResult.SUCCESS:
            original.disputed = True
        return result

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = self._transactions.get(transaction.transaction_id)

        if original is None:
            logger.info(f"Resolve for tx {transaction.transaction_id}: transaction not found")
            return ProcessingResult.UNKNOWN_TRANSACTION

        if not original.disputed:
            return ProcessingResult.NOT_DISPUTED

        result = account.resolve(original)
        if result == ProcessingResult.SUCCESS:
            original.disputed = False
        return result

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = self._transactions.get(transaction.transaction_id)

        if original is None:
            logger.info(f"Chargeback for tx {transaction.transaction_id}: transaction not found")
            return ProcessingResult.UNKNOWN_TRANSACTION

        if not original.disputed:
            return ProcessingResult.NOT_DISPUTED

        result = account.chargeback(original)
        if result == ProcessingResult.SUCCESS:
            original.disputed = False
        return result
