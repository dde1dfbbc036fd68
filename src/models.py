from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Optional, Union

FOUR_PLACES = Decimal("0.0001")


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @classmethod
    def parse(cls, value: str) -> Union["TransactionType", str]:
        """Map a type string to its enum member, or return it unchanged if unknown."""
        try:
            return cls(value)
        except ValueError:
            return value


class ProcessingResult(Enum):
    SUCCESS = "success"
    ACCOUNT_LOCKED = "account_locked"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_AMOUNT = "invalid_amount"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    ALREADY_DISPUTED = "already_disputed"
    NOT_DISPUTED = "not_disputed"
    UNSUPPORTED_TYPE = "unsupported_type"


@dataclass
class Transaction:
    transaction_type: Union[TransactionType, str]
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None
    disputed: bool = False

    @property
    def type_name(self) -> str:
        if isinstance(self.transaction_type, TransactionType):
            return self.transaction_type.value
        return self.transaction_type

    def __repr__(self) -> str:
        return f"Transaction({self.type_name}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


def round_amount(value: Decimal) -> Decimal:
    """Round to 4 decimal places, half away from zero."""
    return value.quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)


@dataclass
class ClientAccount:
    """
    Balance state for one client.

    Every operation returns a ProcessingResult instead of raising. A locked
    account rejects all five operations for good.
    """

    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    locked: bool = False

    def deposit(self, amount: Decimal) -> ProcessingResult:
        if self.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        return self._update(self.available + amount, self.held, self.total + amount)

    def withdraw(self, amount: Decimal, allow_zero_balance: bool = False) -> ProcessingResult:
        """
        Withdraw funds if enough are available.

        By default the resulting balance must stay strictly above zero, so
        withdrawing the exact available balance is rejected.
        """
        if self.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        remaining = self.available - amount
        if remaining < 0 or (remaining == 0 and not allow_zero_balance):
            return ProcessingResult.INSUFFICIENT_FUNDS

        return self._update(remaining, self.held, self.total - amount)

    def dispute(self, transaction: Transaction) -> ProcessingResult:
        # available may go negative here, e.g. when disputing a withdrawal
        if self.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        return self._update(
            self.available - transaction.amount,
            self.held + transaction.amount,
            self.total,
        )

    def resolve(self, transaction: Transaction) -> ProcessingResult:
        if self.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        return self._update(
            self.available + transaction.amount,
            self.held - transaction.amount,
            self.total,
        )

    def chargeback(self, transaction: Transaction) -> ProcessingResult:
        if self.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        result = self._update(
            self.available,
            self.held - transaction.amount,
            self.total - transaction.amount,
        )
        if result == ProcessingResult.SUCCESS:
            self.locked = True
        return result

    def _update(self, available: Decimal, held: Decimal, total: Decimal) -> ProcessingResult:
        """Round the new balances and store them, or leave the account untouched if they don't fit."""
        try:
            available, held, total = (round_amount(v) for v in (available, held, total))
        except InvalidOperation:
            return ProcessingResult.INVALID_AMOUNT

        self.available = available
        self.held = held
        self.total = total
        return ProcessingResult.SUCCESS


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.processed = 0
        self.rejected = 0
        self.malformed = 0

    def record_success(self):
        self.processed += 1

    def record_rejection(self):
        self.rejected += 1

    def record_malformed(self):
        self.malformed += 1
