"""
Pydantic models for parsed bank statement data.
"""
import re
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')


def quantize_money(value: Optional[Decimal]) -> Optional[Decimal]:
    """Round a monetary value to two decimal places (None passes through)."""
    if value is None:
        return None
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class TransactionKind(str, Enum):
    """Kind of a statement entry."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    BALANCE = "BALANCE"  # informational balance row, never a ledger entry


class ParsedTransaction(BaseModel):
    """Single dated entry from the statement's entries section."""
    model_config = ConfigDict(frozen=True)

    transaction_date: date
    description: str
    amount: Decimal
    balance: Optional[Decimal] = None
    kind: TransactionKind

    @field_validator('description')
    @classmethod
    def collapse_whitespace(cls, v):
        return re.sub(r'\s+', ' ', v).strip()

    @field_validator('amount', 'balance')
    @classmethod
    def round_to_cents(cls, v):
        return quantize_money(v)

    @model_validator(mode='after')
    def validate_sign_convention(self):
        """DEBIT amounts are never positive, CREDIT never negative, BALANCE always zero."""
        if self.kind == TransactionKind.DEBIT and self.amount > 0:
            raise ValueError(f"DEBIT amount must not be positive: {self.amount}")
        if self.kind == TransactionKind.CREDIT and self.amount < 0:
            raise ValueError(f"CREDIT amount must not be negative: {self.amount}")
        if self.kind == TransactionKind.BALANCE and self.amount != 0:
            raise ValueError(f"BALANCE row must have zero amount: {self.amount}")
        return self


class ParsedStatement(BaseModel):
    """Complete, reconciled statement."""
    model_config = ConfigDict(frozen=True)

    statement_date: date
    opening_balance: Decimal = ZERO
    closing_balance: Decimal = ZERO
    credit_limit: Decimal = ZERO
    available_limit: Decimal = ZERO
    transactions: Tuple[ParsedTransaction, ...] = ()

    @field_validator('opening_balance', 'closing_balance', 'credit_limit', 'available_limit')
    @classmethod
    def round_to_cents(cls, v):
        return quantize_money(v)

    @field_validator('transactions')
    @classmethod
    def validate_date_order(cls, v):
        """Transactions must be sorted ascending by date."""
        for previous, current in zip(v, v[1:]):
            if current.transaction_date < previous.transaction_date:
                raise ValueError(
                    f"Transactions out of order: {current.transaction_date} "
                    f"after {previous.transaction_date}"
                )
        return v

    def ledger_entries(self) -> Tuple[ParsedTransaction, ...]:
        """Transactions that represent money movements (BALANCE rows dropped)."""
        return tuple(t for t in self.transactions if t.kind != TransactionKind.BALANCE)

    def total_credits(self) -> Decimal:
        return sum(
            (t.amount for t in self.transactions if t.kind == TransactionKind.CREDIT),
            ZERO,
        )

    def total_debits(self) -> Decimal:
        """Sum of debit amounts as a positive value."""
        return abs(sum(
            (t.amount for t in self.transactions if t.kind == TransactionKind.DEBIT),
            ZERO,
        ))

    def breakdown(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in TransactionKind}
        for transaction in self.transactions:
            counts[transaction.kind.value] += 1
        return counts
