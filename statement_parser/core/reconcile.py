"""
Balance reconciliation.

Fills in missing per-entry balances and the statement's opening/closing
balances with the running-total identity balance(n) = balance(n-1) + amount(n).
Balances printed on the statement are always trusted over computed ones.
"""
from decimal import Decimal
from typing import List, NamedTuple, Optional, Sequence
import logging

from ..models.schema import ParsedTransaction, ZERO, quantize_money

logger = logging.getLogger(__name__)


class ReconciledBalances(NamedTuple):
    transactions: List[ParsedTransaction]
    opening_balance: Decimal
    closing_balance: Decimal
    inferred: bool  # True when at least one entry balance was computed


def derive_opening_balance(transactions: Sequence[ParsedTransaction]) -> Decimal:
    """Opening balance implied by the first entry: its balance minus its amount."""
    if not transactions:
        return ZERO
    first = transactions[0]
    if first.balance is None:
        return ZERO
    return quantize_money(first.balance - first.amount)


def fill_missing_balances(transactions: Sequence[ParsedTransaction],
                          opening_balance: Decimal) -> List[ParsedTransaction]:
    """
    Walk the entries with a running total, computing absent balances.

    Args:
        transactions: Entries sorted by date
        opening_balance: Balance before the first entry

    Returns:
        New list where every entry carries a balance
    """
    running = opening_balance
    filled = []
    for transaction in transactions:
        if transaction.balance is None:
            balance = quantize_money(running + transaction.amount)
            transaction = transaction.model_copy(update={'balance': balance})
        running = transaction.balance
        filled.append(transaction)
    return filled


def reconcile_balances(transactions: Sequence[ParsedTransaction],
                       opening_balance: Optional[Decimal] = None,
                       closing_balance: Optional[Decimal] = None) -> ReconciledBalances:
    """
    Reconcile entry balances against the statement's opening/closing values.

    Args:
        transactions: Entries sorted ascending by date
        opening_balance: Opening balance from the header, if found
        closing_balance: Closing balance from the header, if found

    Returns:
        ReconciledBalances with no missing monetary value
    """
    transactions = list(transactions)

    if opening_balance is None:
        opening_balance = derive_opening_balance(transactions)
        logger.debug(f"Opening balance derived from first entry: {opening_balance}")

    inferred = any(t.balance is None for t in transactions)
    if inferred:
        transactions = fill_missing_balances(transactions, opening_balance)
        if closing_balance is None:
            closing_balance = transactions[-1].balance

    if closing_balance is None:
        closing_balance = transactions[-1].balance if transactions else ZERO

    return ReconciledBalances(
        transactions=transactions,
        opening_balance=quantize_money(opening_balance),
        closing_balance=quantize_money(closing_balance),
        inferred=inferred,
    )
