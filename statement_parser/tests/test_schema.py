"""
Tests for the statement data models.
"""
import pytest
from decimal import Decimal
from datetime import date
from pydantic import ValidationError

from ..models.schema import ParsedStatement, ParsedTransaction, TransactionKind


class TestParsedTransaction:
    """Sign convention and value cleanup."""

    def test_debit_must_not_be_positive(self):
        with pytest.raises(ValidationError):
            ParsedTransaction(transaction_date=date(2025, 3, 1), description="X",
                              amount=Decimal("10.00"), kind=TransactionKind.DEBIT)

    def test_credit_must_not_be_negative(self):
        with pytest.raises(ValidationError):
            ParsedTransaction(transaction_date=date(2025, 3, 1), description="X",
                              amount=Decimal("-10.00"), kind=TransactionKind.CREDIT)

    def test_balance_row_amount_must_be_zero(self):
        with pytest.raises(ValidationError):
            ParsedTransaction(transaction_date=date(2025, 3, 1), description="SALDO",
                              amount=Decimal("1.00"), balance=Decimal("1.00"),
                              kind=TransactionKind.BALANCE)

    def test_values_normalized(self):
        txn = ParsedTransaction(transaction_date=date(2025, 3, 1), description="  PIX \n TRANSF ",
                                amount=Decimal("1.005"), kind=TransactionKind.CREDIT)
        assert txn.description == "PIX TRANSF"
        assert txn.amount == Decimal("1.01")
        assert txn.balance is None


class TestParsedStatement:
    """Statement invariants and derived totals."""

    @pytest.fixture
    def statement(self):
        return ParsedStatement(
            statement_date=date(2025, 12, 3),
            opening_balance=Decimal("100"),
            transactions=(
                ParsedTransaction(transaction_date=date(2025, 12, 1), description="SALDO ANTERIOR",
                                  amount=Decimal("0"), balance=Decimal("100"), kind=TransactionKind.BALANCE),
                ParsedTransaction(transaction_date=date(2025, 12, 2), description="IOF",
                                  amount=Decimal("-34.67"), kind=TransactionKind.DEBIT),
                ParsedTransaction(transaction_date=date(2025, 12, 3), description="PIX",
                                  amount=Decimal("20"), kind=TransactionKind.CREDIT),
            ),
        )

    def test_defaults(self):
        statement = ParsedStatement(statement_date=date(2025, 1, 1))
        assert statement.opening_balance == Decimal("0.00")
        assert statement.closing_balance == Decimal("0.00")
        assert statement.credit_limit == Decimal("0.00")
        assert statement.available_limit == Decimal("0.00")
        assert statement.transactions == ()

    def test_money_rounded(self, statement):
        assert str(statement.opening_balance) == "100.00"

    def test_out_of_order_rejected(self, statement):
        with pytest.raises(ValidationError):
            ParsedStatement(statement_date=date(2025, 12, 3), transactions=tuple(reversed(statement.transactions)))

    def test_ledger_entries_skip_balance_rows(self, statement):
        assert [t.description for t in statement.ledger_entries()] == ["IOF", "PIX"]

    def test_totals(self, statement):
        assert statement.total_credits() == Decimal("20.00")
        assert statement.total_debits() == Decimal("34.67")

    def test_breakdown(self, statement):
        assert statement.breakdown() == {"DEBIT": 1, "CREDIT": 1, "BALANCE": 1}

    def test_json_round_trip(self, statement):
        assert ParsedStatement.model_validate_json(statement.model_dump_json()) == statement
