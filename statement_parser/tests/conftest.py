"""
Shared fixtures for the statement parser tests.
"""
import pytest
from datetime import date

from ..core.detectors import get_layout


@pytest.fixture
def layout():
    """The packaged checking-account layout."""
    return get_layout()


@pytest.fixture
def today():
    """Fixed 'today' so year fallbacks are deterministic."""
    return date(2025, 6, 30)


@pytest.fixture
def itau_lines():
    """Entries as extracted from a real checking-account statement."""
    return [
        "30/11/2025 SALDO ANTERIOR                           1.609,27",
        "01/12/2025 PIX TRANSF GILDA D01/12      325,00D     1.284,27",
        "01/12/2025 SALDO TOTAL DISPONÍVEL DIA               1.284,27",
        "02/12/2025 IOF                           34,67D      1.249,60",
        "02/12/2025 SALDO TOTAL DISPONÍVEL DIA               1.249,60",
        "03/12/2025 PAG BOLETO SOCIEDADE ED      225,50D     1.024,10",
        "03/12/2025 PAG BOLETO F I A P           720,00D       304,10",
        "03/12/2025 PIX QRS GAMA FISIO03/12      200,00D       104,10",
        "03/12/2025 SALDO TOTAL DISPONÍVEL DIA                104,10",
    ]


@pytest.fixture
def english_statement():
    """Minimal translated statement with a viewing-period anchor."""
    return (
        "entries viewing period\n"
        "01/03 MARKET XYZ 120,50 D 1.000,00\n"
        "05/03 SALARY 3.000,00 C 4.000,00\n"
    )
