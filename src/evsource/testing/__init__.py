"""Testing – reference domain and property-based strategies.

``evsource.testing.strategies`` needs ``hypothesis``; import it directly.
"""
from evsource.testing.bank import BankAccount, Card, register_bank_handlers

__all__ = ["BankAccount", "Card", "register_bank_handlers"]
