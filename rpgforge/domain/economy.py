"""Gold primitives."""

from __future__ import annotations

from ..storage.base import UserRecord
from .exceptions import InsufficientFunds, ValidationError


def add_currency(user: UserRecord, amount: int) -> int:
    if amount < 0:
        raise ValidationError("Cannot credit negative amount")
    user.gold += amount
    return user.gold


def spend_currency(user: UserRecord, amount: int) -> int:
    if amount < 0:
        raise ValidationError("Cannot debit negative amount")
    if user.gold < amount:
        raise InsufficientFunds(required=amount, available=user.gold)
    user.gold -= amount
    return user.gold


def can_afford(user: UserRecord, amount: int) -> bool:
    return user.gold >= amount


def transfer_if_possible(payer: UserRecord, payee: UserRecord, amount: int) -> bool:
    """Move ``amount`` gold when the payer currently holds it; otherwise do nothing."""
    if amount <= 0 or not can_afford(payer, amount):
        return False
    spend_currency(payer, amount)
    add_currency(payee, amount)
    return True
