"""Inventory rules: stacking, consumable counters, potions and the shop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..storage.base import UserRecord
from .economy import add_currency, spend_currency
from .exceptions import (
    InsufficientFunds,
    InsufficientItems,
    InventoryFull,
    NoPotionAvailable,
    UnknownItem,
    ValidationError,
)
from .items import ItemCatalog, ItemDefinition


@dataclass(slots=True)
class PotionResult:
    healed: int
    health: int
    max_health: int
    potions_left: int


@dataclass(slots=True)
class PurchaseResult:
    item: ItemDefinition
    quantity: int
    total_price: int
    gold_left: int


@dataclass(slots=True)
class SaleResult:
    item: ItemDefinition
    quantity: int
    total_price: int
    gold_left: int


def item_count(user: UserRecord, item_id: str, consumables: Sequence[str]) -> int:
    if item_id in consumables:
        return user.consumables.get(item_id, 0)
    return user.inventory.get(item_id, 0)


def add_item(
    user: UserRecord,
    item: ItemDefinition,
    quantity: int,
    consumables: Sequence[str],
) -> int:
    """Credit ``quantity`` copies and return the new count."""
    if quantity <= 0:
        raise ValidationError("Quantity must be positive")
    bucket = user.consumables if item.item_id in consumables else user.inventory
    current = bucket.get(item.item_id, 0)
    if current + quantity > item.max_quantity:
        raise InventoryFull(item.item_id, item.max_quantity)
    bucket[item.item_id] = current + quantity
    return bucket[item.item_id]


def remove_item(
    user: UserRecord,
    item_id: str,
    quantity: int,
    consumables: Sequence[str],
) -> int:
    """Debit ``quantity`` copies and return what is left."""
    if quantity <= 0:
        raise ValidationError("Quantity must be positive")
    bucket = user.consumables if item_id in consumables else user.inventory
    current = bucket.get(item_id, 0)
    if current < quantity:
        raise InsufficientItems(item_id, required=quantity, available=current)
    remaining = current - quantity
    if remaining == 0 and bucket is user.inventory:
        del bucket[item_id]
    else:
        bucket[item_id] = remaining
    return remaining


def use_potion(user: UserRecord, catalog: ItemCatalog, potion_id: str = "potion") -> PotionResult:
    count = user.consumables.get(potion_id, 0)
    if count <= 0:
        raise NoPotionAvailable("No potion available")
    potion = catalog.find_item(potion_id)
    heal = potion.heal if potion else 0
    before = user.health
    user.consumables[potion_id] = count - 1
    user.health = min(user.max_health, user.health + heal)
    return PotionResult(
        healed=user.health - before,
        health=user.health,
        max_health=user.max_health,
        potions_left=user.consumables[potion_id],
    )


def buy_item(
    user: UserRecord,
    catalog: ItemCatalog,
    item_id: str,
    quantity: int,
    consumables: Sequence[str],
) -> PurchaseResult:
    """Debit gold and credit the item together, or change nothing."""
    if quantity <= 0:
        raise ValidationError("Quantity must be positive")
    item = catalog.find_item(item_id)
    if item is None:
        raise UnknownItem(item_id)
    total = item.price * quantity
    if total > user.gold:
        raise InsufficientFunds(required=total, available=user.gold)
    # Credit first: a stack-limit failure must leave gold untouched.
    add_item(user, item, quantity, consumables)
    spend_currency(user, total)
    return PurchaseResult(item=item, quantity=quantity, total_price=total, gold_left=user.gold)


def sell_item(
    user: UserRecord,
    catalog: ItemCatalog,
    item_id: str,
    quantity: int,
    consumables: Sequence[str],
) -> SaleResult:
    if quantity <= 0:
        raise ValidationError("Quantity must be positive")
    item = catalog.find_item(item_id)
    if item is None:
        raise UnknownItem(item_id)
    remove_item(user, item_id, quantity, consumables)
    total = item.sell_price * quantity
    add_currency(user, total)
    return SaleResult(item=item, quantity=quantity, total_price=total, gold_left=user.gold)
