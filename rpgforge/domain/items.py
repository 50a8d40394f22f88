"""Item domain models and the read-only catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping


class ItemCategory(str, Enum):
    CONSUMABLE = "consumable"
    MATERIAL = "material"
    WEAPON = "weapon"
    ARMOR = "armor"
    ACCESSORY = "accessory"


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


@dataclass(slots=True)
class ItemDefinition:
    """Definition of a purchasable or collectible item."""

    item_id: str
    name: str
    category: ItemCategory
    price: int
    sell_price: int = 0
    description: str = ""
    rarity: Rarity = Rarity.COMMON
    stack_limit: int | None = None
    heal: int = 0
    attack_bonus: int = 0
    defense_bonus: int = 0
    stat_bonus: Mapping[str, int] = field(default_factory=dict)

    @property
    def stackable(self) -> bool:
        return self.stack_limit is not None

    @property
    def max_quantity(self) -> int:
        return self.stack_limit if self.stack_limit is not None else 1


@dataclass(slots=True)
class ShopEntry:
    """Item offered in the shop listing."""

    item_id: str
    quantity: int = 1


class ItemCatalog:
    """Registry of item definitions and the shop listing."""

    def __init__(self) -> None:
        self._items: dict[str, ItemDefinition] = {}
        self._shop: list[ShopEntry] = []

    def register_item(self, item: ItemDefinition) -> None:
        if item.item_id in self._items:
            raise ValueError(f"Item {item.item_id} already registered")
        self._items[item.item_id] = item

    def register_items(self, items: Iterable[ItemDefinition]) -> None:
        for item in items:
            self.register_item(item)

    def get_item(self, item_id: str) -> ItemDefinition:
        try:
            return self._items[item_id]
        except KeyError as exc:
            raise KeyError(f"Item {item_id} not found") from exc

    def find_item(self, item_id: str) -> ItemDefinition | None:
        return self._items.get(item_id)

    def add_shop_entry(self, entry: ShopEntry) -> None:
        if entry.item_id not in self._items:
            raise KeyError(f"Item {entry.item_id} not found")
        self._shop.append(entry)

    def iter_items(self) -> Iterable[ItemDefinition]:
        return self._items.values()

    def iter_shop(self) -> Iterable[ShopEntry]:
        return tuple(self._shop)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)
