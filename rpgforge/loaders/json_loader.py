"""Load item definitions and the shop listing from JSON."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Sequence

from ..domain.items import ItemCatalog, ItemCategory, ItemDefinition, Rarity, ShopEntry

logger = logging.getLogger(__name__)

# Older catalogs call accessories "ring".
_CATEGORY_ALIASES = {"ring": ItemCategory.ACCESSORY.value}


def _item(
    item_id: str,
    name: str,
    category: str,
    price: int,
    sell_price: int,
    description: str,
    *,
    rarity: str = "common",
    stack_limit: int | None = None,
    **extra: Any,
) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "id": item_id,
        "name": name,
        "category": category,
        "rarity": rarity,
        "price": price,
        "sellPrice": sell_price,
        "description": description,
    }
    if stack_limit is not None:
        entry["stackLimit"] = stack_limit
    entry.update(extra)
    return entry


DEFAULT_CATALOG: dict[str, Any] = {
    "items": [
        _item("potion", "🔴 Potion", "consumable", 50, 25, "Restore 50 HP", stack_limit=99, heal=50),
        _item("mana_potion", "🔵 Mana Potion", "consumable", 40, 20, "Restore 30 Mana", stack_limit=99),
        _item("antidote", "⚪ Antidote", "consumable", 60, 30, "Remove poison effect", stack_limit=50),
        _item("bait", "🎣 Bait", "consumable", 30, 15, "Fishing bait", stack_limit=99),
        _item("beef", "🥩 Beef", "material", 20, 10, "Raw meat from hunting", stack_limit=99),
        _item(
            "wild_meat", "🍖 Wild Meat", "material", 40, 20, "Rare meat from hunting",
            rarity="uncommon", stack_limit=99,
        ),
        _item("fish", "🐟 Fish", "material", 25, 12, "Caught from fishing", stack_limit=99),
        _item(
            "rare_fish", "🐠 Rare Fish", "material", 100, 50, "Rare catch from fishing",
            rarity="rare", stack_limit=50,
        ),
        _item("iron_sword", "⚔️ Iron Sword", "weapon", 200, 100, "Basic iron weapon", attackBonus=15),
        _item(
            "steel_sword", "🗡️ Steel Sword", "weapon", 500, 250, "Improved steel weapon",
            rarity="uncommon", attackBonus=30,
        ),
        _item(
            "legend_sword", "⚡ Legendary Sword", "weapon", 5000, 2500, "Ultimate legendary weapon",
            rarity="legendary", attackBonus=100,
        ),
        _item("iron_armor", "🛡️ Iron Armor", "armor", 150, 75, "Basic iron armor", defenseBonus=10),
        _item(
            "steel_armor", "🔒 Steel Armor", "armor", 400, 200, "Improved steel armor",
            rarity="uncommon", defenseBonus=25,
        ),
        _item(
            "legend_armor", "👑 Legendary Armor", "armor", 4000, 2000, "Ultimate legendary armor",
            rarity="legendary", defenseBonus=80,
        ),
        _item(
            "strength_ring", "💍 Ring of Strength", "accessory", 500, 250, "Boost attack power",
            rarity="rare", statBonus={"attack": 10, "hp": 20},
        ),
        _item(
            "vitality_ring", "💎 Ring of Vitality", "accessory", 450, 225, "Boost HP & defense",
            rarity="rare", statBonus={"hp": 30, "defense": 5},
        ),
        _item(
            "speed_ring", "⚡ Ring of Speed", "accessory", 400, 200, "Increase speed",
            rarity="rare", statBonus={"speed": 5},
        ),
    ],
    "shop": [
        {"id": "potion", "qty": 1},
        {"id": "mana_potion", "qty": 1},
        {"id": "bait", "qty": 5},
        {"id": "iron_sword", "qty": 1},
        {"id": "iron_armor", "qty": 1},
    ],
}


@dataclass(slots=True)
class CatalogDefinition:
    items: Sequence[ItemDefinition]
    shop: Sequence[ShopEntry]


def load_catalog_from_json(
    catalog: ItemCatalog,
    path: str | Path,
    *,
    seed_defaults: bool = True,
) -> CatalogDefinition:
    """Load items and the shop from ``path`` and register them on ``catalog``.

    A missing file is created from the built-in defaults when ``seed_defaults``
    is set.
    """
    path = Path(path)
    if not path.exists() and seed_defaults:
        logger.info("Catalog %s not found; writing default items.", path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(DEFAULT_CATALOG, indent=2, ensure_ascii=False), encoding="utf-8")
    data = json.loads(path.read_text(encoding="utf-8"))
    definition = parse_catalog_dict(data)
    register_definition(catalog, definition)
    return definition


def load_default_catalog(catalog: ItemCatalog) -> CatalogDefinition:
    definition = parse_catalog_dict(DEFAULT_CATALOG)
    register_definition(catalog, definition)
    return definition


def register_definition(catalog: ItemCatalog, definition: CatalogDefinition) -> None:
    catalog.register_items(definition.items)
    for entry in definition.shop:
        catalog.add_shop_entry(entry)


def parse_catalog_dict(data: dict[str, Any]) -> CatalogDefinition:
    """Parse a JSON dict (already decoded) into domain objects."""
    errors = validate_catalog_dict(data)
    if errors:
        raise ValueError(_format_errors("Catalog validation failed", errors))
    items = tuple(parse_item(entry) for entry in data.get("items", []))
    shop = tuple(parse_shop_entry(entry) for entry in data.get("shop", []))
    return CatalogDefinition(items=items, shop=shop)


def parse_item(entry: dict[str, Any]) -> ItemDefinition:
    category = _CATEGORY_ALIASES.get(entry["category"], entry["category"])
    stat_bonus = entry.get("statBonus", {})
    return ItemDefinition(
        item_id=entry["id"],
        name=entry["name"],
        category=ItemCategory(category),
        price=int(entry["price"]),
        sell_price=int(entry.get("sellPrice", 0)),
        description=entry.get("description", ""),
        rarity=Rarity(entry.get("rarity", Rarity.COMMON.value)),
        stack_limit=entry.get("stackLimit"),
        heal=int(entry.get("heal", 0)),
        attack_bonus=int(entry.get("attackBonus", 0)),
        defense_bonus=int(entry.get("defenseBonus", 0)),
        stat_bonus={str(k): int(v) for k, v in stat_bonus.items()},
    )


def parse_shop_entry(entry: dict[str, Any]) -> ShopEntry:
    return ShopEntry(item_id=entry["id"], quantity=int(entry.get("qty", 1)))


def validate_catalog_file(path: str | Path) -> list[str]:
    """Validate catalog JSON file and return a list of errors."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        return [f"Catalog is not valid JSON: {exc}"]
    if not isinstance(data, dict):
        return ["Catalog must be a JSON object."]
    return validate_catalog_dict(data)


def validate_catalog_dict(data: dict[str, Any]) -> list[str]:
    errors: list[str] = []

    items_raw = data.get("items")
    item_ids: set[str] = set()
    if not isinstance(items_raw, list) or not items_raw:
        errors.append("Catalog must contain non-empty 'items' array.")
    else:
        categories = {c.value for c in ItemCategory} | set(_CATEGORY_ALIASES)
        rarities = {r.value for r in Rarity}
        for idx, entry in enumerate(items_raw, start=1):
            if not isinstance(entry, dict):
                errors.append(f"Item #{idx} must be an object.")
                continue
            item_id = entry.get("id")
            if not isinstance(item_id, str) or not item_id.strip():
                errors.append(f"Item #{idx} must define non-empty 'id'.")
                continue
            if item_id in item_ids:
                errors.append(f"Item id '{item_id}' defined multiple times.")
            item_ids.add(item_id)

            name = entry.get("name")
            if not isinstance(name, str) or not name.strip():
                errors.append(f"Item '{item_id}' must define non-empty 'name'.")
            if entry.get("category") not in categories:
                errors.append(f"Item '{item_id}' has invalid category '{entry.get('category')}'.")
            rarity = entry.get("rarity", Rarity.COMMON.value)
            if rarity not in rarities:
                errors.append(f"Item '{item_id}' has invalid rarity '{rarity}'.")

            for field_name in ("price", "sellPrice", "heal", "attackBonus", "defenseBonus"):
                value = entry.get(field_name, 0)
                if field_name == "price" and "price" not in entry:
                    errors.append(f"Item '{item_id}' must define 'price'.")
                    continue
                if not isinstance(value, int) or value < 0:
                    errors.append(f"Item '{item_id}' '{field_name}' must be non-negative integer.")

            stack_limit = entry.get("stackLimit")
            if stack_limit is not None and (not isinstance(stack_limit, int) or stack_limit <= 0):
                errors.append(f"Item '{item_id}' has invalid 'stackLimit' value '{stack_limit}'.")

            stat_bonus = entry.get("statBonus", {})
            if not isinstance(stat_bonus, dict):
                errors.append(f"Item '{item_id}' statBonus must be an object.")
            else:
                for stat, amount in stat_bonus.items():
                    if not isinstance(amount, int):
                        errors.append(f"Item '{item_id}' statBonus '{stat}' must be an integer.")

    shop_raw = data.get("shop", [])
    if not isinstance(shop_raw, list):
        errors.append("Catalog 'shop' must be an array.")
    else:
        for idx, entry in enumerate(shop_raw, start=1):
            if not isinstance(entry, dict):
                errors.append(f"Shop entry #{idx} must be an object.")
                continue
            item_id = entry.get("id")
            if item_ids and item_id not in item_ids:
                errors.append(f"Shop entry #{idx} references unknown item '{item_id}'.")
            qty = entry.get("qty", 1)
            if not isinstance(qty, int) or qty <= 0:
                errors.append(f"Shop entry '{item_id}' has invalid 'qty' value '{qty}'.")

    return errors


def _format_errors(prefix: str, errors: Iterable[str]) -> str:
    formatted = "\n".join(f"- {err}" for err in errors)
    return f"{prefix}:\n{formatted}"
