"""Load quest definitions from JSON.

The document groups quests by name (``daily``, ``main``, ...). Reward items are
either plain item ids or ``{"id": ..., "qty": ...}`` objects.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..domain.quests import QuestCatalog, QuestDefinition, QuestKind, QuestReward
from .json_loader import _format_errors

logger = logging.getLogger(__name__)


DEFAULT_QUESTS: dict[str, Any] = {
    "daily": [
        {
            "id": "daily_hunt",
            "name": "🎯 Daily Hunt",
            "description": "Hunt 5 times",
            "type": "hunt",
            "target": 5,
            "reward": {"exp": 100, "gold": 200, "items": []},
        },
        {
            "id": "daily_fish",
            "name": "🎣 Daily Fish",
            "description": "Fish 3 times",
            "type": "fish",
            "target": 3,
            "reward": {"exp": 80, "gold": 150, "items": []},
        },
    ],
    "main": [
        {
            "id": "beginner_hunt",
            "name": "🌍 Beginner Hunt",
            "description": "Hunt 10 times",
            "type": "hunt",
            "target": 10,
            "reward": {"exp": 200, "gold": 500, "items": ["iron_sword"]},
        },
        {
            "id": "become_warrior",
            "name": "⚔️ Become Warrior",
            "description": "Reach level 5",
            "type": "level",
            "target": 5,
            "reward": {"exp": 500, "gold": 1000, "items": ["iron_armor"]},
        },
    ],
}


def load_quests_from_json(
    quests: QuestCatalog,
    path: str | Path,
    *,
    seed_defaults: bool = True,
) -> list[QuestDefinition]:
    path = Path(path)
    if not path.exists() and seed_defaults:
        logger.info("Quest file %s not found; writing default quests.", path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(DEFAULT_QUESTS, indent=2, ensure_ascii=False), encoding="utf-8")
    data = json.loads(path.read_text(encoding="utf-8"))
    definitions = parse_quests_dict(data)
    quests.register_many(definitions)
    return definitions


def load_default_quests(quests: QuestCatalog) -> list[QuestDefinition]:
    definitions = parse_quests_dict(DEFAULT_QUESTS)
    quests.register_many(definitions)
    return definitions


def parse_quests_dict(data: dict[str, Any]) -> list[QuestDefinition]:
    errors = validate_quests_dict(data)
    if errors:
        raise ValueError(_format_errors("Quest validation failed", errors))
    return [
        parse_quest(entry, group)
        for group, entries in data.items()
        for entry in entries
    ]


def parse_quest(entry: dict[str, Any], group: str = "main") -> QuestDefinition:
    reward = entry.get("reward") or {}
    items: dict[str, int] = {}
    for item in reward.get("items") or []:
        if isinstance(item, str):
            item_id, quantity = item, 1
        else:
            item_id, quantity = item["id"], int(item.get("qty", 1))
        items[item_id] = items.get(item_id, 0) + quantity
    return QuestDefinition(
        quest_id=entry["id"],
        name=entry["name"],
        kind=QuestKind(entry["type"]),
        target=int(entry["target"]),
        description=entry.get("description", ""),
        group=group,
        reward=QuestReward(
            experience=int(reward.get("exp", 0)),
            gold=int(reward.get("gold", 0)),
            items=items,
        ),
    )


def validate_quests_dict(data: Any) -> list[str]:
    if not isinstance(data, dict):
        return ["Quest document must be a JSON object of quest groups."]
    errors: list[str] = []
    kinds = {kind.value for kind in QuestKind}
    seen: set[str] = set()
    for group, entries in data.items():
        if not isinstance(entries, list):
            errors.append(f"Quest group '{group}' must be an array.")
            continue
        for idx, entry in enumerate(entries, start=1):
            if not isinstance(entry, dict):
                errors.append(f"Quest #{idx} in '{group}' must be an object.")
                continue
            quest_id = entry.get("id")
            if not isinstance(quest_id, str) or not quest_id.strip():
                errors.append(f"Quest #{idx} in '{group}' must define non-empty 'id'.")
                continue
            if quest_id in seen:
                errors.append(f"Quest id '{quest_id}' defined multiple times.")
            seen.add(quest_id)
            if not isinstance(entry.get("name"), str) or not entry["name"].strip():
                errors.append(f"Quest '{quest_id}' must define non-empty 'name'.")
            if entry.get("type") not in kinds:
                errors.append(f"Quest '{quest_id}' has invalid type '{entry.get('type')}'.")
            target = entry.get("target")
            if not isinstance(target, int) or target <= 0:
                errors.append(f"Quest '{quest_id}' must define a positive 'target'.")
            errors.extend(_validate_reward(quest_id, entry.get("reward", {})))
    return errors


def _validate_reward(quest_id: str, reward: Any) -> list[str]:
    if not isinstance(reward, dict):
        return [f"Quest '{quest_id}' reward must be an object."]
    errors: list[str] = []
    for field_name in ("exp", "gold"):
        value = reward.get(field_name, 0)
        if not isinstance(value, int) or value < 0:
            errors.append(f"Quest '{quest_id}' reward '{field_name}' must be non-negative integer.")
    items = reward.get("items", [])
    if not isinstance(items, list):
        return errors + [f"Quest '{quest_id}' reward items must be an array."]
    for item in items:
        if isinstance(item, str) and item:
            continue
        if isinstance(item, dict) and isinstance(item.get("id"), str):
            qty = item.get("qty", 1)
            if isinstance(qty, int) and qty > 0:
                continue
        errors.append(f"Quest '{quest_id}' has an invalid reward item {item!r}.")
    return errors
