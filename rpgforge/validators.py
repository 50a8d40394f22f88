"""Validation utilities for RPGForge applications."""

from __future__ import annotations

from .app import BotApp
from .domain.items import ItemCategory


def validate_app(app: BotApp) -> list[str]:
    """Return list of validation errors discovered in configured app."""
    errors: list[str] = []
    catalog = app.catalog
    config = app.config

    if not len(catalog):
        errors.append("No items registered in application.")

    for entry in catalog.iter_shop():
        if entry.item_id not in catalog:
            errors.append(f"Shop lists unknown item '{entry.item_id}'.")
        if entry.quantity <= 0:
            errors.append(f"Shop entry '{entry.item_id}' has non-positive quantity '{entry.quantity}'.")

    for item in catalog.iter_items():
        if item.price < 0 or item.sell_price < 0:
            errors.append(f"Item '{item.item_id}' has a negative price.")
        if item.sell_price > item.price:
            errors.append(f"Item '{item.item_id}' sells for more than it costs.")
        if item.stack_limit is not None and item.stack_limit <= 0:
            errors.append(f"Item '{item.item_id}' has non-positive stack limit '{item.stack_limit}'.")

    progression = config.progression
    for item_id in progression.consumable_items:
        item = catalog.find_item(item_id)
        if item is None:
            errors.append(f"Consumable '{item_id}' is not defined in the catalog.")
        elif item.category != ItemCategory.CONSUMABLE:
            errors.append(f"Consumable '{item_id}' is registered as '{item.category.value}'.")
    potion = catalog.find_item(progression.potion_item)
    if potion is not None and potion.heal <= 0:
        errors.append(f"Potion '{potion.item_id}' does not heal.")
    if progression.xp_factor <= 0 or progression.xp_exponent <= 0:
        errors.append("Progression curve factor and exponent must be positive.")

    for activity, reward in config.rewards.activities.items():
        if reward.min_experience < 0 or reward.min_experience > reward.max_experience:
            errors.append(f"Activity '{activity}' has an invalid experience range.")
        if reward.min_gold < 0 or reward.min_gold > reward.max_gold:
            errors.append(f"Activity '{activity}' has an invalid gold range.")
        if not 0 <= reward.drop_chance <= 1:
            errors.append(f"Activity '{activity}' drop chance must be between 0 and 1.")
        for item_id in reward.drops:
            if item_id not in catalog:
                errors.append(f"Activity '{activity}' drops unknown item '{item_id}'.")

    for quest in app.quests.iter_quests():
        if quest.target <= 0:
            errors.append(f"Quest '{quest.quest_id}' has non-positive target '{quest.target}'.")
        for item_id in quest.reward.items:
            if item_id not in catalog:
                errors.append(f"Quest '{quest.quest_id}' rewards unknown item '{item_id}'.")

    limits = config.rate_limit
    if limits.global_cooldown < 0 or limits.default_command_cooldown < 0:
        errors.append("Cooldowns cannot be negative.")
    for command, seconds in limits.command_cooldowns.items():
        if seconds < 0:
            errors.append(f"Cooldown for '{command}' cannot be negative.")
    if limits.max_warnings <= 0:
        errors.append("Rate limit 'max_warnings' must be positive.")
    if limits.ban_duration <= 0 or limits.warn_reset_window <= 0:
        errors.append("Ban duration and warning window must be positive.")

    if not any(config.dispatch.prefixes) and "" not in config.dispatch.prefixes:
        errors.append("At least one command prefix must be configured.")

    return errors


__all__ = ["validate_app"]
