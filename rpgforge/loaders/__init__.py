"""Loaders for declarative item catalogs and quests."""

from .json_loader import (
    DEFAULT_CATALOG,
    load_catalog_from_json,
    load_default_catalog,
    parse_catalog_dict,
    validate_catalog_dict,
    validate_catalog_file,
)
from .quest_loader import (
    DEFAULT_QUESTS,
    load_default_quests,
    load_quests_from_json,
    parse_quests_dict,
    validate_quests_dict,
)

__all__ = [
    "DEFAULT_CATALOG",
    "load_catalog_from_json",
    "load_default_catalog",
    "parse_catalog_dict",
    "validate_catalog_dict",
    "validate_catalog_file",
    "DEFAULT_QUESTS",
    "load_default_quests",
    "load_quests_from_json",
    "parse_quests_dict",
    "validate_quests_dict",
]
