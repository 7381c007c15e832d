"""Combatants and the items they own."""

from .combatant import Combatant, StatBlock, DerivedStats, StatModel, STAT_NAMES
from .items import (
    Weapon,
    Skill,
    SkillEffects,
    SkillConditions,
    ClassItem,
    Consumable,
    Item,
    item_from_dict,
)

__all__ = [
    "Combatant",
    "StatBlock",
    "DerivedStats",
    "StatModel",
    "STAT_NAMES",
    "Weapon",
    "Skill",
    "SkillEffects",
    "SkillConditions",
    "ClassItem",
    "Consumable",
    "Item",
    "item_from_dict",
]
