"""Core data structures and definitions.

This package contains fundamental data types and game definitions:
- data_structures.py: Vector2, VectorArray, StatValue and WeaponRange
- game_enums.py: Centralized enums for weapons, classes, actions and sessions
"""

from .data_structures import Vector2, VectorArray, StatValue, WeaponRange
from .game_enums import (
    WeaponType,
    MagicType,
    ClassType,
    WeaponRank,
    SkillType,
    ItemType,
    CombatSide,
    ActionKind,
    ResolutionMode,
    SessionState,
    MAGICAL_WEAPON_TYPES,
    ACTION_KIND_NAMES,
)

__all__ = [
    "Vector2",
    "VectorArray",
    "StatValue",
    "WeaponRange",
    "WeaponType",
    "MagicType",
    "ClassType",
    "WeaponRank",
    "SkillType",
    "ItemType",
    "CombatSide",
    "ActionKind",
    "ResolutionMode",
    "SessionState",
    "MAGICAL_WEAPON_TYPES",
    "ACTION_KIND_NAMES",
]
