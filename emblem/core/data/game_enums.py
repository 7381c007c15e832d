"""Centralized game enums and constants.

This module contains all core combat enums that are used across multiple modules,
eliminating duplication and providing a single source of truth.
"""

from enum import Enum, auto


class WeaponType(Enum):
    """Weapon families a weapon item can belong to."""
    SWORD = "sword"
    LANCE = "lance"
    AXE = "axe"
    BOW = "bow"
    TOME = "tome"
    STAFF = "staff"
    DRAGONSTONE = "dragonstone"
    BEAST = "beast"


class MagicType(Enum):
    """Magic schools carried by tomes."""
    ANIMA = "anima"
    LIGHT = "light"
    DARK = "dark"
    FIRE = "fire"
    THUNDER = "thunder"
    WIND = "wind"
    ICE = "ice"


class ClassType(Enum):
    """Class tags that weapon effectiveness is matched against."""
    INFANTRY = "infantry"
    CAVALRY = "cavalry"
    FLYING = "flying"
    ARMORED = "armored"
    MAGIC = "magic"
    DRAGON = "dragon"
    MONSTER = "monster"


class WeaponRank(Enum):
    """Weapon rank required to wield a weapon."""
    E = "E"
    D = "D"
    C = "C"
    B = "B"
    A = "A"
    S = "S"
    PRF = "Prf"


class SkillType(Enum):
    """How a skill is triggered."""
    PASSIVE = "passive"
    TRIGGER = "trigger"
    COMMAND = "command"
    SUPPORT = "support"


class ItemType(Enum):
    """Kinds of items a combatant can own."""
    WEAPON = "weapon"
    SKILL = "skill"
    CLASS = "class"
    ITEM = "item"


class CombatSide(Enum):
    """Which side of an encounter a combatant is on."""
    ATTACKER = "attacker"
    DEFENDER = "defender"

    @property
    def opponent(self) -> "CombatSide":
        return CombatSide.DEFENDER if self is CombatSide.ATTACKER else CombatSide.ATTACKER


class ActionKind(Enum):
    """Kinds of attack actions inside a combat sequence."""
    ATTACK = "attack"
    COUNTER = "counter"
    BRAVE = "brave"
    DOUBLE = "double"


class ResolutionMode(Enum):
    """How a combat session resolves its actions."""
    AUTO = "auto"
    INTERACTIVE = "interactive"


class SessionState(Enum):
    """Lifecycle states of a combat session."""
    BUILDING = auto()
    SEQUENCING = auto()
    RESOLVING = auto()
    FINALIZING = auto()
    CLOSED = auto()


# Weapon types whose damage uses magic and targets resistance
MAGICAL_WEAPON_TYPES = frozenset({WeaponType.TOME, WeaponType.STAFF})

ACTION_KIND_NAMES = {
    ActionKind.ATTACK: "Attack",
    ActionKind.COUNTER: "Counter",
    ActionKind.BRAVE: "Brave",
    ActionKind.DOUBLE: "Follow-up",
}
