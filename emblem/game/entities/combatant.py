"""Combatant records and the stat model reader.

A :class:`Combatant` is the plain-data stand-in for an actor document of the
host application: identity, position, base stats and owned items. Derived
combat stats are never stored; :class:`StatModel` recomputes them from the
current base stats and equipped weapon every time they are read.

Property Access Patterns:
    combatant.hp                      # current hit points
    combatant.stats.str.value         # base stat
    combatant.derived.attack_speed    # derived stat (read only)
    combatant.equipped_weapon         # Weapon or None
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional
import uuid

from ...core.data import ClassType, StatValue, Vector2
from ...core.errors import PreconditionError
from .items import ClassItem, Consumable, Item, Skill, Weapon, item_from_dict


STAT_NAMES = ("hp", "str", "mag", "skl", "spd", "lck", "def", "res", "mov")


@dataclass
class StatBlock:
    """Base stats, each with a current value and a maximum.

    ``str`` and ``def`` shadow Python names only as attribute names, matching
    the stat abbreviations used on character sheets.
    """
    hp: StatValue = field(default_factory=lambda: StatValue(20, 20))
    str: StatValue = field(default_factory=lambda: StatValue(5, 20))
    mag: StatValue = field(default_factory=lambda: StatValue(0, 20))
    skl: StatValue = field(default_factory=lambda: StatValue(5, 20))
    spd: StatValue = field(default_factory=lambda: StatValue(5, 20))
    lck: StatValue = field(default_factory=lambda: StatValue(5, 20))
    def_: StatValue = field(default_factory=lambda: StatValue(3, 20))
    res: StatValue = field(default_factory=lambda: StatValue(0, 20))
    mov: StatValue = field(default_factory=lambda: StatValue(5, 15))

    def __getitem__(self, name: str) -> StatValue:
        return getattr(self, "def_" if name == "def" else name)

    @property
    def defense(self) -> StatValue:
        return self.def_

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {name: self[name].to_dict() for name in STAT_NAMES}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StatBlock":
        block = cls()
        for name in STAT_NAMES:
            if name in data:
                setattr(block, "def_" if name == "def" else name, StatValue.from_data(data[name]))
        return block


@dataclass(frozen=True)
class DerivedStats:
    """Combat stats derived from base stats and the equipped weapon."""
    hit: int
    avoid: int
    crit: int
    crit_avoid: int
    attack_speed: int
    attack: int


class StatModel:
    """Pure derived-stat formulas."""

    @staticmethod
    def effective_stat(stats: StatBlock, weapon: Optional[Weapon]) -> int:
        """Magic for tomes and staves, strength otherwise."""
        if weapon is not None and weapon.is_magical:
            return stats.mag.value
        return stats.str.value

    @staticmethod
    def derive(stats: StatBlock, weapon: Optional[Weapon]) -> DerivedStats:
        # Integer floor division matches floor() for the non-negative stats
        skl = stats.skl.value
        lck = stats.lck.value
        spd = stats.spd.value
        weapon_hit = weapon.hit if weapon else 0
        weapon_crit = weapon.crit if weapon else 0

        if weapon is not None:
            effective = StatModel.effective_stat(stats, weapon)
            attack_speed = spd - max(0, weapon.weight - effective)
            attack = effective + weapon.might
        else:
            attack_speed = spd
            attack = 0

        return DerivedStats(
            hit=(skl * 4 + lck + weapon_hit * 2) // 2,
            avoid=spd * 2 + lck,
            crit=(skl + weapon_crit * 2) // 2,
            crit_avoid=lck,
            attack_speed=attack_speed,
            attack=attack,
        )


class Combatant:
    """A character or enemy taking part in combat."""

    def __init__(
        self,
        name: str,
        stats: Optional[StatBlock] = None,
        position: Optional[Vector2] = None,
        items: Optional[list[Item]] = None,
        combatant_id: Optional[str] = None,
    ):
        self.combatant_id = combatant_id or str(uuid.uuid4())
        self.name = name
        self.stats = stats or StatBlock()
        self.position = position or Vector2(0, 0)
        self.items: list[Item] = list(items or [])
        # Keep the hp invariant even for hand-built stat blocks
        self.hp = self.stats.hp.value

    def __repr__(self) -> str:
        return f"Combatant({self.name!r}, hp={self.hp}/{self.hp_max})"

    # ============== Health ==============

    @property
    def hp(self) -> int:
        return self.stats.hp.value

    @hp.setter
    def hp(self, value: int) -> None:
        """Set hit points, clamped to [0, hp.max]."""
        self.stats.hp.value = max(0, min(self.stats.hp.max, int(value)))

    @property
    def hp_max(self) -> int:
        return self.stats.hp.max

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    # ============== Items ==============

    @property
    def weapons(self) -> list[Weapon]:
        return [item for item in self.items if isinstance(item, Weapon)]

    @property
    def skills(self) -> list[Skill]:
        return [item for item in self.items if isinstance(item, Skill)]

    @property
    def classes(self) -> list[ClassItem]:
        return [item for item in self.items if isinstance(item, ClassItem)]

    @property
    def consumables(self) -> list[Consumable]:
        return [item for item in self.items if isinstance(item, Consumable)]

    @property
    def equipped_weapon(self) -> Optional[Weapon]:
        """The first weapon flagged as equipped, if any."""
        return next((weapon for weapon in self.weapons if weapon.equipped), None)

    @property
    def class_type(self) -> Optional[ClassType]:
        """Effectiveness tag of the combatant's class, if it has one."""
        classes = self.classes
        return classes[0].class_type if classes else None

    def get_item(self, item_id: str) -> Optional[Item]:
        return next((item for item in self.items if item.item_id == item_id), None)

    def get_weapon(self, weapon_id: str) -> Optional[Weapon]:
        item = self.get_item(weapon_id)
        return item if isinstance(item, Weapon) else None

    def add_item(self, item: Item) -> None:
        self.items.append(item)

    def equip(self, weapon_id: str) -> Weapon:
        """Equip a weapon, unequipping every other weapon.

        Raises:
            PreconditionError: If the weapon is not owned or is broken
        """
        weapon = self.get_weapon(weapon_id)
        if weapon is None:
            raise PreconditionError(f"{self.name} does not own weapon {weapon_id}")
        if weapon.is_broken:
            raise PreconditionError(f"{weapon.name} is broken and cannot be equipped")

        for other in self.weapons:
            other.equipped = other is weapon
        return weapon

    def unequip(self, weapon_id: str) -> None:
        weapon = self.get_weapon(weapon_id)
        if weapon is not None:
            weapon.equipped = False

    # ============== Derived Stats ==============

    @property
    def derived(self) -> DerivedStats:
        """Derived stats for the current base stats and equipment."""
        return StatModel.derive(self.stats, self.equipped_weapon)

    # ============== Serialization ==============

    def to_dict(self) -> dict[str, Any]:
        items = [{"type": item.item_type.value, **item.to_dict()} for item in self.items]
        return {
            "combatant_id": self.combatant_id,
            "name": self.name,
            "position": list(self.position.to_tuple()),
            "stats": self.stats.to_dict(),
            "items": items,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Combatant":
        position = data.get("position")
        return cls(
            name=data["name"],
            stats=StatBlock.from_dict(data.get("stats", {})),
            position=Vector2.from_list(position) if position is not None else None,
            items=[item_from_dict(item) for item in data.get("items", [])],
            combatant_id=data.get("combatant_id"),
        )
