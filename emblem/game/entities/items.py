"""Item records owned by combatants.

Items are plain data records mirroring the host documents: weapons, skills,
classes and consumables. The combat core reads them and only ever writes back
weapon uses and the equipped flag.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Optional, Union
import uuid

from ...core.data import (
    ClassType,
    ItemType,
    MagicType,
    MAGICAL_WEAPON_TYPES,
    SkillType,
    StatValue,
    WeaponRange,
    WeaponRank,
    WeaponType,
)


def _new_item_id() -> str:
    return uuid.uuid4().hex[:16]


@dataclass
class Weapon:
    """A wieldable weapon or tome.

    ``uses.max == 0`` marks unlimited durability. A weapon with finite
    durability and no uses left is broken.
    """
    name: str
    weapon_type: WeaponType = WeaponType.SWORD
    might: int = 5
    hit: int = 80
    crit: int = 0
    weight: int = 5
    range: str = "1"
    uses: StatValue = field(default_factory=lambda: StatValue(45, 45))
    rank: WeaponRank = WeaponRank.E
    effective: list[ClassType] = field(default_factory=list)
    magic_type: Optional[MagicType] = None
    equipped: bool = False
    item_id: str = field(default_factory=_new_item_id)

    item_type = ItemType.WEAPON

    @property
    def is_magical(self) -> bool:
        """Tomes and staves scale with magic and hit resistance."""
        return self.weapon_type in MAGICAL_WEAPON_TYPES

    @property
    def has_unlimited_uses(self) -> bool:
        return self.uses.max == 0

    @property
    def is_broken(self) -> bool:
        return self.uses.max > 0 and self.uses.value <= 0

    @property
    def uses_percent(self) -> int:
        if self.has_unlimited_uses:
            return 100
        return round(self.uses.value / self.uses.max * 100)

    @property
    def weapon_range(self) -> WeaponRange:
        """Parsed range; raises RangeParseError for malformed strings."""
        return WeaponRange.parse(self.range)

    @property
    def triangle_type(self) -> str:
        """Type used for weapon triangle lookups.

        Tomes take part in the magic triangles through their magic type.
        """
        if self.weapon_type is WeaponType.TOME and self.magic_type is not None:
            return self.magic_type.value
        return self.weapon_type.value

    def is_effective_against(self, class_type: Optional[ClassType]) -> bool:
        return class_type is not None and class_type in self.effective

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "name": self.name,
            "weapon_type": self.weapon_type.value,
            "might": self.might,
            "hit": self.hit,
            "crit": self.crit,
            "weight": self.weight,
            "range": self.range,
            "uses": self.uses.to_dict(),
            "rank": self.rank.value,
            "effective": [tag.value for tag in self.effective],
            "magic_type": self.magic_type.value if self.magic_type else None,
            "equipped": self.equipped,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Weapon":
        magic_type = data.get("magic_type")
        weapon = cls(
            name=data["name"],
            weapon_type=WeaponType(data.get("weapon_type", "sword")),
            might=int(data.get("might", 5)),
            hit=int(data.get("hit", 80)),
            crit=int(data.get("crit", 0)),
            weight=int(data.get("weight", 5)),
            range=str(data.get("range", "1")),
            uses=StatValue.from_data(data.get("uses", {"value": 45, "max": 45})),
            rank=WeaponRank(data.get("rank", "E")),
            effective=[ClassType(tag) for tag in data.get("effective", [])],
            magic_type=MagicType(magic_type) if magic_type else None,
            equipped=bool(data.get("equipped", False)),
        )
        if "item_id" in data:
            weapon.item_id = str(data["item_id"])
        return weapon


@dataclass
class SkillEffects:
    """Numeric effects a skill applies when it activates."""
    hit_mod: int = 0
    avoid_mod: int = 0
    crit_mod: int = 0
    damage_mod: int = 0
    ignore_defense: int = 0
    ignore_resistance: int = 0
    heal_percent: int = 0
    damage_percent: int = 0
    multi_hit: int = 0
    multi_hit_power_mod: int = 100


@dataclass
class SkillConditions:
    """When a skill is allowed to activate."""
    hp_threshold: int = 0
    hp_above: bool = True
    attacking_only: bool = False
    defending_only: bool = False
    adjacent_ally: bool = False
    adjacent_enemy: bool = False


@dataclass
class Skill:
    """A learned ability.

    ``tags`` lets a skill declare combat flags explicitly instead of relying on
    its display name.
    """
    name: str
    skill_type: SkillType = SkillType.PASSIVE
    activation_chance: int = 0
    activation_formula: str = ""
    effects: SkillEffects = field(default_factory=SkillEffects)
    conditions: SkillConditions = field(default_factory=SkillConditions)
    tags: frozenset[str] = field(default_factory=frozenset)
    item_id: str = field(default_factory=_new_item_id)

    item_type = ItemType.SKILL

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "name": self.name,
            "skill_type": self.skill_type.value,
            "activation_chance": self.activation_chance,
            "activation_formula": self.activation_formula,
            "effects": asdict(self.effects),
            "conditions": asdict(self.conditions),
            "tags": sorted(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Skill":
        skill = cls(
            name=data["name"],
            skill_type=SkillType(data.get("skill_type", "passive")),
            activation_chance=int(data.get("activation_chance", 0)),
            activation_formula=str(data.get("activation_formula", "")),
            effects=SkillEffects(**data.get("effects", {})),
            conditions=SkillConditions(**data.get("conditions", {})),
            tags=frozenset(str(tag).lower() for tag in data.get("tags", [])),
        )
        if "item_id" in data:
            skill.item_id = str(data["item_id"])
        return skill


@dataclass
class ClassItem:
    """A character class; its ``class_type`` is the effectiveness tag."""
    name: str
    class_type: ClassType = ClassType.INFANTRY
    promoted: bool = False
    item_id: str = field(default_factory=_new_item_id)

    item_type = ItemType.CLASS

    def to_dict(self) -> dict[str, Any]:
        return {"item_id": self.item_id, "name": self.name,
                "class_type": self.class_type.value, "promoted": self.promoted}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClassItem":
        class_item = cls(
            name=data["name"],
            class_type=ClassType(data.get("class_type", "infantry")),
            promoted=bool(data.get("promoted", False)),
        )
        if "item_id" in data:
            class_item.item_id = str(data["item_id"])
        return class_item


@dataclass
class Consumable:
    """A usable item such as a vulnerary."""
    name: str
    uses: StatValue = field(default_factory=lambda: StatValue(3, 3))
    item_id: str = field(default_factory=_new_item_id)

    item_type = ItemType.ITEM

    @property
    def is_depleted(self) -> bool:
        return self.uses.max > 0 and self.uses.value <= 0

    def use(self) -> bool:
        """Spend one use.

        Returns:
            False when nothing is left to use
        """
        if self.is_depleted:
            return False
        if self.uses.max > 0:
            self.uses.value = max(0, self.uses.value - 1)
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"item_id": self.item_id, "name": self.name, "uses": self.uses.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Consumable":
        consumable = cls(
            name=data["name"],
            uses=StatValue.from_data(data.get("uses", {"value": 3, "max": 3})),
        )
        if "item_id" in data:
            consumable.item_id = str(data["item_id"])
        return consumable


Item = Union[Weapon, Skill, ClassItem, Consumable]

ITEM_PARSERS = {
    ItemType.WEAPON: Weapon.from_dict,
    ItemType.SKILL: Skill.from_dict,
    ItemType.CLASS: ClassItem.from_dict,
    ItemType.ITEM: Consumable.from_dict,
}


def item_from_dict(data: dict[str, Any]) -> Item:
    """Build an item from a mapping carrying a ``type`` key."""
    try:
        item_type = ItemType(data.get("type", "item"))
    except ValueError:
        raise ValueError(f"Unknown item type: {data.get('type')!r}") from None
    return ITEM_PARSERS[item_type](data)
