"""
Weapon triangle resolution.

Physical: sword > axe > lance > sword
Magic level 1: light > dark > anima > light
Magic level 2 (anima sub-types only): thunder > fire > wind > thunder

Any other pairing, including physical against magic, is neutral.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TriangleResult:
    """Advantage tier and the modifiers it implies for the attacker."""
    tier: int = 0
    hit_mod: int = 0
    damage_mod: int = 0

    def __neg__(self) -> "TriangleResult":
        return TriangleResult(-self.tier, -self.hit_mod, -self.damage_mod)


NEUTRAL = TriangleResult()

# type -> type it beats
PHYSICAL_TRIANGLE = {"sword": "axe", "axe": "lance", "lance": "sword"}
MAGIC_TRIANGLE = {"light": "dark", "dark": "anima", "anima": "light"}
ANIMA_TRIANGLE = {"thunder": "fire", "fire": "wind", "wind": "thunder"}

ANIMA_SUBTYPES = frozenset(ANIMA_TRIANGLE)

# (hit_mod, damage_mod) granted by a one-tier advantage
PRIMARY_MODIFIERS = (15, 1)
ANIMA_MODIFIERS = (10, 1)


def _normalize(weapon_type: Optional[str]) -> Optional[str]:
    if weapon_type is None:
        return None
    return str(weapon_type).strip().lower()


def _tier(table: dict[str, str], attacker: str, defender: str) -> int:
    if table[attacker] == defender:
        return 1
    if table[defender] == attacker:
        return -1
    return 0


def _result(tier: int, modifiers: tuple[int, int]) -> TriangleResult:
    hit_mod, damage_mod = modifiers
    return TriangleResult(tier, tier * hit_mod, tier * damage_mod)


def advantage(attacker_type: Optional[str], defender_type: Optional[str]) -> TriangleResult:
    """Resolve the triangle relationship between two weapon or magic types.

    Total and pure: unknown or missing types are neutral, and swapping the
    operands negates the result.

    Args:
        attacker_type: Weapon type (sword/lance/axe) or magic type of the attacker
        defender_type: Weapon type or magic type of the defender

    Returns:
        TriangleResult from the attacker's point of view
    """
    attacker = _normalize(attacker_type)
    defender = _normalize(defender_type)
    if attacker is None or defender is None:
        return NEUTRAL

    if attacker in PHYSICAL_TRIANGLE and defender in PHYSICAL_TRIANGLE:
        return _result(_tier(PHYSICAL_TRIANGLE, attacker, defender), PRIMARY_MODIFIERS)

    if attacker in ANIMA_SUBTYPES and defender in ANIMA_SUBTYPES:
        return _result(_tier(ANIMA_TRIANGLE, attacker, defender), ANIMA_MODIFIERS)

    magic_attacker = "anima" if attacker in ANIMA_SUBTYPES else attacker
    magic_defender = "anima" if defender in ANIMA_SUBTYPES else defender
    if magic_attacker in MAGIC_TRIANGLE and magic_defender in MAGIC_TRIANGLE:
        return _result(_tier(MAGIC_TRIANGLE, magic_attacker, magic_defender), PRIMARY_MODIFIERS)

    return NEUTRAL
