"""
Battle calculation system for combat odds and forecasting.

This module provides the read-only combat formulas (hit, crit, damage,
follow-ups, counters and ranges) and the battle forecast shown before a
combat is confirmed. Nothing here mutates combatants.
"""
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

import numpy as np

from ...core.data import ActionKind, CombatSide, Vector2, VectorArray, WeaponRange
from . import weapon_triangle
from .weapon_triangle import TriangleResult

if TYPE_CHECKING:
    from ..entities.combatant import Combatant
    from ..entities.items import Weapon
    from .sequence_builder import SequenceBuilder


DOUBLE_ATTACK_THRESHOLD = 4
EFFECTIVE_MULTIPLIER = 3
CRITICAL_MULTIPLIER = 3


@dataclass(frozen=True)
class SideForecast:
    """Forecast values for one side of an encounter."""
    name: str
    weapon_name: Optional[str]
    hp: int
    hp_max: int
    projected_hp: int
    hit: int = 0
    damage: int = 0
    crit: int = 0
    strikes: int = 0
    doubles: bool = False
    can_counter: bool = False
    has_advantage: bool = False

    @property
    def hp_percent(self) -> int:
        return round(self.hp / self.hp_max * 100) if self.hp_max else 0

    @property
    def projected_hp_percent(self) -> int:
        return round(self.projected_hp / self.hp_max * 100) if self.hp_max else 0


@dataclass(frozen=True)
class BattleForecast:
    """Complete forecast shown before confirming a combat."""
    attacker: SideForecast
    defender: SideForecast
    triangle_tier: int = 0


class BattleCalculator:
    """Calculates combat odds and battle forecasts."""

    @staticmethod
    def triangle_between(weapon: Optional["Weapon"], defender: "Combatant") -> TriangleResult:
        """Triangle result of a weapon against the defender's equipped weapon."""
        defender_weapon = defender.equipped_weapon
        if weapon is None or defender_weapon is None:
            return weapon_triangle.NEUTRAL
        return weapon_triangle.advantage(weapon.triangle_type, defender_weapon.triangle_type)

    @staticmethod
    def calculate_hit_chance(attacker: "Combatant", defender: "Combatant", weapon: Optional["Weapon"] = None) -> int:
        """Hit chance percentage, clamped to 0-100."""
        triangle = BattleCalculator.triangle_between(weapon, defender)
        raw_hit = attacker.derived.hit + triangle.hit_mod - defender.derived.avoid
        return max(0, min(100, raw_hit))

    @staticmethod
    def calculate_crit_chance(attacker: "Combatant", defender: "Combatant") -> int:
        """Critical chance percentage, floored at 0."""
        return max(0, attacker.derived.crit - defender.derived.crit_avoid)

    @staticmethod
    def calculate_damage(attacker: "Combatant", defender: "Combatant", weapon: "Weapon", is_crit: bool = False) -> int:
        """
        Damage of one hit.

        Effectiveness triples the damage before defense is subtracted; a
        critical triples what is left after defense.

        Args:
            attacker: The attacking combatant
            defender: The defending combatant
            weapon: Weapon used for the attack
            is_crit: Whether the hit is a critical

        Returns:
            Damage dealt, never negative
        """
        attack_stat = attacker.stats.mag.value if weapon.is_magical else attacker.stats.str.value
        damage = attack_stat + weapon.might
        damage += BattleCalculator.triangle_between(weapon, defender).damage_mod

        if weapon.is_effective_against(defender.class_type):
            damage = damage * EFFECTIVE_MULTIPLIER

        defense = defender.stats.res.value if weapon.is_magical else defender.stats.defense.value
        damage = max(0, damage - defense)

        if is_crit:
            damage = damage * CRITICAL_MULTIPLIER

        return damage

    @staticmethod
    def can_double(attacker: "Combatant", defender: "Combatant", threshold: int = DOUBLE_ATTACK_THRESHOLD) -> bool:
        """Whether the attacker is fast enough for a follow-up attack."""
        return attacker.derived.attack_speed - defender.derived.attack_speed >= threshold

    @staticmethod
    def distance_between(attacker: "Combatant", defender: "Combatant",
                         positions: Optional[tuple[Vector2, Vector2]] = None) -> int:
        attacker_pos, defender_pos = positions or (attacker.position, defender.position)
        return attacker_pos.manhattan_distance_to(defender_pos)

    @staticmethod
    def can_counter(attacker: "Combatant", defender: "Combatant", attacker_weapon: Optional["Weapon"] = None,
                    positions: Optional[tuple[Vector2, Vector2]] = None) -> bool:
        """Whether the defender's weapon can reach back across the actual distance.

        Only the defender's range matters; ``attacker_weapon`` is accepted for
        call-site symmetry with the other formulas.

        Raises:
            RangeParseError: If the defender's weapon range is malformed
        """
        defender_weapon = defender.equipped_weapon
        if defender_weapon is None or defender_weapon.is_broken:
            return False
        distance = BattleCalculator.distance_between(attacker, defender, positions)
        return defender_weapon.weapon_range.covers(distance)

    @staticmethod
    def in_attack_range(attacker: "Combatant", defender: "Combatant",
                        positions: Optional[tuple[Vector2, Vector2]] = None) -> bool:
        """Whether the attacker's equipped weapon reaches the defender."""
        weapon = attacker.equipped_weapon
        if weapon is None:
            return False
        distance = BattleCalculator.distance_between(attacker, defender, positions)
        return weapon.weapon_range.covers(distance)

    @staticmethod
    def calculate_attackable_tiles(position: Vector2, weapon_range: WeaponRange) -> VectorArray:
        """All tiles a weapon can hit from a position (Manhattan ring).

        Tiles with negative coordinates are dropped; map bounds are the host's
        concern.
        """
        reach = weapon_range.max
        offsets = np.arange(-reach, reach + 1, dtype=np.int16)
        dy, dx = np.meshgrid(offsets, offsets, indexing="ij")
        distances = np.abs(dy) + np.abs(dx)
        mask = (distances >= weapon_range.min) & (distances <= weapon_range.max)

        tiles = np.stack([dy[mask] + position.y, dx[mask] + position.x], axis=1)
        tiles = tiles[(tiles[:, 0] >= 0) & (tiles[:, 1] >= 0)]
        return VectorArray(tiles)

    @staticmethod
    def targets_in_range(attacker: "Combatant", candidates: list["Combatant"]) -> list["Combatant"]:
        """Candidates standing on a tile the attacker's weapon reaches."""
        weapon = attacker.equipped_weapon
        if weapon is None or weapon.is_broken or not candidates:
            return []

        weapon_range = weapon.weapon_range
        positions = VectorArray([candidate.position for candidate in candidates])
        distances = positions.manhattan_distances_to(attacker.position)
        in_range = (distances >= weapon_range.min) & (distances <= weapon_range.max)
        return [candidate for candidate, hit in zip(candidates, in_range)
                if hit and candidate is not attacker]

    @staticmethod
    def calculate_forecast(attacker: "Combatant", defender: "Combatant",
                           positions: Optional[tuple[Vector2, Vector2]] = None,
                           double_threshold: int = DOUBLE_ATTACK_THRESHOLD,
                           sequence_builder: Optional["SequenceBuilder"] = None) -> BattleForecast:
        """
        Calculate the complete battle forecast between two combatants.

        Strike counts come from the same sequence the encounter would resolve,
        so counters, brave blows and follow-ups match the resolver. Projected
        HP assumes every strike hits without a critical.

        Args:
            attacker: The attacking combatant (must have a weapon equipped)
            defender: The defending combatant
            positions: Optional override of both grid positions
            double_threshold: Attack speed lead needed to double
            sequence_builder: Builder with the configured skill keywords

        Returns:
            BattleForecast with both sides' predictions
        """
        from .sequence_builder import SequenceBuilder

        builder = sequence_builder or SequenceBuilder(double_threshold=double_threshold)
        attacker_weapon = attacker.equipped_weapon
        defender_weapon = defender.equipped_weapon
        triangle = BattleCalculator.triangle_between(attacker_weapon, defender)

        sequence = []
        can_counter = False
        if attacker_weapon is not None:
            can_counter = builder.plan(attacker, defender, positions).defender_can_counter
            sequence = builder.build_sequence(attacker, defender, positions)

        attacker_actions = [action for action in sequence if action.side is CombatSide.ATTACKER]
        defender_actions = [action for action in sequence if action.side is CombatSide.DEFENDER]

        attacker_damage = 0
        attacker_hit = 0
        attacker_crit = 0
        if attacker_weapon is not None:
            attacker_damage = BattleCalculator.calculate_damage(attacker, defender, attacker_weapon)
            attacker_hit = BattleCalculator.calculate_hit_chance(attacker, defender, attacker_weapon)
            attacker_crit = BattleCalculator.calculate_crit_chance(attacker, defender)

        defender_damage = 0
        defender_hit = 0
        defender_crit = 0
        if can_counter and defender_weapon is not None:
            defender_damage = BattleCalculator.calculate_damage(defender, attacker, defender_weapon)
            defender_hit = BattleCalculator.calculate_hit_chance(defender, attacker, defender_weapon)
            defender_crit = BattleCalculator.calculate_crit_chance(defender, attacker)

        attacker_total = attacker_damage * len(attacker_actions)
        defender_total = defender_damage * len(defender_actions)

        return BattleForecast(
            attacker=SideForecast(
                name=attacker.name,
                weapon_name=attacker_weapon.name if attacker_weapon else None,
                hp=attacker.hp,
                hp_max=attacker.hp_max,
                projected_hp=max(0, attacker.hp - defender_total),
                hit=attacker_hit,
                damage=attacker_damage,
                crit=attacker_crit,
                strikes=len(attacker_actions),
                doubles=any(action.kind is ActionKind.DOUBLE for action in attacker_actions),
                has_advantage=triangle.tier == 1,
            ),
            defender=SideForecast(
                name=defender.name,
                weapon_name=defender_weapon.name if defender_weapon else None,
                hp=defender.hp,
                hp_max=defender.hp_max,
                projected_hp=max(0, defender.hp - attacker_total),
                hit=defender_hit,
                damage=defender_damage,
                crit=defender_crit,
                strikes=len(defender_actions),
                doubles=any(action.kind is ActionKind.DOUBLE for action in defender_actions),
                can_counter=can_counter,
                has_advantage=triangle.tier == -1,
            ),
            triangle_tier=triangle.tier,
        )
