"""
Round execution for single combat actions.

A round is one blow: a d100 hit roll against the hit chance, and on a hit an
independent d100 crit roll against the crit chance. Odds are snapshotted into
the round record when it is created, so an unresolved round can be persisted
and resolved later without re-reading the combatants.
"""
from dataclasses import asdict, dataclass
from typing import Any, Optional, TYPE_CHECKING

from ...core.data import ActionKind, CombatSide
from .battle_calculator import BattleCalculator, CRITICAL_MULTIPLIER
from .dice import Dice

if TYPE_CHECKING:
    from .sequence_builder import CombatAction


@dataclass(frozen=True)
class RoundOdds:
    """Hit, crit and damage values a round is rolled against."""
    hit_chance: int
    crit_chance: int
    damage: int

    @property
    def crit_damage(self) -> int:
        return self.damage * CRITICAL_MULTIPLIER

    @classmethod
    def for_action(cls, action: "CombatAction") -> "RoundOdds":
        return cls(
            hit_chance=BattleCalculator.calculate_hit_chance(action.actor, action.target, action.weapon),
            crit_chance=BattleCalculator.calculate_crit_chance(action.actor, action.target),
            damage=BattleCalculator.calculate_damage(action.actor, action.target, action.weapon),
        )


@dataclass
class RoundResult:
    """Outcome of one action, or a pending stub while ``resolved`` is False.

    ``hp_before``/``hp_after`` always refer to the target of the action.
    ``skipped`` marks rounds discarded because a combatant was defeated first.
    """
    index: int
    side: CombatSide
    kind: ActionKind
    actor_name: str
    target_name: str
    weapon_id: str
    weapon_name: str
    hit_chance: int
    crit_chance: int
    base_damage: int
    hp_before: int
    hp_after: int
    hit_roll: Optional[int] = None
    did_hit: bool = False
    crit_roll: Optional[int] = None
    is_crit: bool = False
    damage: int = 0
    resolved: bool = False
    skipped: bool = False

    @property
    def odds(self) -> RoundOdds:
        return RoundOdds(self.hit_chance, self.crit_chance, self.base_damage)

    @property
    def is_pending(self) -> bool:
        return not self.resolved and not self.skipped

    @classmethod
    def stub(cls, index: int, action: "CombatAction", hp_before: int,
             odds: Optional[RoundOdds] = None) -> "RoundResult":
        """Unresolved round with its odds snapshot and the target's HP before."""
        odds = odds or RoundOdds.for_action(action)
        return cls(
            index=index,
            side=action.side,
            kind=action.kind,
            actor_name=action.actor.name,
            target_name=action.target.name,
            weapon_id=action.weapon.item_id,
            weapon_name=action.weapon.name,
            hit_chance=odds.hit_chance,
            crit_chance=odds.crit_chance,
            base_damage=odds.damage,
            hp_before=hp_before,
            hp_after=hp_before,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["side"] = self.side.value
        data["kind"] = self.kind.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoundResult":
        values = dict(data)
        values["side"] = CombatSide(values["side"])
        values["kind"] = ActionKind(values["kind"])
        return cls(**values)


class RoundExecutor:
    """Rolls rounds with an auditable dice roller."""

    def __init__(self, dice: Optional[Dice] = None):
        self.dice = dice or Dice()

    def resolve(self, round_result: RoundResult) -> RoundResult:
        """
        Roll a pending round in place against its odds snapshot.

        Args:
            round_result: Stub whose ``hp_before`` is the target's current HP

        Returns:
            The same record, now resolved
        """
        hit_roll = self.dice.roll_d100(f"round {round_result.index} hit")
        did_hit = hit_roll <= round_result.hit_chance

        crit_roll: Optional[int] = None
        is_crit = False
        damage = 0
        if did_hit:
            crit_roll = self.dice.roll_d100(f"round {round_result.index} crit")
            is_crit = crit_roll <= round_result.crit_chance
            damage = round_result.odds.crit_damage if is_crit else round_result.base_damage

        round_result.hit_roll = hit_roll
        round_result.did_hit = did_hit
        round_result.crit_roll = crit_roll
        round_result.is_crit = is_crit
        round_result.damage = damage
        round_result.hp_after = max(0, round_result.hp_before - damage)
        round_result.resolved = True
        return round_result

    def execute(self, action: "CombatAction", current_defender_hp: int, index: int = 0) -> RoundResult:
        """Resolve one action immediately against the target's current HP."""
        return self.resolve(RoundResult.stub(index, action, current_defender_hp))
