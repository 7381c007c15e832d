"""
Combat sequence construction.

Decides who attacks, how many times and in which order for one encounter.
Three mutually exclusive branches are tried in order:

1. Vantage: the defender counters before the attacker's first strike
2. Desperation: the attacker strikes all of its blows before any counter
3. Normal: attack, counter, then follow-ups

A defender that cannot counter never acts, and a follow-up or brave blow is
only emitted for a side that already struck in the same branch.
"""
from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

from ...core.data import ActionKind, CombatSide, Vector2
from .battle_calculator import BattleCalculator, DOUBLE_ATTACK_THRESHOLD
from .skill_query import CombatFlags, SkillQuery

if TYPE_CHECKING:
    from ..entities.combatant import Combatant
    from ..entities.items import Weapon


@dataclass(frozen=True)
class CombatAction:
    """One blow in a combat sequence.

    ``weapon`` is bound when the sequence is built and is not re-evaluated if
    it breaks later in the same encounter.
    """
    actor: "Combatant"
    target: "Combatant"
    weapon: "Weapon"
    kind: ActionKind
    side: CombatSide

    def to_dict(self) -> dict[str, Any]:
        return {
            "actor_id": self.actor.combatant_id,
            "target_id": self.target.combatant_id,
            "weapon_id": self.weapon.item_id,
            "kind": self.kind.value,
            "side": self.side.value,
        }


@dataclass(frozen=True)
class SequencePlan:
    """Eligibility facts the branches are decided from."""
    attacker_flags: CombatFlags
    defender_flags: CombatFlags
    defender_can_counter: bool
    attacker_can_double: bool
    defender_can_double: bool


class SequenceBuilder:
    """Builds the ordered list of combat actions for an encounter."""

    def __init__(self, skill_query: Optional[SkillQuery] = None,
                 double_threshold: int = DOUBLE_ATTACK_THRESHOLD):
        self.skill_query = skill_query or SkillQuery()
        self.double_threshold = double_threshold

    def plan(self, attacker: "Combatant", defender: "Combatant",
             positions: Optional[tuple[Vector2, Vector2]] = None) -> SequencePlan:
        attacker_flags = self.skill_query.query_combat_flags(attacker)
        defender_flags = self.skill_query.query_combat_flags(defender)

        defender_can_counter = (
            not attacker_flags.prevents_counter
            and BattleCalculator.can_counter(attacker, defender, attacker.equipped_weapon, positions)
        )

        return SequencePlan(
            attacker_flags=attacker_flags,
            defender_flags=defender_flags,
            defender_can_counter=defender_can_counter,
            attacker_can_double=BattleCalculator.can_double(attacker, defender, self.double_threshold),
            # Defenders never double on speed alone
            defender_can_double=defender_flags.guaranteed_followup,
        )

    def build_sequence(self, attacker: "Combatant", defender: "Combatant",
                       positions: Optional[tuple[Vector2, Vector2]] = None) -> list[CombatAction]:
        """
        Build the ordered action list for one encounter.

        Args:
            attacker: Initiating combatant, must have a weapon equipped
            defender: Target combatant
            positions: Optional override of both grid positions

        Returns:
            Actions in the order they are resolved
        """
        plan = self.plan(attacker, defender, positions)
        attacker_weapon = attacker.equipped_weapon
        defender_weapon = defender.equipped_weapon

        def attacker_action(kind: ActionKind) -> CombatAction:
            return CombatAction(attacker, defender, attacker_weapon, kind, CombatSide.ATTACKER)

        def defender_action(kind: ActionKind) -> CombatAction:
            return CombatAction(defender, attacker, defender_weapon, kind, CombatSide.DEFENDER)

        sequence: list[CombatAction] = []

        if plan.defender_can_counter and plan.defender_flags.counter_priority:
            sequence.append(defender_action(ActionKind.COUNTER))
            sequence.append(attacker_action(ActionKind.ATTACK))
            if plan.attacker_flags.brave_weapon:
                sequence.append(attacker_action(ActionKind.BRAVE))
            if plan.defender_can_double:
                sequence.append(defender_action(ActionKind.DOUBLE))
            if plan.attacker_can_double:
                sequence.append(attacker_action(ActionKind.DOUBLE))

        elif plan.attacker_flags.priority_attack and plan.attacker_can_double:
            sequence.append(attacker_action(ActionKind.ATTACK))
            if plan.attacker_flags.brave_weapon:
                sequence.append(attacker_action(ActionKind.BRAVE))
            sequence.append(attacker_action(ActionKind.DOUBLE))

            if plan.defender_can_counter:
                sequence.append(defender_action(ActionKind.COUNTER))
                if plan.defender_flags.brave_weapon:
                    sequence.append(defender_action(ActionKind.BRAVE))
                if plan.defender_can_double:
                    sequence.append(defender_action(ActionKind.DOUBLE))

        else:
            sequence.append(attacker_action(ActionKind.ATTACK))
            if plan.attacker_flags.brave_weapon:
                sequence.append(attacker_action(ActionKind.BRAVE))

            if plan.defender_can_counter:
                sequence.append(defender_action(ActionKind.COUNTER))
                if plan.defender_flags.brave_weapon:
                    sequence.append(defender_action(ActionKind.BRAVE))

            if plan.attacker_can_double and not plan.defender_flags.prevents_followup:
                sequence.append(attacker_action(ActionKind.DOUBLE))

            if (plan.defender_can_counter and plan.defender_can_double
                    and not plan.attacker_flags.prevents_followup):
                sequence.append(defender_action(ActionKind.DOUBLE))

        return sequence
