"""
Combat session state machine.

A session drives one encounter between an attacker and a defender:

    BUILDING -> SEQUENCING -> RESOLVING -> FINALIZING -> CLOSED

In AUTO mode every action is rolled back to back and the session finalizes
on its own. In INTERACTIVE mode each action waits as an unresolved round
until an external caller resolves it by index; the session can be
serialized between steps and rehydrated from the combatant repository.

HP and weapon uses are written to the repository only while FINALIZING,
as absolute values. An interactive session that is abandoned before its
last round touches nothing.
"""
from typing import Any, Optional, TYPE_CHECKING

from ...core.config import CombatSettings
from ...core.data import CombatSide, ResolutionMode, SessionState, Vector2
from ...core.errors import InvalidStateError, PreconditionError
from ...core.events import CombatFinalized, CombatInitiated, LogMessage, RoundResolved
from .battle_calculator import BattleCalculator
from .combat_log import CombatLog, SideSummary
from .durability import DurabilitySystem
from .round_executor import RoundExecutor, RoundResult
from .sequence_builder import CombatAction, SequenceBuilder
from .skill_query import SkillQuery

if TYPE_CHECKING:
    from ...core.events import EventManager
    from ..entities.combatant import Combatant
    from ..entities.items import Weapon
    from ..repository import CombatantRepository


class CombatSession:
    """One encounter between two combatants."""

    def __init__(
        self,
        encounter_id: str,
        attacker: "Combatant",
        defender: "Combatant",
        repository: "CombatantRepository",
        mode: ResolutionMode = ResolutionMode.AUTO,
        settings: Optional[CombatSettings] = None,
        executor: Optional[RoundExecutor] = None,
        event_manager: Optional["EventManager"] = None,
        positions: Optional[tuple[Vector2, Vector2]] = None,
    ):
        self.encounter_id = encounter_id
        self.attacker = attacker
        self.defender = defender
        self.repository = repository
        self.mode = mode
        self.settings = settings or CombatSettings()
        self.executor = executor or RoundExecutor()
        self.event_manager = event_manager
        self.durability = DurabilitySystem(repository, event_manager)
        self.positions = positions

        self.state = SessionState.BUILDING
        self.actions: list[CombatAction] = []
        self.rounds: list[RoundResult] = []
        self.winner: Optional[CombatSide] = None
        self.combat_log: Optional[CombatLog] = None

        self.hp_start: dict[CombatSide, int] = {}
        self.hp: dict[CombatSide, int] = {}
        self.weapon_ids: dict[CombatSide, Optional[str]] = {}
        self.uses_before: dict[CombatSide, Optional[int]] = {}
        self.uses_consumed: dict[CombatSide, int] = {CombatSide.ATTACKER: 0, CombatSide.DEFENDER: 0}

    def __repr__(self) -> str:
        return (f"CombatSession({self.encounter_id!r}, {self.attacker.name} vs {self.defender.name}, "
                f"{self.mode.value}, {self.state.name})")

    # ============== Helpers ==============

    def _emit_log(self, message: str, category: str = "BATTLE", level: str = "INFO") -> None:
        if self.event_manager is None:
            return
        self.event_manager.publish(
            LogMessage(message=message, category=category, level=level, source="CombatSession"),
            source="CombatSession"
        )

    def _publish(self, event) -> None:
        if self.event_manager is not None:
            self.event_manager.publish(event, source="CombatSession")

    def combatant(self, side: CombatSide) -> "Combatant":
        return self.attacker if side is CombatSide.ATTACKER else self.defender

    def weapon(self, side: CombatSide) -> Optional["Weapon"]:
        weapon_id = self.weapon_ids.get(side)
        if weapon_id is None:
            return None
        return self.combatant(side).get_weapon(weapon_id)

    def _require_state(self, *states: SessionState) -> None:
        if self.state not in states:
            expected = " or ".join(state.name for state in states)
            raise InvalidStateError(
                f"Encounter {self.encounter_id} is {self.state.name}, expected {expected}"
            )

    @property
    def is_closed(self) -> bool:
        return self.state is SessionState.CLOSED

    @property
    def pending_rounds(self) -> list[RoundResult]:
        return [r for r in self.rounds if r.is_pending]

    @property
    def next_round_index(self) -> Optional[int]:
        return next((r.index for r in self.rounds if r.is_pending), None)

    @property
    def outcome(self) -> str:
        """Name of the winner, or "ongoing"."""
        if self.winner is None:
            return "ongoing"
        return self.combatant(self.winner).name

    # ============== Building / Sequencing ==============

    def check_preconditions(self) -> None:
        """
        Validate the encounter before anything is built.

        Raises:
            PreconditionError: If the attacker cannot start this combat
        """
        weapon = self.attacker.equipped_weapon
        if weapon is None:
            raise PreconditionError(f"{self.attacker.name} has no weapon equipped")
        if weapon.is_broken:
            raise PreconditionError(f"{self.attacker.name}'s {weapon.name} is broken")
        if self.attacker is self.defender or self.attacker.combatant_id == self.defender.combatant_id:
            raise PreconditionError(f"{self.attacker.name} cannot attack itself")
        if not self.attacker.is_alive:
            raise PreconditionError(f"{self.attacker.name} is defeated and cannot attack")
        if not self.defender.is_alive:
            raise PreconditionError(f"{self.defender.name} is already defeated")
        if not BattleCalculator.in_attack_range(self.attacker, self.defender, self.positions):
            raise PreconditionError(
                f"{self.defender.name} is out of range of {self.attacker.name}'s {weapon.name} ({weapon.range})"
            )

    def begin(self) -> list[RoundResult]:
        """
        Build and sequence the encounter.

        Every action becomes an unresolved round carrying its odds and the
        target's HP before the round.

        Returns:
            The round stubs in resolution order

        Raises:
            PreconditionError: If the attacker cannot start this combat
            InvalidStateError: If the session was already started
        """
        self._require_state(SessionState.BUILDING)
        self.check_preconditions()

        for side in CombatSide:
            combatant = self.combatant(side)
            weapon = combatant.equipped_weapon
            self.hp_start[side] = combatant.hp
            self.hp[side] = combatant.hp
            self.weapon_ids[side] = weapon.item_id if weapon else None
            self.uses_before[side] = weapon.uses.value if weapon else None

        self.state = SessionState.SEQUENCING
        builder = SequenceBuilder(
            SkillQuery(self.settings.skill_keywords, self.settings.brave_keywords),
            self.settings.double_threshold,
        )
        self.actions = builder.build_sequence(self.attacker, self.defender, self.positions)
        self.rounds = [
            RoundResult.stub(index, action, self.hp[action.side.opponent])
            for index, action in enumerate(self.actions)
        ]

        self.state = SessionState.RESOLVING
        self._emit_log(
            f"{self.attacker.name} attacks {self.defender.name} "
            f"({len(self.rounds)} actions, {self.mode.value})"
        )
        self._publish(CombatInitiated(
            encounter_id=self.encounter_id,
            attacker_name=self.attacker.name,
            defender_name=self.defender.name,
            mode=self.mode,
            action_count=len(self.rounds),
        ))
        return self.rounds

    # ============== Resolving ==============

    def _apply_round(self, round_result: RoundResult) -> None:
        """Roll a pending round and fold it into the running state."""
        target_side = round_result.side.opponent
        round_result.hp_before = self.hp[target_side]
        self.executor.resolve(round_result)
        self.hp[target_side] = round_result.hp_after
        self.uses_consumed[round_result.side] += 1

        for later in self.rounds[round_result.index + 1:]:
            if later.is_pending and later.side is round_result.side:
                later.hp_before = round_result.hp_after
                later.hp_after = round_result.hp_after

        self._log_round(round_result)
        self._publish(RoundResolved(self.encounter_id, round_result.index, round_result))

        if self.hp[target_side] == 0:
            self.winner = round_result.side
            self._skip_pending(f"{self.combatant(target_side).name} was defeated")
        elif self._weapon_spent(round_result.side) and self.settings.cancel_actions_on_weapon_break:
            self._skip_pending(f"{round_result.weapon_name} broke", side=round_result.side)

    def _weapon_spent(self, side: CombatSide) -> bool:
        weapon = self.weapon(side)
        uses_before = self.uses_before.get(side)
        if weapon is None or weapon.has_unlimited_uses or uses_before is None:
            return False
        return uses_before - self.uses_consumed[side] <= 0

    def _skip_pending(self, reason: str, side: Optional[CombatSide] = None) -> None:
        skipped = 0
        for r in self.rounds:
            if r.is_pending and (side is None or r.side is side):
                r.skipped = True
                skipped += 1
        if skipped:
            self._emit_log(f"{reason}: {skipped} remaining action(s) discarded")

    def _log_round(self, r: RoundResult) -> None:
        if not r.did_hit:
            self._emit_log(f"{r.actor_name} misses {r.target_name} (rolled {r.hit_roll} vs {r.hit_chance})")
        elif r.is_crit:
            self._emit_log(f"{r.actor_name} lands a CRITICAL on {r.target_name} for {r.damage} "
                           f"(HP {r.hp_before} -> {r.hp_after})")
        else:
            self._emit_log(f"{r.actor_name} hits {r.target_name} for {r.damage} "
                           f"(HP {r.hp_before} -> {r.hp_after})")

    def run(self) -> CombatLog:
        """
        Resolve every action without pausing and finalize (AUTO mode).

        Resolution stops the moment either side reaches 0 HP.

        Raises:
            InvalidStateError: If the session is not resolving or not in AUTO mode
        """
        self._require_state(SessionState.RESOLVING)
        if self.mode is not ResolutionMode.AUTO:
            raise InvalidStateError(f"Encounter {self.encounter_id} is interactive; resolve rounds by index")

        for round_result in self.rounds:
            if round_result.is_pending:
                self._apply_round(round_result)

        return self.finalize()

    def resolve_round(self, index: int) -> RoundResult:
        """
        Resolve a single round by index (INTERACTIVE mode).

        Rounds resolve strictly in sequence order. When the last pending round
        is resolved, or a combatant is defeated, the session finalizes.

        Args:
            index: Position of the round in the sequence

        Returns:
            The resolved round

        Raises:
            InvalidStateError: If the session is not resolving, the round does
                not exist, was already resolved or skipped, or is out of order
        """
        self._require_state(SessionState.RESOLVING)
        if not 0 <= index < len(self.rounds):
            raise InvalidStateError(f"Encounter {self.encounter_id} has no round {index}")

        round_result = self.rounds[index]
        if round_result.resolved:
            raise InvalidStateError(f"Round {index} of encounter {self.encounter_id} is already resolved")
        if round_result.skipped:
            raise InvalidStateError(f"Round {index} of encounter {self.encounter_id} was discarded")
        if index != self.next_round_index:
            raise InvalidStateError(
                f"Round {index} of encounter {self.encounter_id} is out of order "
                f"(next is {self.next_round_index})"
            )

        self._apply_round(round_result)

        if not self.pending_rounds:
            self.finalize()
        return round_result

    # ============== Finalizing ==============

    def _side_summary(self, side: CombatSide) -> SideSummary:
        combatant = self.combatant(side)
        weapon = self.weapon(side)
        uses_before = self.uses_before.get(side)
        summary = SideSummary(
            name=combatant.name,
            hp_start=self.hp_start[side],
            hp_end=self.hp[side],
        )
        if weapon is not None:
            summary.weapon_name = weapon.name
            summary.uses_max = weapon.uses.max
            summary.uses_before = uses_before
            if uses_before is not None:
                summary.uses_after = DurabilitySystem.remaining_uses(weapon, uses_before, self.uses_consumed[side])
            summary.weapon_broken = not weapon.has_unlimited_uses and summary.uses_after == 0
        return summary

    def finalize(self) -> CombatLog:
        """
        Write final HP and weapon uses and emit the combat log.

        Writes are absolute values derived from the encounter's starting
        snapshot.

        Raises:
            InvalidStateError: If rounds are still pending or the session is closed
        """
        self._require_state(SessionState.RESOLVING)
        if self.pending_rounds:
            raise InvalidStateError(
                f"Encounter {self.encounter_id} still has {len(self.pending_rounds)} pending round(s)"
            )

        self.state = SessionState.FINALIZING
        for side in CombatSide:
            self.repository.set_hp(self.combatant(side).combatant_id, self.hp[side])

        for side in CombatSide:
            weapon = self.weapon(side)
            if weapon is not None and self.uses_consumed[side] > 0:
                self.durability.consume_uses(
                    self.combatant(side),
                    weapon,
                    self.uses_consumed[side],
                    uses_before=self.uses_before[side],
                    encounter_id=self.encounter_id,
                    side=side,
                )

        self.combat_log = CombatLog(
            encounter_id=self.encounter_id,
            mode=self.mode,
            attacker=self._side_summary(CombatSide.ATTACKER),
            defender=self._side_summary(CombatSide.DEFENDER),
            rounds=list(self.rounds),
            winner=self.combatant(self.winner).name if self.winner is not None else None,
        )
        for line in self.combat_log.format_lines():
            self._emit_log(line)
        self._publish(CombatFinalized(self.encounter_id, self.combat_log))

        self.state = SessionState.CLOSED
        return self.combat_log

    # ============== Serialization ==============

    def to_dict(self) -> dict[str, Any]:
        """Serializable snapshot of the session between interactive steps."""
        return {
            "encounter_id": self.encounter_id,
            "mode": self.mode.value,
            "state": self.state.name,
            "attacker_id": self.attacker.combatant_id,
            "defender_id": self.defender.combatant_id,
            "positions": [list(p.to_tuple()) for p in self.positions] if self.positions else None,
            "hp_start": {side.value: hp for side, hp in self.hp_start.items()},
            "hp": {side.value: hp for side, hp in self.hp.items()},
            "weapon_ids": {side.value: weapon_id for side, weapon_id in self.weapon_ids.items()},
            "uses_before": {side.value: uses for side, uses in self.uses_before.items()},
            "uses_consumed": {side.value: uses for side, uses in self.uses_consumed.items()},
            "rounds": [r.to_dict() for r in self.rounds],
            "winner": self.winner.value if self.winner else None,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        repository: "CombatantRepository",
        settings: Optional[CombatSettings] = None,
        executor: Optional[RoundExecutor] = None,
        event_manager: Optional["EventManager"] = None,
    ) -> "CombatSession":
        """
        Rehydrate a session, reading both combatants from the repository.

        Raises:
            InvalidStateError: If a combatant no longer exists
        """
        positions = data.get("positions")
        session = cls(
            encounter_id=data["encounter_id"],
            attacker=repository.require_combatant(data["attacker_id"]),
            defender=repository.require_combatant(data["defender_id"]),
            repository=repository,
            mode=ResolutionMode(data["mode"]),
            settings=settings,
            executor=executor,
            event_manager=event_manager,
            positions=tuple(Vector2.from_list(p) for p in positions) if positions else None,
        )
        session.state = SessionState[data["state"]]
        session.hp_start = {CombatSide(k): v for k, v in data.get("hp_start", {}).items()}
        session.hp = {CombatSide(k): v for k, v in data.get("hp", {}).items()}
        session.weapon_ids = {CombatSide(k): v for k, v in data.get("weapon_ids", {}).items()}
        session.uses_before = {CombatSide(k): v for k, v in data.get("uses_before", {}).items()}
        session.uses_consumed.update({CombatSide(k): v for k, v in data.get("uses_consumed", {}).items()})
        session.rounds = [RoundResult.from_dict(r) for r in data.get("rounds", [])]
        winner = data.get("winner")
        session.winner = CombatSide(winner) if winner else None
        return session
