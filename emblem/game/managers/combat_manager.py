"""
Combat management system for encounter orchestration.

This module starts encounters, steps interactive encounters by encounter id
and answers read-only targeting and forecast queries. Sessions never live in
process-wide state: interactive sessions are serialized into a SessionStore
between steps and rehydrated from the combatant repository for each step.
"""
from typing import TYPE_CHECKING, Optional
import uuid

from ...core.config import CombatSettings
from ...core.data import ResolutionMode, Vector2, VectorArray
from ...core.errors import InvalidStateError
from ...core.events import CombatFinalized, EventType, LogMessage
from ..combat import (
    BattleCalculator, BattleForecast, CombatLog, CombatSession, Dice, RoundExecutor, RoundResult,
    SequenceBuilder, SkillQuery,
)
from ..repository import SessionStore

if TYPE_CHECKING:
    from ...core.events import EventManager, GameEvent
    from ..entities.combatant import Combatant
    from ..repository import CombatantRepository


class CombatManager:
    """Manages encounter creation, stepping and combat queries."""

    def __init__(
        self,
        repository: "CombatantRepository",
        event_manager: "EventManager",
        settings: Optional[CombatSettings] = None,
        session_store: Optional[SessionStore] = None,
        dice: Optional[Dice] = None,
    ):
        self.repository = repository
        self.event_manager = event_manager
        self.settings = settings or CombatSettings()
        self.session_store = session_store or SessionStore()
        self.executor = RoundExecutor(dice)
        self.calculator = BattleCalculator()
        self.combat_logs: dict[str, CombatLog] = {}

        self.event_manager.subscribe(
            EventType.COMBAT_FINALIZED,
            self._handle_combat_finalized,
            subscriber_name="CombatManager.combat_finalized"
        )

    def _handle_combat_finalized(self, event: "GameEvent") -> None:
        """Keep the log of every finished encounter for later display."""
        assert isinstance(event, CombatFinalized), f"Expected CombatFinalized, got {type(event)}"
        self.combat_logs[event.encounter_id] = event.combat_log

    def _emit_log(self, message: str, category: str = "BATTLE", level: str = "INFO") -> None:
        self.event_manager.publish(
            LogMessage(message=message, category=category, level=level, source="CombatManager"),
            source="CombatManager"
        )

    def _require(self, combatant_id: str) -> "Combatant":
        return self.repository.require_combatant(combatant_id)

    # ============== Encounters ==============

    def start_combat(
        self,
        attacker_id: str,
        defender_id: str,
        encounter_id: Optional[str] = None,
        mode: Optional[ResolutionMode] = None,
        positions: Optional[tuple[Vector2, Vector2]] = None,
    ) -> CombatSession:
        """
        Start an encounter between two combatants.

        In AUTO mode the returned session is already closed. In INTERACTIVE
        mode it is persisted and waits for :meth:`resolve_round`.

        Args:
            attacker_id: Id of the initiating combatant
            defender_id: Id of the target
            encounter_id: Key for the encounter (generated if omitted)
            mode: Resolution mode (defaults to the configured one)
            positions: Optional override of both grid positions

        Returns:
            The session after starting it

        Raises:
            PreconditionError: If the attacker cannot start this combat
            InvalidStateError: If a combatant does not exist or the encounter id is taken
        """
        encounter_id = encounter_id or uuid.uuid4().hex[:12]
        if encounter_id in self.session_store:
            raise InvalidStateError(f"Encounter {encounter_id} is already in progress")

        session = CombatSession(
            encounter_id=encounter_id,
            attacker=self._require(attacker_id),
            defender=self._require(defender_id),
            repository=self.repository,
            mode=mode or self.settings.resolution_mode,
            settings=self.settings,
            executor=self.executor,
            event_manager=self.event_manager,
            positions=positions,
        )

        try:
            session.begin()
            if session.mode is ResolutionMode.AUTO:
                session.run()
            else:
                self.session_store.save(encounter_id, session.to_dict())
        finally:
            self.event_manager.process_events()

        return session

    def load_session(self, encounter_id: str) -> CombatSession:
        """
        Rehydrate a stored interactive session.

        Raises:
            InvalidStateError: If no session is stored under this id
        """
        data = self.session_store.load(encounter_id)
        if data is None:
            raise InvalidStateError(f"No combat session for encounter {encounter_id}")
        return CombatSession.from_dict(
            data,
            self.repository,
            settings=self.settings,
            executor=self.executor,
            event_manager=self.event_manager,
        )

    def get_session(self, encounter_id: str) -> Optional[CombatSession]:
        """Rehydrated session for display, or None if it does not exist."""
        if encounter_id not in self.session_store:
            return None
        return self.load_session(encounter_id)

    def resolve_round(self, encounter_id: str, index: int) -> Optional[RoundResult]:
        """
        Resolve one round of an interactive encounter.

        Invalid requests (unknown encounter, resolved or out-of-order round)
        are logged as warnings and ignored.

        Returns:
            The resolved round, or None if the request was ignored
        """
        try:
            session = self.load_session(encounter_id)
            result = session.resolve_round(index)
        except InvalidStateError as e:
            self._emit_log(str(e), category="WARNING", level="WARNING")
            self.event_manager.process_events()
            return None

        if session.is_closed:
            self.session_store.delete(encounter_id)
        else:
            self.session_store.save(encounter_id, session.to_dict())

        self.event_manager.process_events()
        return result

    def resolve_all(self, encounter_id: str) -> Optional[CombatLog]:
        """Resolve every remaining round of an interactive encounter in order."""
        if encounter_id not in self.session_store:
            self._emit_log(f"No combat session for encounter {encounter_id}", category="WARNING", level="WARNING")
            self.event_manager.process_events()
            return None

        # Closed sessions leave the store
        while encounter_id in self.session_store:
            session = self.load_session(encounter_id)
            if self.resolve_round(encounter_id, session.next_round_index) is None:
                break
        return self.combat_logs.get(encounter_id)

    def abandon_combat(self, encounter_id: str) -> bool:
        """Drop an unfinished interactive encounter without side effects."""
        removed = self.session_store.delete(encounter_id)
        if removed:
            self._emit_log(f"Encounter {encounter_id} abandoned", category="SYSTEM")
            self.event_manager.process_events()
        return removed

    def active_encounters(self) -> list[str]:
        return self.session_store.encounter_ids()

    # ============== Queries ==============

    def get_battle_forecast(self, attacker_id: str, defender_id: str) -> Optional[BattleForecast]:
        """Forecast for display, or None if the attacker cannot reach the defender."""
        attacker = self._require(attacker_id)
        defender = self._require(defender_id)
        if not self.calculator.in_attack_range(attacker, defender):
            return None
        builder = SequenceBuilder(
            SkillQuery(self.settings.skill_keywords, self.settings.brave_keywords),
            self.settings.double_threshold,
        )
        return self.calculator.calculate_forecast(attacker, defender, sequence_builder=builder)

    def get_attackable_tiles(self, combatant_id: str) -> VectorArray:
        """Tiles the combatant's equipped weapon can hit from where it stands."""
        combatant = self._require(combatant_id)
        weapon = combatant.equipped_weapon
        if weapon is None or weapon.is_broken:
            return VectorArray()
        return self.calculator.calculate_attackable_tiles(combatant.position, weapon.weapon_range)

    def get_targets_in_range(self, attacker_id: str, candidate_ids: list[str]) -> list["Combatant"]:
        """Candidates the attacker can reach, in the order given."""
        attacker = self._require(attacker_id)
        candidates = [self._require(candidate_id) for candidate_id in candidate_ids]
        return self.calculator.targets_in_range(attacker, candidates)
