"""
Unit tests for CombatManager.

Tests encounter orchestration through the manager: auto and interactive
encounters, warnings for invalid steps and the read-only queries.
"""

import pytest

from emblem.core.config import CombatSettings
from emblem.core.data import ResolutionMode, SessionState, Vector2
from emblem.core.errors import InvalidStateError, PreconditionError
from emblem.game.combat import ScriptedDice
from emblem.game.managers import CombatManager
from emblem.game.repository import SessionStore

HIT = [50, 99]
MISS = [99]


@pytest.fixture
def make_manager(repository, event_manager, log_manager):
    """Factory for a manager over the duelists with scripted rolls."""
    def _make(rolls=(), settings=None):
        return CombatManager(repository, event_manager, settings=settings,
                             session_store=SessionStore(), dice=ScriptedDice(list(rolls)))
    return _make


class TestAutoEncounters:
    """AUTO encounters close within start_combat."""

    def test_start_auto_combat(self, make_manager, repository):
        manager = make_manager(HIT + HIT)
        session = manager.start_combat("attacker", "defender", encounter_id="duel")

        assert session.state is SessionState.CLOSED
        assert repository.get_combatant("defender").hp == 9
        assert repository.get_combatant("attacker").hp == 12
        assert "duel" in manager.combat_logs
        assert manager.active_encounters() == []

    def test_generated_encounter_id(self, make_manager):
        session = make_manager(MISS + MISS).start_combat("attacker", "defender")
        assert session.encounter_id

    def test_battle_lines_are_logged(self, make_manager, log_manager):
        make_manager(HIT + MISS).start_combat("attacker", "defender", encounter_id="duel")

        texts = [entry.text for entry in log_manager.get_messages()]
        assert any("Attacker hits Defender for 11" in text for text in texts)
        assert any("Defender misses Attacker" in text for text in texts)

    def test_precondition_error_propagates(self, make_manager, repository):
        repository.get_combatant("attacker").unequip(repository.get_combatant("attacker").equipped_weapon.item_id)
        with pytest.raises(PreconditionError):
            make_manager().start_combat("attacker", "defender")

    def test_unknown_combatant(self, make_manager):
        with pytest.raises(InvalidStateError):
            make_manager().start_combat("attacker", "nobody")


class TestInteractiveEncounters:
    """INTERACTIVE encounters persist between steps."""

    def test_step_through(self, make_manager, repository):
        manager = make_manager(HIT + HIT)
        session = manager.start_combat("attacker", "defender", encounter_id="duel",
                                       mode=ResolutionMode.INTERACTIVE)

        assert session.state is SessionState.RESOLVING
        assert manager.active_encounters() == ["duel"]

        first = manager.resolve_round("duel", 0)
        assert first.damage == 11
        assert repository.get_combatant("defender").hp == 20
        assert manager.get_session("duel").next_round_index == 1

        manager.resolve_round("duel", 1)
        assert manager.active_encounters() == []
        assert manager.get_session("duel") is None
        assert repository.get_combatant("defender").hp == 9
        assert repository.get_combatant("attacker").hp == 12

    def test_configured_mode_is_default(self, make_manager):
        manager = make_manager(settings=CombatSettings(resolution_mode=ResolutionMode.INTERACTIVE))
        session = manager.start_combat("attacker", "defender", encounter_id="duel")
        assert session.mode is ResolutionMode.INTERACTIVE

    def test_duplicate_encounter_id(self, make_manager):
        manager = make_manager()
        manager.start_combat("attacker", "defender", encounter_id="duel", mode=ResolutionMode.INTERACTIVE)
        with pytest.raises(InvalidStateError):
            manager.start_combat("attacker", "defender", encounter_id="duel", mode=ResolutionMode.INTERACTIVE)

    def test_invalid_steps_are_warnings(self, make_manager, log_manager):
        manager = make_manager(HIT)
        manager.start_combat("attacker", "defender", encounter_id="duel", mode=ResolutionMode.INTERACTIVE)
        manager.resolve_round("duel", 0)

        assert manager.resolve_round("duel", 0) is None
        assert manager.resolve_round("duel", 7) is None
        assert manager.resolve_round("missing", 0) is None

        warnings = [entry.text for entry in log_manager.get_warnings()]
        assert len(warnings) == 3
        assert any("already resolved" in text for text in warnings)
        assert any("missing" in text for text in warnings)
        # The stored session is untouched
        assert manager.get_session("duel").next_round_index == 1

    def test_resolve_all(self, make_manager, repository):
        manager = make_manager(HIT + MISS)
        manager.start_combat("attacker", "defender", encounter_id="duel", mode=ResolutionMode.INTERACTIVE)

        log = manager.resolve_all("duel")

        assert log is not None
        assert len(log.resolved_rounds) == 2
        assert repository.get_combatant("defender").hp == 9

    def test_resolve_all_unknown(self, make_manager, log_manager):
        assert make_manager().resolve_all("missing") is None
        assert log_manager.get_warnings()

    def test_abandon_has_no_side_effects(self, make_manager, repository):
        manager = make_manager(HIT)
        manager.start_combat("attacker", "defender", encounter_id="duel", mode=ResolutionMode.INTERACTIVE)
        manager.resolve_round("duel", 0)

        assert manager.abandon_combat("duel")
        assert not manager.abandon_combat("duel")
        assert repository.get_combatant("defender").hp == 20
        assert repository.get_combatant("attacker").equipped_weapon.uses.value == 45


class TestQueries:
    """Forecast and targeting queries never mutate combatants."""

    def test_forecast(self, make_manager):
        forecast = make_manager().get_battle_forecast("attacker", "defender")
        assert forecast.attacker.hit == 82
        assert forecast.defender.can_counter

    def test_forecast_out_of_range(self, make_manager, repository):
        repository.get_combatant("defender").position = Vector2(4, 4)
        assert make_manager().get_battle_forecast("attacker", "defender") is None

    def test_attackable_tiles(self, make_manager):
        tiles = make_manager().get_attackable_tiles("defender")
        assert len(tiles) == 3
        assert Vector2(0, 0) in tiles

    def test_targets_in_range(self, make_manager):
        targets = make_manager().get_targets_in_range("attacker", ["defender"])
        assert [target.name for target in targets] == ["Defender"]
