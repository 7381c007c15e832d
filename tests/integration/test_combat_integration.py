"""
Integration tests for complete encounters.

Runs encounters from the bundled scenario through the CombatManager with
scripted dice and checks the final state of the repository, the combat log
and the messages collected by the LogManager.
"""

from pathlib import Path

import pytest

from emblem.core.data import CombatSide, ResolutionMode
from emblem.core.errors import PreconditionError
from emblem.core.events import EventManager
from emblem.game.combat import Dice, ScriptedDice
from emblem.game.managers import CombatManager, LogManager
from emblem.game.scenarios import ScenarioLoader

SAMPLE_SCENARIO = Path(__file__).resolve().parents[2] / "assets" / "scenarios" / "border_skirmish.yaml"


@pytest.fixture
def world():
    """Factory for a fresh repository, bus, log and manager over the sample scenario."""
    def _world(rolls):
        scenario = ScenarioLoader.load_from_file(SAMPLE_SCENARIO)
        repository = scenario.build_repository()
        event_manager = EventManager()
        log_manager = LogManager(event_manager)
        manager = CombatManager(repository, event_manager, dice=ScriptedDice(rolls))
        return repository, manager, log_manager
    return _world


class TestFordOpening:
    """Eirika attacks the Bandit, whose Wary Fighter stops her follow-up."""

    def test_ford_opening(self, world):
        # Eirika hits without a critical, the Bandit's counter misses
        repository, manager, log_manager = world([50, 99, 99])
        session = manager.start_combat("eirika", "bandit", encounter_id="ford_opening",
                                       mode=ResolutionMode.AUTO)

        assert [(r.side, r.kind.value) for r in session.rounds] == [
            (CombatSide.ATTACKER, "attack"),
            (CombatSide.DEFENDER, "counter"),
        ]
        assert repository.get_combatant("bandit").hp == 12
        assert repository.get_combatant("eirika").hp == 20

        log = manager.combat_logs["ford_opening"]
        assert log.winner is None
        assert log.attacker.uses_after == 39
        assert log.defender.uses_after == 44
        assert any("No one was defeated" in entry.text for entry in log_manager.get_messages())


class TestVantageEncounter:
    """The Bandit attacks Eirika, whose Vantage lets her strike first."""

    def test_vantage_counter_defeats_attacker(self, world):
        # Eirika's counter hits and crits, so the Bandit never swings
        repository, manager, log_manager = world([5, 10])
        session = manager.start_combat("bandit", "eirika", encounter_id="ambush",
                                       mode=ResolutionMode.AUTO)

        assert [(r.side, r.kind.value) for r in session.rounds] == [
            (CombatSide.DEFENDER, "counter"),
            (CombatSide.ATTACKER, "attack"),
        ]
        assert repository.get_combatant("bandit").hp == 0
        assert repository.get_combatant("eirika").hp == 20

        log = manager.combat_logs["ambush"]
        assert log.winner == "Eirika"
        assert log.rounds[1].skipped
        assert log.attacker.uses_after == 45
        assert log.defender.uses_after == 39
        assert any("Winner: Eirika" in entry.text for entry in log_manager.get_messages())


class TestBraveLanceBreaks:
    """Seth's two-use Brave Lance breaks during an interactive encounter."""

    def test_lance_charge(self, world):
        repository, manager, log_manager = world([50, 99, 50, 99])
        session = manager.start_combat("seth", "bandit", encounter_id="lance_charge",
                                       mode=ResolutionMode.INTERACTIVE)

        # The Bandit's Wary Fighter stops Seth's speed follow-up
        assert [r.kind.value for r in session.rounds] == ["attack", "brave", "counter"]

        manager.resolve_round("lance_charge", 0)
        seth = repository.get_combatant("seth")
        assert seth.equipped_weapon.uses.value == 2
        assert repository.get_combatant("bandit").hp == 22

        manager.resolve_round("lance_charge", 1)

        assert manager.active_encounters() == []
        assert repository.get_combatant("bandit").hp == 0
        lance = seth.weapons[0]
        assert lance.uses.value == 0
        assert seth.equipped_weapon is None
        assert any("Brave Lance is broken" in entry.text for entry in log_manager.get_warnings())

        log = manager.combat_logs["lance_charge"]
        assert log.attacker.weapon_broken
        assert log.rounds[2].skipped

    def test_broken_lance_cannot_start_again(self, world):
        repository, manager, _ = world([50, 99, 50, 99])
        manager.start_combat("seth", "bandit", encounter_id="first", mode=ResolutionMode.AUTO)

        with pytest.raises(PreconditionError):
            manager.start_combat("seth", "bandit", encounter_id="second")


class TestWholeScenario:
    """Every encounter of the scenario, in order, with seeded dice."""

    def test_all_encounters_finish(self):
        scenario = ScenarioLoader.load_from_file(SAMPLE_SCENARIO)
        repository = scenario.build_repository()
        event_manager = EventManager()
        LogManager(event_manager)
        manager = CombatManager(repository, event_manager, dice=Dice(seed=42))

        for encounter in scenario.encounters:
            combatants = (repository.get_combatant(encounter.attacker_id),
                          repository.get_combatant(encounter.defender_id))
            if not all(c.is_alive for c in combatants):
                continue
            manager.start_combat(encounter.attacker_id, encounter.defender_id,
                                 encounter_id=encounter.encounter_id, mode=encounter.mode)
            if encounter.encounter_id in manager.active_encounters():
                manager.resolve_all(encounter.encounter_id)
            assert encounter.encounter_id in manager.combat_logs

        assert manager.active_encounters() == []
        for combatant in repository:
            assert 0 <= combatant.hp <= combatant.hp_max
