"""
Unit tests for YAML scenario loading.
"""

from pathlib import Path

import pytest

from emblem.core.data import ClassType, MagicType, ResolutionMode, Vector2, WeaponType
from emblem.core.errors import ConfigError
from emblem.game.scenarios import Scenario, ScenarioLoader

PROJECT_ROOT = Path(__file__).resolve().parents[3]
SAMPLE_SCENARIO = PROJECT_ROOT / "assets" / "scenarios" / "border_skirmish.yaml"


class TestSampleScenario:
    """The bundled scenario loads completely."""

    @pytest.fixture
    def scenario(self) -> Scenario:
        return ScenarioLoader.load_from_file(SAMPLE_SCENARIO)

    def test_combatants(self, scenario):
        assert scenario.name == "Border Skirmish"
        assert [c.combatant_id for c in scenario.combatants] == ["eirika", "seth", "lute", "bandit", "shaman"]

        eirika = scenario.get_combatant("eirika")
        assert eirika.position == Vector2(2, 3)
        assert eirika.class_type is ClassType.INFANTRY
        assert eirika.stats.skl.value == 9
        assert eirika.equipped_weapon.name == "Rapier"
        assert eirika.equipped_weapon.effective == [ClassType.CAVALRY, ClassType.ARMORED]
        assert [s.name for s in eirika.skills] == ["Vantage"]
        assert [i.name for i in eirika.consumables] == ["Vulnerary"]

    def test_tomes(self, scenario):
        flux = scenario.get_combatant("shaman").equipped_weapon
        assert flux.weapon_type is WeaponType.TOME
        assert flux.magic_type is MagicType.DARK
        assert flux.triangle_type == "dark"

    def test_encounters(self, scenario):
        modes = {e.encounter_id: e.mode for e in scenario.encounters}
        assert modes == {
            "ford_opening": ResolutionMode.AUTO,
            "lance_charge": ResolutionMode.INTERACTIVE,
            "spell_duel": ResolutionMode.AUTO,
        }

    def test_build_repository(self, scenario):
        repository = scenario.build_repository()
        assert len(repository) == 5
        assert repository.get_combatant("seth") is scenario.get_combatant("seth")


class TestParsing:
    """Parsing rules and errors."""

    def test_minimal_combatant(self):
        scenario = ScenarioLoader.parse_scenario({
            "combatants": [{"name": "Ross", "skills": ["Desperation"], "class": "Journeyman"}],
        })
        ross = scenario.combatants[0]

        assert scenario.name == "Unnamed Scenario"
        assert ross.combatant_id == "ross"
        assert ross.position == Vector2(0, 0)
        assert ross.equipped_weapon is None
        assert [s.name for s in ross.skills] == ["Desperation"]
        assert ross.class_type is ClassType.INFANTRY

    def test_default_encounter_id(self):
        scenario = ScenarioLoader.parse_scenario({
            "combatants": [{"name": "A"}, {"name": "B"}],
            "encounters": [{"attacker": "a", "defender": "b"}],
        })
        encounter = scenario.encounters[0]
        assert encounter.encounter_id == "encounter_1"
        assert encounter.mode is None

    def test_unknown_combatant_reference(self):
        with pytest.raises(ValueError, match="unknown combatant"):
            ScenarioLoader.parse_scenario({
                "combatants": [{"name": "A"}],
                "encounters": [{"attacker": "a", "defender": "ghost"}],
            })

    def test_missing_defender(self):
        with pytest.raises(ValueError, match="defender"):
            ScenarioLoader.parse_scenario({
                "combatants": [{"name": "A"}],
                "encounters": [{"attacker": "a"}],
            })

    def test_unknown_mode(self):
        with pytest.raises(ConfigError):
            ScenarioLoader.parse_scenario({
                "combatants": [{"name": "A"}, {"name": "B"}],
                "encounters": [{"attacker": "a", "defender": "b", "mode": "manual"}],
            })

    def test_two_equipped_weapons(self):
        with pytest.raises(ValueError, match="more than one"):
            ScenarioLoader.parse_scenario({
                "combatants": [{"name": "A", "weapons": [
                    {"name": "Iron Sword", "equipped": True},
                    {"name": "Steel Sword", "equipped": True},
                ]}],
            })

    def test_nameless_combatant(self):
        with pytest.raises(ValueError):
            ScenarioLoader.parse_scenario({"combatants": [{"id": "x"}]})


class TestLoadFromFile:
    """File level errors."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ScenarioLoader.load_from_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("combatants: [unclosed\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ScenarioLoader.load_from_file(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ScenarioLoader.load_from_file(path)

    def test_name_defaults_to_file_stem(self, tmp_path):
        path = tmp_path / "night_raid.yaml"
        path.write_text("combatants: []\n", encoding="utf-8")
        assert ScenarioLoader.load_from_file(path).name == "night_raid"
