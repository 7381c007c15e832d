"""
Unit tests for the combat settings loader.
"""

import pytest

from emblem.core.config import CombatConfigLoader, CombatSettings, parse_resolution_mode
from emblem.core.data import ResolutionMode
from emblem.core.errors import ConfigError
from emblem.game.combat import SkillQuery


def _write(tmp_path, text: str):
    path = tmp_path / "combat.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestResolutionMode:
    """Only auto and interactive are valid."""

    @pytest.mark.parametrize("value,expected", [
        ("auto", ResolutionMode.AUTO),
        ("interactive", ResolutionMode.INTERACTIVE),
        (ResolutionMode.AUTO, ResolutionMode.AUTO),
    ])
    def test_valid_modes(self, value, expected):
        assert parse_resolution_mode(value) is expected

    @pytest.mark.parametrize("value", ["manual", "", None, 1, "AUTO", " interactive "])
    def test_invalid_modes(self, value):
        with pytest.raises(ConfigError):
            parse_resolution_mode(value)


class TestCombatConfigLoader:
    """Test loading settings from YAML."""

    def test_project_config_loads(self):
        loader = CombatConfigLoader()
        assert loader.load_config()
        assert loader.settings.resolution_mode is ResolutionMode.AUTO
        assert loader.settings.double_threshold == 4
        assert "vantage" in loader.settings.skill_keywords["counter_priority"]

    def test_missing_file_keeps_defaults(self, tmp_path, capsys):
        loader = CombatConfigLoader(str(tmp_path / "missing.yaml"))

        assert not loader.load_config()
        assert loader.settings == CombatSettings()
        assert "not found" in capsys.readouterr().out

    def test_full_config(self, tmp_path):
        path = _write(tmp_path, """
combat:
  resolution_mode: interactive
  cancel_actions_on_weapon_break: true
  double_threshold: 5
skills:
  counter_priority: [Vantage, Ambush]
brave_weapons: brave
""")
        loader = CombatConfigLoader(path)
        assert loader.load_config()

        settings = loader.settings
        assert settings.resolution_mode is ResolutionMode.INTERACTIVE
        assert settings.cancel_actions_on_weapon_break
        assert settings.double_threshold == 5
        assert settings.skill_keywords["counter_priority"] == ("vantage", "ambush")
        # Flags not mentioned keep their defaults
        assert settings.skill_keywords["priority_attack"] == ("desperation",)
        assert settings.brave_keywords == ("brave",)

    def test_empty_file_uses_defaults(self, tmp_path):
        loader = CombatConfigLoader(_write(tmp_path, ""))
        assert loader.load_config()
        assert loader.settings == CombatSettings()

    def test_unknown_mode_raises(self, tmp_path):
        loader = CombatConfigLoader(_write(tmp_path, "combat:\n  resolution_mode: manual\n"))
        with pytest.raises(ConfigError):
            loader.load_config()

    def test_invalid_yaml_raises(self, tmp_path):
        loader = CombatConfigLoader(_write(tmp_path, "combat: [unclosed\n"))
        with pytest.raises(ConfigError):
            loader.load_config()

    @pytest.mark.parametrize("threshold", [-1, "4", True])
    def test_invalid_threshold_raises(self, threshold):
        with pytest.raises(ConfigError):
            CombatConfigLoader.parse_settings({"combat": {"double_threshold": threshold}})

    def test_unknown_skill_flag_is_ignored(self, capsys):
        settings = CombatConfigLoader.parse_settings({"skills": {"teleport": ["warp"]}})

        assert "teleport" not in settings.skill_keywords
        assert "Unknown skill flag" in capsys.readouterr().out

    def test_keywords_must_be_a_list(self):
        with pytest.raises(ConfigError):
            CombatConfigLoader.parse_settings({"skills": {"priority_attack": {"a": 1}}})

    def test_empty_brave_list_turns_brave_detection_off(self, make_combatant, make_weapon):
        settings = CombatConfigLoader.parse_settings({"brave_weapons": []})
        query = SkillQuery(settings.skill_keywords, settings.brave_keywords)
        unit = make_combatant(weapons=[make_weapon("Brave Sword")])

        assert settings.brave_keywords == ()
        assert not query.query_combat_flags(unit).brave_weapon

    def test_empty_skill_list_turns_flag_off(self, make_combatant):
        settings = CombatConfigLoader.parse_settings({"skills": {"counter_priority": []}})
        query = SkillQuery(settings.skill_keywords, settings.brave_keywords)
        unit = make_combatant(skills=("Vantage",))

        assert not query.query_combat_flags(unit).counter_priority
