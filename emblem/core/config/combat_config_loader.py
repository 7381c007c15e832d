"""
Configuration loader for combat settings.

This module handles loading and parsing of the YAML file that selects the
resolution mode and lists the skill/weapon name keywords that switch on
combat flags.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from ..data.game_enums import ResolutionMode
from ..errors import ConfigError


DEFAULT_SKILL_KEYWORDS: dict[str, tuple[str, ...]] = {
    "priority_attack": ("desperation",),
    "counter_priority": ("vantage", "ventaja"),
    "guaranteed_followup": ("quick riposte", "contracorta"),
    "prevents_counter": ("windsweep", "sin contraataque"),
    "prevents_followup": ("wary fighter",),
}

DEFAULT_BRAVE_KEYWORDS: tuple[str, ...] = ("brave", "valor")


@dataclass(frozen=True)
class CombatSettings:
    """Resolved combat settings."""
    resolution_mode: ResolutionMode = ResolutionMode.AUTO
    cancel_actions_on_weapon_break: bool = False
    double_threshold: int = 4
    skill_keywords: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_SKILL_KEYWORDS)
    )
    brave_keywords: tuple[str, ...] = DEFAULT_BRAVE_KEYWORDS


def parse_resolution_mode(value: Any) -> ResolutionMode:
    """Map a setting value onto a resolution mode.

    Only ``auto`` and ``interactive`` are recognized.

    Raises:
        ConfigError: For any other value.
    """
    if isinstance(value, ResolutionMode):
        return value
    try:
        return ResolutionMode(value)
    except ValueError:
        valid = ", ".join(mode.value for mode in ResolutionMode)
        raise ConfigError(f"Unknown resolution mode {value!r} (valid: {valid})") from None


class CombatConfigLoader:
    """Loads combat settings from a YAML file."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or "assets/config/combat.yaml"
        self._config: dict[str, Any] = {}
        self._settings = CombatSettings()

    @property
    def settings(self) -> CombatSettings:
        return self._settings

    def _resolve_path(self) -> Path:
        if os.path.isabs(self.config_path):
            return Path(self.config_path)
        # Relative paths are relative to the project root
        project_root = Path(__file__).parent.parent.parent.parent
        return project_root / self.config_path

    def load_config(self) -> bool:
        """
        Load configuration from the YAML file.

        A missing file keeps the built-in defaults.

        Returns:
            bool: True if config was loaded from disk

        Raises:
            ConfigError: If the file is unreadable YAML or holds invalid values
        """
        config_file = self._resolve_path()
        if not config_file.exists():
            print(f"Warning: Combat config file not found: {config_file}")
            self._settings = CombatSettings()
            return False

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse combat config {config_file}: {e}") from e

        self._settings = self.parse_settings(self._config)
        return True

    @staticmethod
    def parse_settings(config: dict[str, Any]) -> CombatSettings:
        """Build settings from an already-parsed mapping."""
        if not isinstance(config, dict):
            raise ConfigError("Combat config must be a mapping")

        combat_section = config.get('combat', {}) or {}
        mode = parse_resolution_mode(combat_section.get('resolution_mode', ResolutionMode.AUTO.value))

        threshold = combat_section.get('double_threshold', 4)
        if not isinstance(threshold, int) or isinstance(threshold, bool) or threshold < 0:
            raise ConfigError(f"double_threshold must be a non-negative integer, got {threshold!r}")

        skill_keywords = dict(DEFAULT_SKILL_KEYWORDS)
        for flag_name, keywords in (config.get('skills', {}) or {}).items():
            if flag_name not in DEFAULT_SKILL_KEYWORDS:
                print(f"Warning: Unknown skill flag '{flag_name}' in combat config")
                continue
            skill_keywords[flag_name] = CombatConfigLoader._keyword_tuple(flag_name, keywords)

        brave_keywords = DEFAULT_BRAVE_KEYWORDS
        if 'brave_weapons' in config:
            brave_keywords = CombatConfigLoader._keyword_tuple('brave_weapons', config['brave_weapons'])

        return CombatSettings(
            resolution_mode=mode,
            cancel_actions_on_weapon_break=bool(combat_section.get('cancel_actions_on_weapon_break', False)),
            double_threshold=threshold,
            skill_keywords=skill_keywords,
            brave_keywords=brave_keywords,
        )

    @staticmethod
    def _keyword_tuple(name: str, keywords: Any) -> tuple[str, ...]:
        if isinstance(keywords, str):
            keywords = [keywords]
        if not isinstance(keywords, list):
            raise ConfigError(f"Keywords for '{name}' must be a list of strings")
        return tuple(str(keyword).lower() for keyword in keywords)
