"""Combat configuration loading."""

from .combat_config_loader import (
    CombatConfigLoader,
    CombatSettings,
    parse_resolution_mode,
    DEFAULT_SKILL_KEYWORDS,
    DEFAULT_BRAVE_KEYWORDS,
)

__all__ = [
    "CombatConfigLoader",
    "CombatSettings",
    "parse_resolution_mode",
    "DEFAULT_SKILL_KEYWORDS",
    "DEFAULT_BRAVE_KEYWORDS",
]
