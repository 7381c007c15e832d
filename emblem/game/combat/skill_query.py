"""
Skill query for combat-affecting flags.

Flags are detected by case-insensitive substring match on skill names (and
on the equipped weapon's name for brave weapons). A skill may also carry an
explicit tag named after the flag, which is checked first.
"""
from dataclasses import dataclass, fields
from typing import Optional, TYPE_CHECKING

from ...core.config import DEFAULT_BRAVE_KEYWORDS, DEFAULT_SKILL_KEYWORDS

if TYPE_CHECKING:
    from ..entities.combatant import Combatant


@dataclass(frozen=True)
class CombatFlags:
    """Combat-affecting flags of one combatant."""
    priority_attack: bool = False        # Desperation
    counter_priority: bool = False       # Vantage
    guaranteed_followup: bool = False    # Quick Riposte
    prevents_counter: bool = False       # Windsweep
    prevents_followup: bool = False      # Wary Fighter
    brave_weapon: bool = False

    def active(self) -> list[str]:
        """Names of the flags that are set."""
        return [f.name for f in fields(self) if getattr(self, f.name)]


class SkillQuery:
    """Scans a combatant's skills and equipped weapon for combat flags."""

    def __init__(
        self,
        skill_keywords: Optional[dict[str, tuple[str, ...]]] = None,
        brave_keywords: Optional[tuple[str, ...]] = None,
    ):
        self.skill_keywords = dict(DEFAULT_SKILL_KEYWORDS if skill_keywords is None else skill_keywords)
        self.brave_keywords = tuple(DEFAULT_BRAVE_KEYWORDS if brave_keywords is None else brave_keywords)

    def query_combat_flags(self, combatant: "Combatant") -> CombatFlags:
        found: dict[str, bool] = {}

        for skill in combatant.skills:
            skill_name = skill.name.lower()
            for flag_name, keywords in self.skill_keywords.items():
                if flag_name in skill.tags or any(keyword in skill_name for keyword in keywords):
                    found[flag_name] = True

        weapon = combatant.equipped_weapon
        if weapon is not None:
            weapon_name = weapon.name.lower()
            if any(keyword in weapon_name for keyword in self.brave_keywords):
                found["brave_weapon"] = True

        return CombatFlags(**found)


_default_query = SkillQuery()


def query_combat_flags(combatant: "Combatant") -> CombatFlags:
    """Query flags with the default keyword table."""
    return _default_query.query_combat_flags(combatant)
