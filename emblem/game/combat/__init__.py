"""Combat system components.

This package contains the combat resolution logic with clear separation of concerns:
- weapon_triangle.py: Weapon and magic triangle advantage
- skill_query.py: Combat flags derived from skills and the equipped weapon
- battle_calculator.py: Odds, damage, ranges and forecasts (read-only)
- sequence_builder.py: Ordering of attacks, counters and follow-ups
- round_executor.py: Rolling single actions
- durability.py: Weapon uses and breaking
- combat_session.py: Encounter state machine (auto and interactive)
"""

from .battle_calculator import BattleCalculator, BattleForecast, SideForecast
from .combat_log import CombatLog, SideSummary
from .combat_session import CombatSession
from .dice import Dice, RollRecord, ScriptedDice
from .durability import DurabilitySystem
from .round_executor import RoundExecutor, RoundOdds, RoundResult
from .sequence_builder import CombatAction, SequenceBuilder, SequencePlan
from .skill_query import CombatFlags, SkillQuery, query_combat_flags
from .weapon_triangle import TriangleResult, advantage

__all__ = [
    "BattleCalculator",
    "BattleForecast",
    "SideForecast",
    "CombatLog",
    "SideSummary",
    "CombatSession",
    "Dice",
    "RollRecord",
    "ScriptedDice",
    "DurabilitySystem",
    "RoundExecutor",
    "RoundOdds",
    "RoundResult",
    "CombatAction",
    "SequenceBuilder",
    "SequencePlan",
    "CombatFlags",
    "SkillQuery",
    "query_combat_flags",
    "TriangleResult",
    "advantage",
]
