"""Event-driven combat events.

This module defines all events that managers can subscribe to.

Event Design Principles:
- Events are immutable dataclasses
- Combat events carry the encounter id they belong to
- Events use proper enums instead of magic strings
- Keep event types focused and avoid over-granular events
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..data.game_enums import CombatSide, ResolutionMode
    from ...game.combat.combat_log import CombatLog
    from ...game.combat.round_executor import RoundResult


class EventType(Enum):
    """Types of events that managers can subscribe to."""
    # Combat Events
    COMBAT_INITIATED = auto()
    ROUND_RESOLVED = auto()
    WEAPON_BROKEN = auto()
    COMBAT_FINALIZED = auto()

    # Logging Events
    LOG_MESSAGE = auto()
    DEBUG_MESSAGE = auto()

    # System Events
    LOG_SAVE_REQUESTED = auto()


@dataclass(frozen=True)
class GameEvent(ABC):
    """Base class for all events."""
    event_type: EventType = field(init=False)


@dataclass(frozen=True)
class CombatInitiated(GameEvent):
    """Event emitted when an encounter has been sequenced."""
    encounter_id: str
    attacker_name: str
    defender_name: str
    mode: "ResolutionMode"
    action_count: int

    def __post_init__(self):
        # Set event_type since dataclass frozen=True prevents normal assignment
        object.__setattr__(self, 'event_type', EventType.COMBAT_INITIATED)


@dataclass(frozen=True)
class RoundResolved(GameEvent):
    """Event emitted after a single action of an encounter is resolved."""
    encounter_id: str
    index: int
    result: "RoundResult"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ROUND_RESOLVED)


@dataclass(frozen=True)
class WeaponBroken(GameEvent):
    """Event emitted when a weapon runs out of uses and is unequipped."""
    encounter_id: Optional[str]
    combatant_name: str
    weapon_name: str
    side: Optional["CombatSide"] = None

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.WEAPON_BROKEN)


@dataclass(frozen=True)
class CombatFinalized(GameEvent):
    """Event emitted once final results were written to the document store."""
    encounter_id: str
    combat_log: "CombatLog"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.COMBAT_FINALIZED)


# Logging Events
@dataclass(frozen=True)
class LogMessage(GameEvent):
    """Event emitted when a log message is created."""
    message: str
    category: str
    level: str
    source: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOG_MESSAGE)


@dataclass(frozen=True)
class DebugMessage(GameEvent):
    """Event emitted for debug-specific messages."""
    message: str
    source: str
    context: Optional[dict] = None

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.DEBUG_MESSAGE)


@dataclass(frozen=True)
class LogSaveRequested(GameEvent):
    """Event emitted when the log should be written to disk."""

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOG_SAVE_REQUESTED)
