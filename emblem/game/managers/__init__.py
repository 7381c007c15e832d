"""Manager systems for combat coordination.

This package contains the manager classes that coordinate encounters and
logging through the event-driven architecture.
"""

from .combat_manager import CombatManager
from .log_manager import LogManager, LogLevel, LogCategory, LogEntry

__all__ = [
    "CombatManager",
    "LogManager",
    "LogLevel",
    "LogCategory",
    "LogEntry",
]
