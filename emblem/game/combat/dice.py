"""
Auditable d100 rolls.

Every roll is kept with a label so a combat can be displayed and replayed
from its literal outcomes rather than just hit/miss booleans.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np


@dataclass(frozen=True)
class RollRecord:
    """One literal die outcome."""
    label: str
    value: int


class Dice:
    """d100 roller backed by a numpy Generator."""

    SIDES = 100

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.history: list[RollRecord] = []

    def roll_d100(self, label: str = "d100") -> int:
        """Roll an integer in [1, 100] and record it."""
        value = int(self.rng.integers(1, self.SIDES + 1))
        self.history.append(RollRecord(label, value))
        return value

    def clear_history(self) -> None:
        self.history.clear()


class ScriptedDice(Dice):
    """Dice returning a predetermined series of values.

    Used for replaying recorded combats and for deterministic tests. Running
    out of scripted values is an error rather than a silent fallback.
    """

    def __init__(self, values: Iterable[int]):
        super().__init__(seed=0)
        self._values = list(values)
        for value in self._values:
            if not 1 <= value <= self.SIDES:
                raise ValueError(f"Scripted roll out of range: {value}")

    @property
    def remaining(self) -> int:
        return len(self._values)

    def roll_d100(self, label: str = "d100") -> int:
        if not self._values:
            raise IndexError("No scripted rolls left")
        value = self._values.pop(0)
        self.history.append(RollRecord(label, value))
        return value
