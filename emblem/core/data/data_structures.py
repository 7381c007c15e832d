"""Unified data structures and conversion utilities.

This module provides the small value types shared by the combat engine:
grid positions, bounded stat values and weapon ranges.

Data Flow:
1. YAML / host documents -> Combatant + items (game logic)
2. Combatant -> BattleCalculator / SequenceBuilder (read only)
3. CombatSession -> repository writes (absolute values only)
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray

from ..errors import RangeParseError


@dataclass
class Vector2:
    """2D grid position.

    Uses (y, x) ordering for direct alignment with 2D array access patterns.
    First parameter is row (y-coordinate), second is column (x-coordinate).
    """
    y: int
    x: int

    def __add__(self, other: "Vector2") -> "Vector2":
        """Vector addition."""
        return Vector2(self.y + other.y, self.x + other.x)

    def __sub__(self, other: "Vector2") -> "Vector2":
        """Vector subtraction."""
        return Vector2(self.y - other.y, self.x - other.x)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector2):
            return False
        return self.y == other.y and self.x == other.x

    def __hash__(self) -> int:
        return hash((self.y, self.x))

    def __iter__(self):
        """Make Vector2 iterable for unpacking (y, x order)."""
        yield self.y
        yield self.x

    def __repr__(self) -> str:
        return f"Vector2({self.y}, {self.x})"

    def manhattan_distance_to(self, other: "Vector2") -> int:
        """Calculate Manhattan (tile) distance to another vector."""
        return abs(self.y - other.y) + abs(self.x - other.x)

    @classmethod
    def from_tuple(cls, coords: tuple[int, int]) -> "Vector2":
        """Create Vector2 from coordinate tuple (y, x order)."""
        return cls(int(coords[0]), int(coords[1]))

    @classmethod
    def from_list(cls, coords: list[int]) -> "Vector2":
        """Create Vector2 from coordinate list (y, x order)."""
        if len(coords) < 2:
            raise ValueError("List must contain at least 2 elements")
        return cls(int(coords[0]), int(coords[1]))

    def to_tuple(self) -> tuple[int, int]:
        """Convert to coordinate tuple (y, x order)."""
        return (self.y, self.x)

    def to_numpy(self) -> NDArray[np.int16]:
        """Convert to numpy array (y, x order)."""
        return np.array([self.y, self.x], dtype=np.int16)


class VectorArray:
    """Collection of grid positions backed by an (N, 2) numpy array.

    Used for batch range queries such as "every tile a weapon can reach".
    """

    def __init__(self, vectors: Optional[Union[list[Vector2], NDArray[np.int16]]] = None):
        if vectors is None:
            self.data: NDArray[np.int16] = np.empty((0, 2), dtype=np.int16)
        elif isinstance(vectors, np.ndarray):
            if vectors.ndim != 2 or vectors.shape[1] != 2:
                raise ValueError("Array must have shape (N, 2)")
            self.data = vectors.astype(np.int16)
        else:
            self.data = np.array([v.to_tuple() for v in vectors], dtype=np.int16).reshape(-1, 2)

    def __len__(self) -> int:
        return int(self.data.shape[0])

    def __iter__(self):
        for y, x in self.data:
            yield Vector2(int(y), int(x))

    def __contains__(self, vector: object) -> bool:
        if not isinstance(vector, Vector2) or len(self) == 0:
            return False
        return bool(np.any((self.data[:, 0] == vector.y) & (self.data[:, 1] == vector.x)))

    def manhattan_distances_to(self, target: Vector2) -> NDArray[np.int16]:
        """Manhattan distance from every position to a single target."""
        return np.abs(self.data - target.to_numpy()).sum(axis=1)

    def filter_by_distance(self, center: Vector2, min_distance: int, max_distance: int) -> "VectorArray":
        """Keep positions whose Manhattan distance to center is within bounds."""
        distances = self.manhattan_distances_to(center)
        mask = (distances >= min_distance) & (distances <= max_distance)
        return VectorArray(self.data[mask])

    def to_list(self) -> list[Vector2]:
        return list(self)


@dataclass
class StatValue:
    """A stat with a current value and a maximum."""
    value: int
    max: int

    def to_dict(self) -> dict[str, int]:
        return {"value": self.value, "max": self.max}

    @classmethod
    def from_data(cls, data: Union[int, dict, "StatValue"], default_max: Optional[int] = None) -> "StatValue":
        """Build a stat from a plain number or a ``{value, max}`` mapping."""
        if isinstance(data, StatValue):
            return cls(data.value, data.max)
        if isinstance(data, dict):
            value = int(data.get("value", 0))
            return cls(value, int(data.get("max", value if default_max is None else default_max)))
        value = int(data)
        return cls(value, value if default_max is None else default_max)


_RANGE_PATTERN = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+)\s*)?$")


@dataclass(frozen=True)
class WeaponRange:
    """Inclusive tile range of a weapon."""
    min: int
    max: int

    @classmethod
    def parse(cls, range_str: Union[str, int]) -> "WeaponRange":
        """Parse ``"N"`` or ``"N-M"``.

        Raises:
            RangeParseError: For anything else, including inverted ranges.
        """
        if isinstance(range_str, bool):
            raise RangeParseError(range_str)
        if isinstance(range_str, int):
            range_str = str(range_str)
        if not isinstance(range_str, str):
            raise RangeParseError(range_str)

        match = _RANGE_PATTERN.match(range_str)
        if not match:
            raise RangeParseError(range_str)

        low = int(match.group(1))
        high = int(match.group(2)) if match.group(2) is not None else low
        if high < low:
            raise RangeParseError(range_str)
        return cls(low, high)

    def covers(self, distance: int) -> bool:
        """Check whether a tile distance lies inside this range."""
        return self.min <= distance <= self.max

    def __str__(self) -> str:
        return str(self.min) if self.min == self.max else f"{self.min}-{self.max}"
