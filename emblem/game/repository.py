"""
Document-store port used by the combat core.

The combat core never owns combatant records. It reads them through a
:class:`CombatantRepository` and writes back only absolute values: HP,
weapon uses and the equipped flag. Absolute writes make a repeated finalize
step harmless.
"""
from abc import ABC, abstractmethod
import copy
from typing import Any, Iterator, Optional

from ..core.errors import InvalidStateError
from .entities.combatant import Combatant


class CombatantRepository(ABC):
    """Read/write port onto the host's combatant documents."""

    @abstractmethod
    def get_combatant(self, combatant_id: str) -> Optional[Combatant]:
        """Return the combatant with this id, or None."""

    @abstractmethod
    def set_hp(self, combatant_id: str, hp: int) -> None:
        """Set a combatant's current HP to an absolute value."""

    @abstractmethod
    def set_weapon_uses(self, combatant_id: str, weapon_id: str, uses: int) -> None:
        """Set a weapon's remaining uses to an absolute value."""

    @abstractmethod
    def set_weapon_equipped(self, combatant_id: str, weapon_id: str, equipped: bool) -> None:
        """Set or clear a weapon's equipped flag."""

    def require_combatant(self, combatant_id: str) -> Combatant:
        combatant = self.get_combatant(combatant_id)
        if combatant is None:
            raise InvalidStateError(f"Unknown combatant: {combatant_id}")
        return combatant


class InMemoryCombatantRepository(CombatantRepository):
    """Repository holding live :class:`Combatant` objects in a dict."""

    def __init__(self, combatants: Optional[list[Combatant]] = None):
        self._combatants: dict[str, Combatant] = {}
        for combatant in combatants or []:
            self.add(combatant)

    def __iter__(self) -> Iterator[Combatant]:
        return iter(self._combatants.values())

    def __len__(self) -> int:
        return len(self._combatants)

    def add(self, combatant: Combatant) -> None:
        self._combatants[combatant.combatant_id] = combatant

    def get_combatant(self, combatant_id: str) -> Optional[Combatant]:
        return self._combatants.get(combatant_id)

    def find_by_name(self, name: str) -> Optional[Combatant]:
        return next((c for c in self._combatants.values() if c.name == name), None)

    def set_hp(self, combatant_id: str, hp: int) -> None:
        self.require_combatant(combatant_id).hp = hp

    def set_weapon_uses(self, combatant_id: str, weapon_id: str, uses: int) -> None:
        weapon = self._require_weapon(combatant_id, weapon_id)
        if weapon.has_unlimited_uses:
            return
        weapon.uses.value = max(0, min(weapon.uses.max, int(uses)))

    def set_weapon_equipped(self, combatant_id: str, weapon_id: str, equipped: bool) -> None:
        combatant = self.require_combatant(combatant_id)
        self._require_weapon(combatant_id, weapon_id)
        if equipped:
            combatant.equip(weapon_id)
        else:
            combatant.unequip(weapon_id)

    def _require_weapon(self, combatant_id: str, weapon_id: str):
        weapon = self.require_combatant(combatant_id).get_weapon(weapon_id)
        if weapon is None:
            raise InvalidStateError(f"Combatant {combatant_id} has no weapon {weapon_id}")
        return weapon


class SessionStore:
    """Serialized combat sessions keyed by encounter id.

    Stored payloads are deep copies, so callers cannot mutate a persisted
    session except by saving it again.
    """

    def __init__(self):
        self._sessions: dict[str, dict[str, Any]] = {}

    def __contains__(self, encounter_id: str) -> bool:
        return encounter_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def save(self, encounter_id: str, data: dict[str, Any]) -> None:
        self._sessions[encounter_id] = copy.deepcopy(data)

    def load(self, encounter_id: str) -> Optional[dict[str, Any]]:
        data = self._sessions.get(encounter_id)
        return copy.deepcopy(data) if data is not None else None

    def delete(self, encounter_id: str) -> bool:
        return self._sessions.pop(encounter_id, None) is not None

    def encounter_ids(self) -> list[str]:
        return list(self._sessions)
