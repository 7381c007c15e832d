"""
Weapon durability.

Uses are consumed once per resolved action. A weapon with ``uses.max == 0``
never wears out. When finite uses reach 0 the weapon is broken: it is
unequipped and a WeaponBroken event is published.

All writes go through the combatant repository as absolute values computed
from the uses the weapon had when the encounter started.
"""
from typing import Optional, TYPE_CHECKING

from ...core.events import LogMessage, WeaponBroken

if TYPE_CHECKING:
    from ...core.data import CombatSide
    from ...core.events import EventManager
    from ..entities.combatant import Combatant
    from ..entities.items import Weapon
    from ..repository import CombatantRepository


class DurabilitySystem:
    """Consumes, repairs and queries weapon uses."""

    def __init__(self, repository: "CombatantRepository", event_manager: Optional["EventManager"] = None):
        self.repository = repository
        self.event_manager = event_manager

    def _emit_log(self, message: str, category: str = "DURABILITY", level: str = "INFO") -> None:
        if self.event_manager is None:
            return
        self.event_manager.publish(
            LogMessage(message=message, category=category, level=level, source="DurabilitySystem"),
            source="DurabilitySystem"
        )

    @staticmethod
    def remaining_uses(weapon: "Weapon", uses_before: int, uses_consumed: int) -> int:
        """Uses left after consuming from a starting value; unlimited weapons keep theirs."""
        if weapon.has_unlimited_uses:
            return uses_before
        return max(0, uses_before - uses_consumed)

    def consume_uses(
        self,
        owner: "Combatant",
        weapon: "Weapon",
        uses_consumed: int = 1,
        uses_before: Optional[int] = None,
        encounter_id: Optional[str] = None,
        side: Optional["CombatSide"] = None,
    ) -> bool:
        """
        Write the weapon's uses after consumption.

        Args:
            owner: Combatant owning the weapon
            weapon: Weapon whose uses are consumed
            uses_consumed: Number of resolved actions made with the weapon
            uses_before: Starting uses to count down from (defaults to current)
            encounter_id: Encounter the consumption belongs to, for events
            side: Side the owner fought on, for events

        Returns:
            True if the weapon broke as a result
        """
        if weapon.has_unlimited_uses or uses_consumed <= 0:
            return False

        start = weapon.uses.value if uses_before is None else uses_before
        new_uses = self.remaining_uses(weapon, start, uses_consumed)
        self.repository.set_weapon_uses(owner.combatant_id, weapon.item_id, new_uses)
        self._emit_log(f"{weapon.name} uses: {new_uses}/{weapon.uses.max}")

        if new_uses == 0:
            self.on_weapon_broken(owner, weapon, encounter_id, side)
            return True
        return False

    def on_weapon_broken(
        self,
        owner: "Combatant",
        weapon: "Weapon",
        encounter_id: Optional[str] = None,
        side: Optional["CombatSide"] = None,
    ) -> None:
        """Unequip a broken weapon and announce it."""
        self.repository.set_weapon_equipped(owner.combatant_id, weapon.item_id, False)
        self._emit_log(f"{owner.name}'s {weapon.name} is broken!", level="WARNING")
        if self.event_manager is not None:
            self.event_manager.publish(
                WeaponBroken(
                    encounter_id=encounter_id,
                    combatant_name=owner.name,
                    weapon_name=weapon.name,
                    side=side,
                ),
                source="DurabilitySystem"
            )

    def repair_weapon(self, owner: "Combatant", weapon: "Weapon", uses_restored: int) -> int:
        """Restore uses up to the maximum.

        Returns:
            The weapon's uses after the repair
        """
        if weapon.has_unlimited_uses:
            return weapon.uses.value
        new_uses = min(weapon.uses.max, weapon.uses.value + max(0, uses_restored))
        self.repository.set_weapon_uses(owner.combatant_id, weapon.item_id, new_uses)
        self._emit_log(f"{weapon.name} repaired! Uses: {new_uses}/{weapon.uses.max}")
        return new_uses

    @staticmethod
    def can_use_weapon(weapon: Optional["Weapon"]) -> bool:
        if weapon is None:
            return False
        return weapon.has_unlimited_uses or weapon.uses.value > 0

    @staticmethod
    def get_usable_weapons(combatant: "Combatant") -> list["Weapon"]:
        return [weapon for weapon in combatant.weapons if DurabilitySystem.can_use_weapon(weapon)]
