"""
YAML scenario loading.

A scenario file lists combatants (stats, position, class, weapons, skills)
and the encounters to run between them:

    name: Border Skirmish
    combatants:
      - id: eirika
        name: Eirika
        position: [2, 3]
        class: {name: Lord, class_type: infantry}
        stats: {hp: 20, str: 7, skl: 9}
        weapons:
          - {name: Rapier, weapon_type: sword, might: 7, equipped: true}
        skills:
          - {name: Vantage}
    encounters:
      - {id: opening, attacker: eirika, defender: bandit, mode: interactive}
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ...core.config import parse_resolution_mode
from ...core.data import ResolutionMode, Vector2
from ..entities.combatant import Combatant, StatBlock
from ..entities.items import Item, item_from_dict
from ..repository import InMemoryCombatantRepository


@dataclass
class EncounterDefinition:
    """An encounter to run between two scenario combatants."""
    encounter_id: str
    attacker_id: str
    defender_id: str
    mode: Optional[ResolutionMode] = None


@dataclass
class Scenario:
    """Combatants and encounters loaded from a scenario file."""
    name: str
    description: str = ""
    combatants: list[Combatant] = field(default_factory=list)
    encounters: list[EncounterDefinition] = field(default_factory=list)

    def get_combatant(self, combatant_id: str) -> Optional[Combatant]:
        return next((c for c in self.combatants if c.combatant_id == combatant_id), None)

    def build_repository(self) -> InMemoryCombatantRepository:
        return InMemoryCombatantRepository(self.combatants)


class ScenarioLoader:
    """Handles loading scenarios from YAML files."""

    @staticmethod
    def load_from_file(file_path: Union[str, Path]) -> Scenario:
        """
        Load a scenario from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not valid YAML or misses required fields
        """
        path = Path(file_path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Scenario file not found: {file_path}") from None
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML scenario: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Scenario file {path.name} must contain a mapping")
        return ScenarioLoader.parse_scenario(data, default_name=path.stem)

    @staticmethod
    def parse_scenario(data: dict[str, Any], default_name: str = "Unnamed Scenario") -> Scenario:
        """Parse scenario data from a dictionary."""
        scenario = Scenario(
            name=data.get("name", default_name),
            description=data.get("description", ""),
        )

        for combatant_data in data.get("combatants", []) or []:
            scenario.combatants.append(ScenarioLoader._parse_combatant(combatant_data))

        known_ids = {c.combatant_id for c in scenario.combatants}
        for index, encounter_data in enumerate(data.get("encounters", []) or []):
            encounter = ScenarioLoader._parse_encounter(encounter_data, index)
            for combatant_id in (encounter.attacker_id, encounter.defender_id):
                if combatant_id not in known_ids:
                    raise ValueError(
                        f"Encounter {encounter.encounter_id} references unknown combatant '{combatant_id}'"
                    )
            scenario.encounters.append(encounter)

        return scenario

    @staticmethod
    def _parse_combatant(data: dict[str, Any]) -> Combatant:
        if "name" not in data:
            raise ValueError(f"Combatant entry without a name: {data!r}")

        items: list[Item] = []
        class_data = data.get("class")
        if class_data:
            if isinstance(class_data, str):
                class_data = {"name": class_data}
            items.append(item_from_dict({"type": "class", **class_data}))
        for weapon_data in data.get("weapons", []) or []:
            items.append(item_from_dict({"type": "weapon", **weapon_data}))
        for skill_data in data.get("skills", []) or []:
            if isinstance(skill_data, str):
                skill_data = {"name": skill_data}
            items.append(item_from_dict({"type": "skill", **skill_data}))
        for consumable_data in data.get("items", []) or []:
            items.append(item_from_dict({"type": "item", **consumable_data}))

        position = data.get("position")
        combatant = Combatant(
            name=data["name"],
            stats=StatBlock.from_dict(data.get("stats", {}) or {}),
            position=Vector2.from_list(position) if position is not None else None,
            items=items,
            combatant_id=str(data.get("id", data["name"].lower())),
        )

        equipped = [weapon for weapon in combatant.weapons if weapon.equipped]
        if len(equipped) > 1:
            raise ValueError(f"{combatant.name} has more than one weapon equipped")
        return combatant

    @staticmethod
    def _parse_encounter(data: dict[str, Any], index: int) -> EncounterDefinition:
        try:
            attacker_id = str(data["attacker"])
            defender_id = str(data["defender"])
        except KeyError as e:
            raise ValueError(f"Encounter {index} is missing {e.args[0]!r}") from None

        mode = data.get("mode")
        return EncounterDefinition(
            encounter_id=str(data.get("id", f"encounter_{index + 1}")),
            attacker_id=attacker_id,
            defender_id=defender_id,
            mode=parse_resolution_mode(mode) if mode is not None else None,
        )
