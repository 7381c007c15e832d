"""Scenario loading from YAML files."""

from .scenario_loader import EncounterDefinition, Scenario, ScenarioLoader

__all__ = [
    "EncounterDefinition",
    "Scenario",
    "ScenarioLoader",
]
