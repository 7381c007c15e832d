#!/usr/bin/env python3
"""
Demo runner for the Emblem combat engine.

Loads a YAML scenario, runs every encounter it defines and prints the
combat log. Interactive encounters are stepped one round at a time.
"""

import argparse

from emblem.core.config import CombatConfigLoader
from emblem.core.data import ResolutionMode
from emblem.core.errors import EmblemError
from emblem.core.events import EventManager
from emblem.game.combat import Dice
from emblem.game.managers import CombatManager, LogManager, LogCategory
from emblem.game.scenarios import ScenarioLoader


def print_forecast(manager: CombatManager, attacker_id: str, defender_id: str) -> None:
    forecast = manager.get_battle_forecast(attacker_id, defender_id)
    if forecast is None:
        print("  (out of range, no forecast)")
        return
    for side in (forecast.attacker, forecast.defender):
        doubles = " x2" if side.doubles else ""
        print(f"  {side.name:<10} {side.weapon_name or '-':<12} HP {side.hp:>2} -> {side.projected_hp:>2}  "
              f"Hit {side.hit:>3}  Dmg {side.damage:>2}{doubles}  Crit {side.crit:>3}")


def main():
    parser = argparse.ArgumentParser(description="Run the encounters of a combat scenario")
    parser.add_argument("--scenario", default="assets/scenarios/border_skirmish.yaml",
                        help="Scenario YAML file")
    parser.add_argument("--config", default=None, help="Combat settings YAML file")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the dice")
    parser.add_argument("--mode", choices=[mode.value for mode in ResolutionMode], default=None,
                        help="Override the resolution mode of every encounter")
    parser.add_argument("--save-log", action="store_true", help="Write the log to logs/")
    args = parser.parse_args()

    config_loader = CombatConfigLoader(args.config)
    config_loader.load_config()

    scenario = ScenarioLoader.load_from_file(args.scenario)
    repository = scenario.build_repository()

    event_manager = EventManager()
    log_manager = LogManager(event_manager)
    manager = CombatManager(repository, event_manager, config_loader.settings, dice=Dice(args.seed))

    print(f"=== {scenario.name} ===")
    for encounter in scenario.encounters:
        mode = ResolutionMode(args.mode) if args.mode else encounter.mode
        print(f"\n--- {encounter.encounter_id} ---")
        print_forecast(manager, encounter.attacker_id, encounter.defender_id)

        try:
            session = manager.start_combat(
                encounter.attacker_id,
                encounter.defender_id,
                encounter_id=encounter.encounter_id,
                mode=mode,
            )
        except EmblemError as e:
            print(f"  Cannot start combat: {e}")
            continue

        while encounter.encounter_id in manager.active_encounters():
            index = manager.get_session(encounter.encounter_id).next_round_index
            print(f"  > confirming round {index + 1} of {len(session.rounds)}")
            manager.resolve_round(encounter.encounter_id, index)

        combat_log = manager.combat_logs.get(encounter.encounter_id)
        if combat_log is not None:
            for line in combat_log.format_lines():
                print(line)

    warnings = log_manager.get_messages(categories={LogCategory.WARNING, LogCategory.ERROR})
    if warnings:
        print("\nWarnings:")
        for entry in warnings:
            print(f"  {entry.format()}")

    if args.save_log:
        path = log_manager.save_log_to_file()
        if path is not None:
            print(f"\nLog saved to {path}")


if __name__ == "__main__":
    main()
