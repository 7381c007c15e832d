"""
Basic test fixtures for the combat engine test suite.

Provides factories for weapons and combatants plus the shared event bus,
repository and scripted dice used across the tests.
"""

import os
import sys
from typing import Optional

import pytest

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from emblem.core.data import ClassType, StatValue, Vector2, WeaponType
from emblem.core.events import EventManager
from emblem.game.combat import ScriptedDice
from emblem.game.entities import ClassItem, Combatant, Skill, StatBlock, Weapon
from emblem.game.managers import LogManager
from emblem.game.repository import InMemoryCombatantRepository


def _make_weapon(
    name: str = "Iron Sword",
    weapon_type: WeaponType = WeaponType.SWORD,
    might: int = 5,
    hit: int = 80,
    crit: int = 0,
    weight: int = 5,
    range: str = "1",
    uses: tuple[int, int] = (45, 45),
    equipped: bool = True,
    **kwargs,
) -> Weapon:
    return Weapon(
        name=name,
        weapon_type=weapon_type,
        might=might,
        hit=hit,
        crit=crit,
        weight=weight,
        range=range,
        uses=StatValue(*uses),
        equipped=equipped,
        **kwargs,
    )


def _make_combatant(
    name: str = "Unit",
    hp: int = 20,
    strength: int = 5,
    magic: int = 0,
    skill: int = 5,
    speed: int = 5,
    luck: int = 5,
    defense: int = 3,
    resistance: int = 0,
    position: tuple[int, int] = (0, 0),
    weapons: Optional[list[Weapon]] = None,
    skills: tuple[str, ...] = (),
    class_type: Optional[ClassType] = None,
    combatant_id: Optional[str] = None,
) -> Combatant:
    stats = StatBlock(
        hp=StatValue(hp, hp),
        str=StatValue(strength, 30),
        mag=StatValue(magic, 30),
        skl=StatValue(skill, 30),
        spd=StatValue(speed, 30),
        lck=StatValue(luck, 30),
        def_=StatValue(defense, 30),
        res=StatValue(resistance, 30),
    )
    items = list(weapons) if weapons is not None else [_make_weapon()]
    items.extend(Skill(name=skill_name) for skill_name in skills)
    if class_type is not None:
        items.append(ClassItem(name=class_type.value.title(), class_type=class_type))
    return Combatant(
        name=name,
        stats=stats,
        position=Vector2(*position),
        items=items,
        combatant_id=combatant_id or name.lower(),
    )


@pytest.fixture
def make_weapon():
    """Factory for weapons (equipped iron sword by default)."""
    return _make_weapon


@pytest.fixture
def make_combatant():
    """Factory for combatants (armed with an iron sword by default)."""
    return _make_combatant


@pytest.fixture
def event_manager():
    """Create an event manager for testing."""
    return EventManager(enable_debug_logging=False)


@pytest.fixture
def log_manager(event_manager):
    """Log manager subscribed to the test event manager."""
    return LogManager(event_manager)


@pytest.fixture
def scripted_dice():
    """Factory for dice that return predetermined rolls."""
    return ScriptedDice


@pytest.fixture
def duelists():
    """Two adjacent swordfighters that never double each other."""
    attacker = _make_combatant("Attacker", hp=20, strength=8, skill=6, speed=6, luck=4, defense=3,
                               position=(0, 0))
    defender = _make_combatant("Defender", hp=20, strength=6, skill=4, speed=5, luck=2, defense=2,
                               position=(0, 1))
    return attacker, defender


@pytest.fixture
def repository(duelists):
    """In-memory repository holding the duelists."""
    return InMemoryCombatantRepository(list(duelists))
