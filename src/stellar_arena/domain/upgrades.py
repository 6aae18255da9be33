"""Post-battle ship upgrades.

Upgrades permanently modify a ship record; applied keys are tracked on
``ship.upgrades`` so persisted ships can be audited. The reward economy that
decides when upgrades are granted lives outside the combat core.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from .enums import UpgradeCategory, UpgradeKey

if TYPE_CHECKING:
    from stellar_arena.utils.rng import RandomSource

    from .ship import Ship

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UpgradeSpec:
    key: UpgradeKey
    name: str
    description: str
    category: UpgradeCategory
    apply: Callable[[Ship], None]


def _reinforced_barrel(ship: Ship) -> None:
    for weapon in ship.weapons:
        weapon.damage = math.floor(weapon.damage * 1.1)


def _efficient_capacitors(ship: Ship) -> None:
    for weapon in ship.weapons:
        weapon.energy_cost = max(1, math.floor(weapon.energy_cost * 0.8))


def _rapid_reloader(ship: Ship) -> None:
    for weapon in ship.weapons:
        weapon.cooldown = max(0, weapon.cooldown - 1)
        weapon.cooldown_remaining = min(weapon.cooldown_remaining, weapon.cooldown)


def _extended_range(ship: Ship) -> None:
    for weapon in ship.weapons:
        weapon.max_range += 2


def _reinforced_hull(ship: Ship) -> None:
    bonus = math.floor(ship.max_hull * 0.2)
    ship.max_hull += bonus
    ship.hull = min(ship.hull + bonus, ship.max_hull)


def _shield_booster(ship: Ship) -> None:
    bonus = math.floor(ship.max_shield * 0.3)
    ship.max_shield += bonus
    ship.shield = min(ship.shield + bonus, ship.max_shield)


def _reactive_armor(ship: Ship) -> None:
    ship.armor += 5


def _thruster_upgrade(ship: Ship) -> None:
    ship.max_action_points += 1
    ship.action_points += 1


def _improved_reactor(ship: Ship) -> None:
    ship.max_energy += 20
    ship.reactor_output += 10
    ship.energy = min(ship.energy + 20, ship.max_energy)


def _agile_maneuvers(ship: Ship) -> None:
    ship.max_speed += 1


def _advanced_sensors(ship: Ship) -> None:
    ship.sensors += 15


def _emergency_repair(ship: Ship) -> None:
    ship.hull = min(ship.hull + math.floor(ship.max_hull * 0.3), ship.max_hull)


_UPGRADES = (
    UpgradeSpec(
        UpgradeKey.REINFORCED_BARREL,
        "Reinforced Barrel",
        "+10% weapon damage",
        UpgradeCategory.WEAPON,
        _reinforced_barrel,
    ),
    UpgradeSpec(
        UpgradeKey.EFFICIENT_CAPACITORS,
        "Efficient Capacitors",
        "-20% weapon energy cost",
        UpgradeCategory.WEAPON,
        _efficient_capacitors,
    ),
    UpgradeSpec(
        UpgradeKey.RAPID_RELOADER,
        "Rapid Reloader",
        "-1 turn cooldown on all weapons",
        UpgradeCategory.WEAPON,
        _rapid_reloader,
    ),
    UpgradeSpec(
        UpgradeKey.EXTENDED_RANGE,
        "Extended Range",
        "+2 weapon range",
        UpgradeCategory.WEAPON,
        _extended_range,
    ),
    UpgradeSpec(
        UpgradeKey.REINFORCED_HULL,
        "Reinforced Hull",
        "+20% max hull",
        UpgradeCategory.DEFENSE,
        _reinforced_hull,
    ),
    UpgradeSpec(
        UpgradeKey.SHIELD_BOOSTER,
        "Shield Booster",
        "+30% max shields",
        UpgradeCategory.DEFENSE,
        _shield_booster,
    ),
    UpgradeSpec(
        UpgradeKey.REACTIVE_ARMOR,
        "Reactive Armor",
        "+5 armor",
        UpgradeCategory.DEFENSE,
        _reactive_armor,
    ),
    UpgradeSpec(
        UpgradeKey.THRUSTER_UPGRADE,
        "Thruster Upgrade",
        "+1 action point",
        UpgradeCategory.MOBILITY,
        _thruster_upgrade,
    ),
    UpgradeSpec(
        UpgradeKey.IMPROVED_REACTOR,
        "Improved Reactor",
        "+20 max energy & +10 reactor output",
        UpgradeCategory.MOBILITY,
        _improved_reactor,
    ),
    UpgradeSpec(
        UpgradeKey.AGILE_MANEUVERS,
        "Agile Maneuvers",
        "+1 speed",
        UpgradeCategory.MOBILITY,
        _agile_maneuvers,
    ),
    UpgradeSpec(
        UpgradeKey.ADVANCED_SENSORS,
        "Advanced Sensors",
        "+15 initiative roll",
        UpgradeCategory.UTILITY,
        _advanced_sensors,
    ),
    UpgradeSpec(
        UpgradeKey.EMERGENCY_REPAIR,
        "Emergency Repair",
        "Restore 30% hull",
        UpgradeCategory.UTILITY,
        _emergency_repair,
    ),
)

UPGRADE_LIBRARY: MappingProxyType[UpgradeKey, UpgradeSpec] = MappingProxyType(
    {spec.key: spec for spec in _UPGRADES}
)


def get_upgrade(key: str) -> UpgradeSpec | None:
    try:
        return UPGRADE_LIBRARY[UpgradeKey(key)]
    except ValueError:
        return None


def apply_upgrade(ship: Ship, key: str) -> bool:
    """Apply upgrade ``key`` to ``ship`` and record it.

    Returns:
        False (with a warning) when the key is unknown; the ship is untouched
    """

    spec = get_upgrade(key)
    if spec is None:
        logger.warning("Unknown upgrade key %r skipped for ship %s", key, ship.id)
        return False
    spec.apply(ship)
    ship.upgrades.append(spec.key.value)
    return True


def upgrade_choices(rng: RandomSource, count: int = 3) -> list[UpgradeSpec]:
    """Draw ``count`` distinct upgrades to offer."""

    keys = rng.sample(list(UPGRADE_LIBRARY), count)
    return [UPGRADE_LIBRARY[key] for key in keys]


def ship_upgrades(ship: Ship) -> list[UpgradeSpec]:
    """Library entries for the upgrades recorded on ``ship`` (unknown keys dropped)."""

    specs = []
    for key in ship.upgrades:
        spec = get_upgrade(key)
        if spec is not None:
            specs.append(spec)
    return specs
