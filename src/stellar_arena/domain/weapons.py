"""Weapon definitions and the read-only weapon library."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType

from .enums import DamageType

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Weapon:
    """A ship-mounted weapon; only ``cooldown_remaining`` changes in battle."""

    name: str
    damage: float
    energy_cost: int
    ap_cost: int
    cooldown: int = 0
    cooldown_remaining: int = 0
    min_range: int = 0
    max_range: int = 6
    damage_type: DamageType = DamageType.ENERGY
    key: str | None = None

    def in_range(self, distance: int) -> bool:
        """Inclusive range band check."""
        return self.min_range <= distance <= self.max_range

    def range_gap(self, distance: int) -> int:
        """Hexes the target sits outside the band (0 when inside)."""
        if distance > self.max_range:
            return distance - self.max_range
        return max(0, self.min_range - distance)

    @property
    def optimal_range(self) -> int:
        return self.min_range + (self.max_range - self.min_range) // 2

    def tick_cooldown(self) -> None:
        if self.cooldown_remaining > 0:
            self.cooldown_remaining -= 1


@dataclass(frozen=True, slots=True)
class WeaponSpec:
    """Immutable library entry; :meth:`build` yields a fresh mutable weapon."""

    key: str
    name: str
    damage: float
    energy_cost: int
    ap_cost: int
    cooldown: int
    min_range: int
    max_range: int
    damage_type: DamageType

    def build(self) -> Weapon:
        return Weapon(
            name=self.name,
            damage=self.damage,
            energy_cost=self.energy_cost,
            ap_cost=self.ap_cost,
            cooldown=self.cooldown,
            cooldown_remaining=0,
            min_range=self.min_range,
            max_range=self.max_range,
            damage_type=self.damage_type,
            key=self.key,
        )


_WEAPONS = (
    WeaponSpec("light_laser", "Light Laser", 20, 25, 1, 0, 0, 6, DamageType.ENERGY),
    WeaponSpec("pulse_cannon", "Pulse Cannon", 30, 35, 1, 0, 0, 6, DamageType.ENERGY),
    WeaponSpec("missiles", "Missiles", 55, 50, 1, 2, 2, 9, DamageType.EXPLOSIVE),
    WeaponSpec("heavy_cannon", "Heavy Cannon", 65, 60, 1, 1, 0, 7, DamageType.KINETIC),
    WeaponSpec("point_defense", "Point Defense", 15, 20, 0, 0, 0, 4, DamageType.ENERGY),
    WeaponSpec("ion_disruptor", "Ion Disruptor", 40, 30, 1, 2, 1, 5, DamageType.EMP),
)

WEAPON_LIBRARY: MappingProxyType[str, WeaponSpec] = MappingProxyType(
    {spec.key: spec for spec in _WEAPONS}
)


def create_weapon(key: str) -> Weapon | None:
    """Return a fresh weapon for ``key`` or None (with a warning) if unknown."""

    spec = WEAPON_LIBRARY.get(key)
    if spec is None:
        logger.warning("Unknown weapon key %r skipped", key)
        return None
    return spec.build()


def create_weapons(keys: list[str] | tuple[str, ...]) -> list[Weapon]:
    """Build a loadout, skipping unknown keys."""

    weapons = []
    for key in keys:
        weapon = create_weapon(key)
        if weapon is not None:
            weapons.append(weapon)
    return weapons
