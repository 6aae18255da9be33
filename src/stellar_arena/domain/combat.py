"""Damage resolution and line-of-sight rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stellar_arena.utils.hex_math import hex_distance, hex_line

from .enums import DamageType
from .models import AttackData, DamageResult, TargetingInfo
from .rules_config import DEFAULT_RULES, RulesConfig

if TYPE_CHECKING:
    from .grid import Grid
    from .ship import Ship
    from .weapons import Weapon


def damage_multiplier(damage_type: DamageType, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Multiplier applied to raw attack damage by damage type."""

    if damage_type is DamageType.KINETIC:
        return rules.damage.kinetic_multiplier
    if damage_type is DamageType.EXPLOSIVE:
        return rules.damage.explosive_multiplier
    return rules.damage.energy_multiplier


def calculate_damage(attack: AttackData, rules: RulesConfig = DEFAULT_RULES) -> DamageResult:
    """Apply an attack to its target.

    EMP attacks drain target energy by the raw damage and never touch shield
    or hull. Everything else is scaled by its type multiplier and handed to
    :meth:`Ship.take_damage`.
    """

    target = attack.target
    damage_type = attack.damage_type

    if damage_type is DamageType.EMP:
        drained = min(target.energy, attack.damage)
        target.energy -= drained
        return DamageResult(
            damage_type=damage_type,
            energy_damage=drained,
            destroyed=target.is_destroyed,
        )

    final_damage = attack.damage * damage_multiplier(damage_type, rules)
    report = target.take_damage(final_damage, damage_type, rules)
    return DamageResult(
        damage_type=damage_type,
        total_damage=final_damage,
        shield_damage=report.shield_damage,
        hull_damage=report.hull_damage,
        destroyed=report.destroyed,
    )


def has_line_of_sight(attacker: Ship, target: Ship, grid: Grid) -> bool:
    """True unless a hex strictly between the two ships is blocked."""

    line = hex_line(attacker.position, target.position)
    return not any(grid.is_blocked(position) for position in line[1:-1])


def get_targeting_info(attacker: Ship, target: Ship, weapon: Weapon) -> TargetingInfo:
    """Fire-control readout for UIs."""

    distance = hex_distance(attacker.position, target.position)
    return TargetingInfo(
        distance=distance,
        in_range=weapon.in_range(distance),
        has_energy=attacker.energy >= weapon.energy_cost,
        has_ap=attacker.action_points >= weapon.ap_cost,
        not_on_cooldown=weapon.cooldown_remaining == 0,
    )
