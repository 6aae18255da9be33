"""Ship abilities: the read-only ability library and activation context.

Every ship gets its own :class:`Ability` instances built from an immutable
:class:`AbilitySpec`; only the cooldown counter is mutable. Effects receive
an explicit :class:`AbilityContext` carrying the grid and the optional
renderer/event sink, never ambient globals.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from stellar_arena.utils.hex_math import HexCoord, hex_distance, hex_neighbor, nearest_direction

from .enums import AbilityKey, CombatEventKind
from .events import CombatEvent
from .rules_config import DEFAULT_RULES, RulesConfig

if TYPE_CHECKING:
    from stellar_arena.interfaces.events import ICombatEventSink, IRenderer

    from .grid import Grid
    from .ship import Ship

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AbilityContext:
    """Everything an ability effect may touch besides its own ship."""

    ship: Ship
    grid: Grid | None = None
    renderer: IRenderer | None = None
    events: ICombatEventSink | None = None
    round_number: int = 0

    def add_effect(self, effect: str, position: HexCoord) -> None:
        """Forward a visual hook to the renderer; no-op without one."""
        if self.renderer is not None:
            self.renderer.add_effect(effect, position)

    def emit(self, event: CombatEvent) -> None:
        if self.events is not None:
            self.events.record(event)


AbilityCheck = Callable[[AbilityContext, RulesConfig], bool]
# Applies the ability once its costs have been paid
AbilityEffect = Callable[[AbilityContext, RulesConfig], bool]


@dataclass(frozen=True, slots=True)
class AbilitySpec:
    """Immutable ability definition."""

    key: AbilityKey
    name: str
    description: str
    energy_cost: int
    ap_cost: int
    cooldown: int
    effect: AbilityEffect
    requires_grid: bool = False
    precondition: AbilityCheck | None = None

    def is_available(self, context: AbilityContext, rules: RulesConfig = DEFAULT_RULES) -> bool:
        """Situational checks made before any resources are spent."""
        if self.requires_grid and context.grid is None:
            return False
        if self.precondition is None:
            return True
        return self.precondition(context, rules)


@dataclass(slots=True)
class Ability:
    """Per-ship ability instance."""

    spec: AbilitySpec
    cooldown_remaining: int = 0

    @property
    def key(self) -> AbilityKey:
        return self.spec.key

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def energy_cost(self) -> int:
        return self.spec.energy_cost

    @property
    def ap_cost(self) -> int:
        return self.spec.ap_cost

    @property
    def cooldown(self) -> int:
        return self.spec.cooldown

    @property
    def requires_grid(self) -> bool:
        return self.spec.requires_grid

    def tick_cooldown(self) -> None:
        if self.cooldown_remaining > 0:
            self.cooldown_remaining -= 1


# --- Effects --------------------------------------------------------------------


def _shield_surge(context: AbilityContext, rules: RulesConfig) -> bool:
    ship = context.ship
    boost = ship.max_shield * rules.abilities.shield_surge_fraction
    ship.shield = min(ship.max_shield, ship.shield + boost)
    context.add_effect("shield_surge", ship.position)
    return True


def _evasive_maneuver(context: AbilityContext, rules: RulesConfig) -> bool:
    context.ship.status_effects.evasive_charges += rules.abilities.evasive_charges
    context.add_effect("evasive_maneuver", context.ship.position)
    return True


def _weapon_overcharge(context: AbilityContext, rules: RulesConfig) -> bool:
    context.ship.status_effects.overcharge_shots += rules.abilities.overcharge_shots
    context.add_effect("weapon_overcharge", context.ship.position)
    return True


def _drift_heading(ship: Ship) -> int | None:
    return nearest_direction(ship.velocity.q, ship.velocity.r)


def _burst_path(context: AbilityContext, rules: RulesConfig) -> list[HexCoord]:
    grid = context.grid
    direction = _drift_heading(context.ship)
    if grid is None or direction is None:
        return []

    path: list[HexCoord] = []
    current = context.ship.position
    for _ in range(rules.abilities.burst_engines_hexes):
        step = hex_neighbor(current, direction)
        if not grid.is_valid_hex(step) or grid.is_blocked(step):
            break
        path.append(step)
        current = step
    return path


def _can_burst(context: AbilityContext, rules: RulesConfig) -> bool:
    return bool(_burst_path(context, rules))


def _burst_engines(context: AbilityContext, rules: RulesConfig) -> bool:
    ship = context.ship
    path = _burst_path(context, rules)
    if not path or context.grid is None:
        return False

    origin = ship.position
    context.grid.move_ship(ship, path[-1])

    # Boost along the unit vector of the current heading, then clamp.
    magnitude = ship.velocity.magnitude
    boost = rules.abilities.burst_engines_velocity_boost
    ship.velocity.q += ship.velocity.q / magnitude * boost
    ship.velocity.r += ship.velocity.r / magnitude * boost
    ship.clamp_velocity()

    context.add_effect("burst_engines", origin)
    context.emit(
        CombatEvent(
            kind=CombatEventKind.MOVEMENT,
            round_number=context.round_number,
            ship=ship.name,
            team=ship.team,
            hex_count=len(path),
        )
    )
    return True


def _emp_targets(context: AbilityContext, rules: RulesConfig) -> list[Ship]:
    if context.grid is None:
        return []
    ship = context.ship
    radius = rules.abilities.emp_burst_radius
    return [
        other
        for other in context.grid.get_ships_by_team(ship.team.opponent)
        if hex_distance(ship.position, other.position) <= radius
    ]


def _has_emp_targets(context: AbilityContext, rules: RulesConfig) -> bool:
    return bool(_emp_targets(context, rules))


def _emp_burst(context: AbilityContext, rules: RulesConfig) -> bool:
    ship = context.ship
    drain = rules.abilities.emp_burst_drain
    for target in _emp_targets(context, rules):
        drained = min(target.energy, drain)
        target.energy -= drained
        context.emit(
            CombatEvent(
                kind=CombatEventKind.EMP,
                round_number=context.round_number,
                ship=ship.name,
                team=ship.team,
                target=target.name,
                energy_damage=drained,
            )
        )
    context.add_effect("emp_burst", ship.position)
    return True


def _needs_repair(context: AbilityContext, rules: RulesConfig) -> bool:  # noqa: ARG001
    return context.ship.hull < context.ship.max_hull


def _emergency_repair(context: AbilityContext, rules: RulesConfig) -> bool:
    ship = context.ship
    repair = math.floor(ship.max_hull * rules.abilities.emergency_repair_fraction)
    ship.hull = min(ship.max_hull, ship.hull + repair)
    context.add_effect("emergency_repair", ship.position)
    return True


_ABILITIES = (
    AbilitySpec(
        key=AbilityKey.SHIELD_SURGE,
        name="Shield Surge",
        description="Restore 40% of maximum shields",
        energy_cost=30,
        ap_cost=1,
        cooldown=3,
        effect=_shield_surge,
    ),
    AbilitySpec(
        key=AbilityKey.EVASIVE_MANEUVER,
        name="Evasive Maneuver",
        description="Next incoming hit deals 30% less damage",
        energy_cost=20,
        ap_cost=1,
        cooldown=3,
        effect=_evasive_maneuver,
    ),
    AbilitySpec(
        key=AbilityKey.WEAPON_OVERCHARGE,
        name="Weapon Overcharge",
        description="Next weapon shot deals 25% more damage",
        energy_cost=25,
        ap_cost=1,
        cooldown=3,
        effect=_weapon_overcharge,
    ),
    AbilitySpec(
        key=AbilityKey.BURST_ENGINES,
        name="Burst Engines",
        description="Jump up to 2 hexes along the current drift heading",
        energy_cost=20,
        ap_cost=1,
        cooldown=3,
        effect=_burst_engines,
        requires_grid=True,
        precondition=_can_burst,
    ),
    AbilitySpec(
        key=AbilityKey.EMP_BURST,
        name="EMP Burst",
        description="Drain 30 energy from every opposing ship within 3 hexes",
        energy_cost=40,
        ap_cost=1,
        cooldown=4,
        effect=_emp_burst,
        requires_grid=True,
        precondition=_has_emp_targets,
    ),
    AbilitySpec(
        key=AbilityKey.EMERGENCY_REPAIR,
        name="Emergency Repair",
        description="Restore 25% of maximum hull",
        energy_cost=40,
        ap_cost=2,
        cooldown=4,
        effect=_emergency_repair,
        precondition=_needs_repair,
    ),
)

ABILITY_LIBRARY: MappingProxyType[AbilityKey, AbilitySpec] = MappingProxyType(
    {spec.key: spec for spec in _ABILITIES}
)


def create_ability(key: str, cooldown_remaining: int = 0) -> Ability | None:
    """Return a fresh ability for ``key`` or None (with a warning) if unknown."""

    try:
        ability_key = AbilityKey(key)
    except ValueError:
        logger.warning("Unknown ability key %r skipped", key)
        return None
    return Ability(spec=ABILITY_LIBRARY[ability_key], cooldown_remaining=cooldown_remaining)


def create_abilities(keys: list[str] | tuple[str, ...]) -> list[Ability]:
    abilities = []
    for key in keys:
        ability = create_ability(key)
        if ability is not None:
            abilities.append(ability)
    return abilities
