"""The ship entity: resources, actions, damage intake and presets.

A :class:`Ship` owns its turn-start regeneration, its end-of-turn drift and
every combat action. Illegal actions return ``False``/``None`` and leave the
ship unchanged; nothing here raises for gameplay reasons.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from stellar_arena.schemas.ship import (
    AbilityRecord,
    EnergyAllocationRecord,
    HexPosition,
    ShipConfig,
    ShipSnapshot,
    StatusEffectsRecord,
    VelocityRecord,
    WeaponRecord,
)
from stellar_arena.utils.hex_math import HexCoord, hex_distance

from .abilities import Ability, AbilityContext, create_abilities, create_ability
from .enums import AbilityKey, AIProfile, DamageType, ShipClass, Team
from .errors import InvalidShipRecordError
from .models import (
    AttackData,
    DamageReport,
    DriftResult,
    EnergyAllocation,
    StatusEffects,
    Velocity,
)
from .rules_config import DEFAULT_RULES, RulesConfig
from .upgrades import apply_upgrade
from .weapons import Weapon, create_weapons

if TYPE_CHECKING:
    from stellar_arena.utils.rng import RandomSource

    from .grid import Grid

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(slots=True, eq=False)
class Ship:
    """A combatant on the hex grid.

    Equality is identity: two ships with identical stats are still distinct
    combatants.
    """

    id: str
    name: str
    team: Team
    ship_class: ShipClass
    position: HexCoord
    max_hull: float
    hull: float
    max_shield: float
    shield: float
    armor: float
    max_energy: float
    energy: float
    reactor_output: float
    max_action_points: int
    action_points: int
    max_speed: float
    sensors: int
    energy_allocation: EnergyAllocation = field(default_factory=EnergyAllocation)
    velocity: Velocity = field(default_factory=Velocity)
    weapons: list[Weapon] = field(default_factory=list)
    abilities: list[Ability] = field(default_factory=list)
    status_effects: StatusEffects = field(default_factory=StatusEffects)
    ai_profile: AIProfile = AIProfile.STANDARD
    upgrades: list[str] = field(default_factory=list)
    initiative: int = 0
    is_destroyed: bool = False
    is_active: bool = False

    def __repr__(self) -> str:
        return f"Ship(id={self.id!r}, team={self.team.value}, position={self.position})"

    # --- Gauges -----------------------------------------------------------------

    @property
    def hull_ratio(self) -> float:
        return self.hull / self.max_hull if self.max_hull > 0 else 1.0

    @property
    def shield_ratio(self) -> float:
        return self.shield / self.max_shield if self.max_shield > 0 else 0.0

    def _allocation_fraction(self, points: int, rules: RulesConfig) -> float:
        return points / rules.ship.allocation_total

    # --- Turn lifecycle ---------------------------------------------------------

    def start_turn(self, rules: RulesConfig = DEFAULT_RULES) -> None:
        """Activate the ship and regenerate its per-turn resources."""

        self.is_active = True
        self.action_points = self.max_action_points
        self.energy = min(self.max_energy, self.energy + self.reactor_output)

        shield_fraction = self._allocation_fraction(self.energy_allocation.shields, rules)
        shield_regen = shield_fraction * self.reactor_output * rules.ship.shield_regen_factor
        self.shield = min(self.max_shield, self.shield + shield_regen)

        for weapon in self.weapons:
            weapon.tick_cooldown()
        for ability in self.abilities:
            ability.tick_cooldown()

        if self.status_effects.overcharge_shots > 0:
            self.status_effects.overcharge_shots -= 1

    def end_turn(
        self, grid: Grid | None = None, rules: RulesConfig = DEFAULT_RULES
    ) -> DriftResult | None:
        """Deactivate the ship and apply drift if it has momentum."""

        self.is_active = False
        if self.velocity.is_zero:
            return None
        return self.apply_drift(grid, rules)

    def apply_drift(
        self, grid: Grid | None = None, rules: RulesConfig = DEFAULT_RULES
    ) -> DriftResult:
        """Translate by the rounded velocity, then apply friction.

        Bounds and obstacles are not checked. When a grid is given it is kept
        in sync, and a drift onto another ship is cancelled so a hex never
        holds two ships.
        """

        origin = self.position
        drift_q = _round_half_up(self.velocity.q)
        drift_r = _round_half_up(self.velocity.r)
        result = DriftResult(origin=origin, destination=origin)

        if drift_q != 0 or drift_r != 0:
            destination = HexCoord(q=origin.q + drift_q, r=origin.r + drift_r)
            result.destination = destination
            # Deliberate departure from unchecked drift: occupied hexes cancel it
            occupant = grid.get_ship_at(destination) if grid is not None else None
            if occupant is not None and occupant is not self:
                logger.warning(
                    "Drift of %s onto %s cancelled: occupied by %s",
                    self.id,
                    destination,
                    occupant.id,
                )
                result.collided = True
            elif grid is not None and grid.get_ship_at(origin) is self:
                grid.move_ship(self, destination)
                result.moved = True
            else:
                self.position = destination
                result.moved = True

        friction = rules.movement.drift_friction
        threshold = rules.movement.drift_stop_threshold
        self.velocity.q *= friction
        self.velocity.r *= friction
        if abs(self.velocity.q) < threshold:
            self.velocity.q = 0.0
        if abs(self.velocity.r) < threshold:
            self.velocity.r = 0.0

        return result

    # --- Actions ----------------------------------------------------------------

    def set_energy_allocation(
        self,
        weapons: int,
        shields: int,
        engines: int,
        cost_ap: bool = True,
        rules: RulesConfig = DEFAULT_RULES,
    ) -> bool:
        """Re-split reactor power; costs AP when done during the ship's turn."""

        if min(weapons, shields, engines) < 0:
            return False
        if weapons + shields + engines != rules.ship.allocation_total:
            return False

        if cost_ap and self.is_active:
            cost = rules.ship.allocation_change_ap_cost
            if self.action_points < cost:
                return False
            self.action_points -= cost

        self.energy_allocation = EnergyAllocation(weapons=weapons, shields=shields, engines=engines)
        return True

    def move(self, path: list[HexCoord], grid: Grid, rules: RulesConfig = DEFAULT_RULES) -> bool:
        """Relocate along ``path`` (start excluded), paying one AP per hex."""

        if not path or self.is_destroyed:
            return False

        cost = len(path)
        if cost > self.action_points:
            return False

        destination = path[-1]
        occupant = grid.get_ship_at(destination)
        if occupant is not None and occupant is not self:
            return False

        grid.move_ship(self, destination)
        self.action_points -= cost

        engine_fraction = self._allocation_fraction(self.energy_allocation.engines, rules)
        gain = engine_fraction * rules.movement.velocity_gain_factor
        start = path[0]
        self.velocity.q += (destination.q - start.q) * gain
        self.velocity.r += (destination.r - start.r) * gain
        self.clamp_velocity()
        return True

    def clamp_velocity(self) -> None:
        speed = self.velocity.magnitude
        if speed > self.max_speed and speed > 0:
            self.velocity.q = self.velocity.q / speed * self.max_speed
            self.velocity.r = self.velocity.r / speed * self.max_speed

    def can_fire_weapon(self, weapon: Weapon, target: Ship) -> bool:
        if self.is_destroyed:
            return False
        if self.energy < weapon.energy_cost:
            return False
        if self.action_points < weapon.ap_cost:
            return False
        if weapon.cooldown_remaining > 0:
            return False
        return weapon.in_range(hex_distance(self.position, target.position))

    def fire_weapon(
        self, weapon_index: int, target: Ship, rules: RulesConfig = DEFAULT_RULES
    ) -> AttackData | None:
        """Discharge a weapon; returns the attack descriptor for the resolver."""

        if weapon_index < 0 or weapon_index >= len(self.weapons):
            return None

        weapon = self.weapons[weapon_index]
        if not self.can_fire_weapon(weapon, target):
            return None

        damage = weapon.damage * self._allocation_fraction(self.energy_allocation.weapons, rules)
        overcharged = self.status_effects.overcharge_shots > 0
        if overcharged:
            damage *= rules.ship.overcharge_multiplier
            self.status_effects.overcharge_shots -= 1

        self.energy -= weapon.energy_cost
        self.action_points -= weapon.ap_cost
        weapon.cooldown_remaining = weapon.cooldown

        return AttackData(
            weapon=weapon, damage=damage, attacker=self, target=target, overcharged=overcharged
        )

    def can_use_ability(self, ability: Ability) -> bool:
        if self.is_destroyed or not self.is_active:
            return False
        if self.energy < ability.energy_cost:
            return False
        if self.action_points < ability.ap_cost:
            return False
        return ability.cooldown_remaining == 0

    def find_ability(self, key: AbilityKey | str) -> int | None:
        """Index of the first ability with ``key``, or None."""

        for index, ability in enumerate(self.abilities):
            if ability.key == key:
                return index
        return None

    def use_ability(
        self, ability_index: int, context: AbilityContext, rules: RulesConfig = DEFAULT_RULES
    ) -> bool:
        """Activate an ability; resources are only spent when it can take effect."""

        if ability_index < 0 or ability_index >= len(self.abilities):
            return False

        ability = self.abilities[ability_index]
        if not self.can_use_ability(ability):
            return False
        if not ability.spec.is_available(context, rules):
            return False

        self.energy -= ability.energy_cost
        self.action_points -= ability.ap_cost
        ability.cooldown_remaining = ability.cooldown
        ability.spec.effect(context, rules)
        return True

    def take_damage(
        self,
        damage: float,
        damage_type: DamageType | None = None,
        rules: RulesConfig = DEFAULT_RULES,
    ) -> DamageReport:
        """Absorb incoming damage: evasion, then shields, then armored hull.

        Armor mitigates hull damage to ``max(1, remaining - armor * 0.5)`` but
        never above the damage that got past the shields.
        """

        report = DamageReport(destroyed=self.is_destroyed)
        if self.is_destroyed or damage <= 0:
            return report

        incoming = damage
        if self.status_effects.evasive_charges > 0:
            incoming *= rules.ship.evasive_multiplier
            self.status_effects.evasive_charges -= 1
            report.evaded = True

        shield_damage = min(self.shield, incoming)
        self.shield -= shield_damage
        remaining = incoming - shield_damage

        hull_damage = 0.0
        if remaining > 0:
            mitigated = remaining - self.armor * rules.ship.armor_mitigation_factor
            hull_damage = min(remaining, max(rules.ship.minimum_hull_damage, mitigated))
            hull_damage = min(hull_damage, self.hull)
            self.hull -= hull_damage

        if self.hull <= 0:
            self.hull = 0
            self.is_destroyed = True

        report.shield_damage = shield_damage
        report.hull_damage = hull_damage
        report.destroyed = self.is_destroyed
        logger.debug(
            "%s took %.1f shield / %.1f hull damage (%s)",
            self.id,
            shield_damage,
            hull_damage,
            damage_type or "untyped",
        )
        return report

    def roll_initiative(self, rng: RandomSource, rules: RulesConfig = DEFAULT_RULES) -> int:
        self.initiative = self.sensors + rng.randrange(rules.ship.initiative_die)
        return self.initiative

    # --- Serialization ----------------------------------------------------------

    def to_snapshot(self) -> ShipSnapshot:
        return ShipSnapshot(
            id=self.id,
            name=self.name,
            position=HexPosition(q=self.position.q, r=self.position.r),
            team=self.team,
            ship_class=self.ship_class,
            hull=self.hull,
            max_hull=self.max_hull,
            shield=self.shield,
            max_shield=self.max_shield,
            armor=self.armor,
            energy=self.energy,
            max_energy=self.max_energy,
            reactor_output=self.reactor_output,
            energy_allocation=EnergyAllocationRecord(
                weapons=self.energy_allocation.weapons,
                shields=self.energy_allocation.shields,
                engines=self.energy_allocation.engines,
            ),
            action_points=self.action_points,
            max_action_points=self.max_action_points,
            velocity=VelocityRecord(q=self.velocity.q, r=self.velocity.r),
            max_speed=self.max_speed,
            sensors=self.sensors,
            initiative=self.initiative,
            weapons=[
                WeaponRecord(
                    name=weapon.name,
                    damage=weapon.damage,
                    energy_cost=weapon.energy_cost,
                    ap_cost=weapon.ap_cost,
                    cooldown=weapon.cooldown,
                    cooldown_remaining=weapon.cooldown_remaining,
                    min_range=weapon.min_range,
                    max_range=weapon.max_range,
                    damage_type=weapon.damage_type,
                    key=weapon.key,
                )
                for weapon in self.weapons
            ],
            abilities=[
                AbilityRecord(key=ability.key, cooldown_remaining=ability.cooldown_remaining)
                for ability in self.abilities
            ],
            status_effects=StatusEffectsRecord(
                evasive_charges=self.status_effects.evasive_charges,
                overcharge_shots=self.status_effects.overcharge_shots,
            ),
            ai_profile=self.ai_profile,
            upgrades=list(self.upgrades),
            is_destroyed=self.is_destroyed,
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain camelCase snapshot for external save/load."""
        return self.to_snapshot().model_dump(mode="json", by_alias=True)

    @classmethod
    def from_snapshot(cls, snapshot: ShipSnapshot) -> Ship:
        abilities = []
        for record in snapshot.abilities:
            ability = create_ability(record.key, cooldown_remaining=record.cooldown_remaining)
            if ability is not None:
                abilities.append(ability)

        return cls(
            id=snapshot.id,
            name=snapshot.name,
            team=snapshot.team,
            ship_class=snapshot.ship_class,
            position=HexCoord(q=snapshot.position.q, r=snapshot.position.r),
            max_hull=snapshot.max_hull,
            hull=snapshot.hull,
            max_shield=snapshot.max_shield,
            shield=snapshot.shield,
            armor=snapshot.armor,
            max_energy=snapshot.max_energy,
            energy=snapshot.energy,
            reactor_output=snapshot.reactor_output,
            max_action_points=snapshot.max_action_points,
            action_points=snapshot.action_points,
            max_speed=snapshot.max_speed,
            sensors=snapshot.sensors,
            energy_allocation=EnergyAllocation(
                weapons=snapshot.energy_allocation.weapons,
                shields=snapshot.energy_allocation.shields,
                engines=snapshot.energy_allocation.engines,
            ),
            velocity=Velocity(q=snapshot.velocity.q, r=snapshot.velocity.r),
            weapons=[
                Weapon(
                    name=record.name,
                    damage=record.damage,
                    energy_cost=record.energy_cost,
                    ap_cost=record.ap_cost,
                    cooldown=record.cooldown,
                    cooldown_remaining=record.cooldown_remaining,
                    min_range=record.min_range,
                    max_range=record.max_range,
                    damage_type=record.damage_type,
                    key=record.key,
                )
                for record in snapshot.weapons
            ],
            abilities=abilities,
            status_effects=StatusEffects(
                evasive_charges=snapshot.status_effects.evasive_charges,
                overcharge_shots=snapshot.status_effects.overcharge_shots,
            ),
            ai_profile=snapshot.ai_profile,
            upgrades=list(snapshot.upgrades),
            initiative=snapshot.initiative,
            is_destroyed=snapshot.is_destroyed,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Ship:
        """Rebuild a ship from :meth:`to_dict` output.

        Raises:
            InvalidShipRecordError: If the record is malformed or inconsistent
        """

        try:
            snapshot = ShipSnapshot.model_validate(data)
        except ValidationError as exc:
            raise InvalidShipRecordError(f"Invalid ship record: {exc}") from exc
        return cls.from_snapshot(snapshot)


# --- Presets and construction -----------------------------------------------------


@dataclass(frozen=True, slots=True)
class ShipPreset:
    """Base stats and default loadout of a ship class."""

    ship_class: ShipClass
    max_hull: float
    max_shield: float
    armor: float
    max_energy: float
    reactor_output: float
    max_action_points: int
    max_speed: float
    sensors: int
    weapon_keys: tuple[str, ...]
    ability_keys: tuple[str, ...]


SHIP_PRESETS: MappingProxyType[ShipClass, ShipPreset] = MappingProxyType(
    {
        ShipClass.INTERCEPTOR: ShipPreset(
            ship_class=ShipClass.INTERCEPTOR,
            max_hull=80,
            max_shield=40,
            armor=5,
            max_energy=100,
            reactor_output=50,
            max_action_points=4,
            max_speed=4,
            sensors=60,
            weapon_keys=("light_laser",),
            ability_keys=(AbilityKey.EVASIVE_MANEUVER, AbilityKey.BURST_ENGINES),
        ),
        ShipClass.CORVETTE: ShipPreset(
            ship_class=ShipClass.CORVETTE,
            max_hull=140,
            max_shield=65,
            armor=12,
            max_energy=120,
            reactor_output=60,
            max_action_points=3,
            max_speed=3,
            sensors=50,
            weapon_keys=("pulse_cannon", "missiles"),
            ability_keys=(AbilityKey.SHIELD_SURGE, AbilityKey.WEAPON_OVERCHARGE),
        ),
        ShipClass.DESTROYER: ShipPreset(
            ship_class=ShipClass.DESTROYER,
            max_hull=200,
            max_shield=80,
            armor=25,
            max_energy=140,
            reactor_output=70,
            max_action_points=2,
            max_speed=2,
            sensors=40,
            weapon_keys=("heavy_cannon", "point_defense"),
            ability_keys=(
                AbilityKey.SHIELD_SURGE,
                AbilityKey.EMP_BURST,
                AbilityKey.EMERGENCY_REPAIR,
            ),
        ),
    }
)


def get_preset(name: str) -> ShipPreset | None:
    """Look up a preset by class name; unknown names log a warning."""

    try:
        return SHIP_PRESETS[ShipClass(name)]
    except ValueError:
        logger.warning("Unknown ship preset %r", name)
        return None


@dataclass(slots=True)
class ShipOverrides:
    """Per-instance values layered over a preset; ``None`` keeps the preset's."""

    id: str | None = None
    name: str | None = None
    team: Team | None = None
    position: HexCoord | None = None
    max_hull: float | None = None
    hull: float | None = None
    max_shield: float | None = None
    shield: float | None = None
    armor: float | None = None
    max_energy: float | None = None
    energy: float | None = None
    reactor_output: float | None = None
    max_action_points: int | None = None
    max_speed: float | None = None
    sensors: int | None = None
    energy_allocation: EnergyAllocation | None = None
    ai_profile: AIProfile | None = None
    weapons: list[Weapon] | None = None
    ability_keys: list[str] | None = None
    status_effects: StatusEffects | None = None
    upgrades: list[str] = field(default_factory=list)


_ship_counter = 0


def _next_ship_id(ship_class: ShipClass) -> str:
    global _ship_counter  # noqa: PLW0603
    _ship_counter += 1
    return f"{ship_class.value}-{_ship_counter}"


def _pick(override: Any, default: Any) -> Any:
    return default if override is None else override


def build_ship(
    preset: ShipPreset,
    overrides: ShipOverrides | None = None,
    rules: RulesConfig = DEFAULT_RULES,
) -> Ship:
    """Construct a ship from a preset, overrides winning field by field.

    Upgrades are applied after the base stats, then persisted hull, shield
    and energy values are restored (clamped to the upgraded maxima).
    """

    overrides = overrides or ShipOverrides()
    max_hull = _pick(overrides.max_hull, preset.max_hull)
    max_shield = _pick(overrides.max_shield, preset.max_shield)
    max_energy = _pick(overrides.max_energy, preset.max_energy)
    max_action_points = _pick(overrides.max_action_points, preset.max_action_points)

    if overrides.weapons is not None:
        weapons = [replace(weapon) for weapon in overrides.weapons]
    else:
        weapons = create_weapons(preset.weapon_keys)
    ability_keys = _pick(overrides.ability_keys, list(preset.ability_keys))

    # Copies keep one ShipOverrides reusable across several ships
    allocation = replace(overrides.energy_allocation or EnergyAllocation())
    if allocation.total != rules.ship.allocation_total:
        logger.warning(
            "Energy allocation %s does not sum to %d; using default",
            allocation.as_tuple(),
            rules.ship.allocation_total,
        )
        allocation = EnergyAllocation()

    ship = Ship(
        id=overrides.id or _next_ship_id(preset.ship_class),
        name=overrides.name or preset.ship_class.value.title(),
        team=_pick(overrides.team, Team.PLAYER),
        ship_class=preset.ship_class,
        position=_pick(overrides.position, HexCoord(0, 0)),
        max_hull=max_hull,
        hull=max_hull,
        max_shield=max_shield,
        shield=max_shield,
        armor=_pick(overrides.armor, preset.armor),
        max_energy=max_energy,
        energy=max_energy,
        reactor_output=_pick(overrides.reactor_output, preset.reactor_output),
        max_action_points=max_action_points,
        action_points=max_action_points,
        max_speed=_pick(overrides.max_speed, preset.max_speed),
        sensors=_pick(overrides.sensors, preset.sensors),
        energy_allocation=allocation,
        weapons=weapons,
        abilities=create_abilities(ability_keys),
        status_effects=replace(overrides.status_effects or StatusEffects()),
        ai_profile=_pick(overrides.ai_profile, AIProfile.STANDARD),
    )

    for key in overrides.upgrades:
        apply_upgrade(ship, key)

    if overrides.hull is not None:
        ship.hull = min(overrides.hull, ship.max_hull)
        if ship.hull <= 0:
            ship.hull = 0
            ship.is_destroyed = True
    if overrides.shield is not None:
        ship.shield = min(overrides.shield, ship.max_shield)
    if overrides.energy is not None:
        ship.energy = min(overrides.energy, ship.max_energy)
    return ship


def create_ship(
    ship_class: ShipClass | str,
    overrides: ShipOverrides | None = None,
    rules: RulesConfig = DEFAULT_RULES,
) -> Ship | None:
    """Build a ship from a class name; unknown classes yield None."""

    preset = get_preset(ship_class)
    if preset is None:
        return None
    return build_ship(preset, overrides, rules)


def ship_from_config(
    config: ShipConfig | dict[str, Any], rules: RulesConfig = DEFAULT_RULES
) -> Ship | None:
    """Build a ship from an external construction record."""

    if isinstance(config, dict):
        config = ShipConfig.model_validate(config)

    preset = get_preset(config.ship_class)
    if preset is None:
        return None

    overrides = ShipOverrides(
        id=config.id,
        name=config.name,
        team=config.team,
        position=HexCoord(config.position.q, config.position.r) if config.position else None,
        hull=config.hull,
        shield=config.shield,
        energy=config.energy,
        ai_profile=config.ai_profile,
        weapons=create_weapons(config.weapons) if config.weapons is not None else None,
        ability_keys=config.abilities,
        upgrades=list(config.upgrades),
    )
    if config.status_effects is not None:
        overrides.status_effects = StatusEffects(
            evasive_charges=config.status_effects.evasive_charges,
            overcharge_shots=config.status_effects.overcharge_shots,
        )
    if config.energy_allocation is not None:
        overrides.energy_allocation = EnergyAllocation(
            weapons=config.energy_allocation.weapons,
            shields=config.energy_allocation.shields,
            engines=config.energy_allocation.engines,
        )
    return build_ship(preset, overrides, rules)
