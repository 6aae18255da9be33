"""Dataclasses describing the value objects of the combat domain.

Ships, weapons and abilities carry behaviour and live in their own modules;
the records below are the plain data exchanged between them (attack
descriptors, damage reports, drift results, targeting info and outcomes).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import BattleWinner, DamageType

if TYPE_CHECKING:
    from stellar_arena.utils.hex_math import HexCoord

    from .ship import Ship
    from .weapons import Weapon


# --- Ship sub-records -----------------------------------------------------------


@dataclass(slots=True)
class Velocity:
    """Continuous drift vector in axial hex space."""

    q: float = 0.0
    r: float = 0.0

    @property
    def is_zero(self) -> bool:
        return self.q == 0 and self.r == 0

    @property
    def magnitude(self) -> float:
        return math.hypot(self.q, self.r)


@dataclass(slots=True)
class EnergyAllocation:
    """Discrete split of reactor power across ship systems."""

    weapons: int = 3
    shields: int = 3
    engines: int = 4

    @property
    def total(self) -> int:
        return self.weapons + self.shields + self.engines

    def as_tuple(self) -> tuple[int, int, int]:
        return self.weapons, self.shields, self.engines


@dataclass(slots=True)
class StatusEffects:
    """Counted buffs consumed by the next qualifying action."""

    evasive_charges: int = 0
    overcharge_shots: int = 0


# --- Combat records -------------------------------------------------------------


@dataclass(slots=True)
class AttackData:
    """Descriptor produced by a successful weapon discharge."""

    weapon: Weapon
    damage: float
    attacker: Ship
    target: Ship
    overcharged: bool = False

    @property
    def damage_type(self) -> DamageType:
        return self.weapon.damage_type


@dataclass(slots=True)
class DamageReport:
    """Shield/hull split of damage absorbed by a single ship."""

    shield_damage: float = 0.0
    hull_damage: float = 0.0
    destroyed: bool = False
    evaded: bool = False

    @property
    def total(self) -> float:
        return self.shield_damage + self.hull_damage


@dataclass(slots=True)
class DamageResult:
    """Outcome of resolving an attack against its target."""

    damage_type: DamageType
    total_damage: float = 0.0
    shield_damage: float = 0.0
    hull_damage: float = 0.0
    energy_damage: float = 0.0
    destroyed: bool = False

    @property
    def is_emp(self) -> bool:
        return self.damage_type is DamageType.EMP

    @property
    def dealt(self) -> float:
        """Shield plus hull damage actually applied."""
        return self.shield_damage + self.hull_damage


@dataclass(slots=True)
class DriftResult:
    """What happened when a ship's momentum was applied at turn end."""

    origin: HexCoord
    destination: HexCoord
    moved: bool = False
    collided: bool = False


@dataclass(frozen=True, slots=True)
class ReachableHex:
    """A hex a ship can reach this turn and the movement cost to get there."""

    hex: HexCoord
    cost: float


@dataclass(frozen=True, slots=True)
class TargetingInfo:
    """Fire-control readout for one weapon against one target."""

    distance: int
    in_range: bool
    has_energy: bool
    has_ap: bool
    not_on_cooldown: bool

    @property
    def can_fire(self) -> bool:
        return self.in_range and self.has_energy and self.has_ap and self.not_on_cooldown


@dataclass(frozen=True, slots=True)
class BattleOutcome:
    """Win-condition state reported to the caller."""

    game_over: bool = False
    winner: BattleWinner | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"gameOver": self.game_over}
        if self.winner is not None:
            data["winner"] = self.winner.value
        return data


@dataclass(slots=True)
class QueueEntry:
    """Initiative queue row for external displays."""

    ship: Ship
    is_active: bool


@dataclass(slots=True)
class AITurnReport:
    """Trace of one automated turn."""

    ship_id: str | None
    target_id: str | None = None
    ability_used: str | None = None
    moved_to: HexCoord | None = None
    fallback_moves: int = 0
    attacks: list[tuple[str, str, float]] = field(default_factory=list)
    destroyed: list[str] = field(default_factory=list)
    skipped: bool = False
    error: str | None = None

    @property
    def attacks_made(self) -> int:
        return len(self.attacks)
