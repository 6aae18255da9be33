"""Pydantic records for ship persistence and construction input.

Snapshots use camelCase keys so they match the save/load payloads produced
by external front ends. Validation is strict: a corrupt snapshot is rejected
rather than turned into an inconsistent ship.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from stellar_arena.domain.enums import AbilityKey, AIProfile, DamageType, ShipClass, Team
from stellar_arena.domain.rules_config import DEFAULT_RULES


class CamelModel(BaseModel):
    """Base model emitting camelCase aliases and accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HexPosition(CamelModel):
    q: int = Field(..., description="Axial column")
    r: int = Field(..., description="Axial row")


class VelocityRecord(CamelModel):
    q: float = Field(default=0.0, description="Drift along q per turn")
    r: float = Field(default=0.0, description="Drift along r per turn")


class EnergyAllocationRecord(CamelModel):
    weapons: int = Field(..., ge=0, description="Points routed to weapons")
    shields: int = Field(..., ge=0, description="Points routed to shields")
    engines: int = Field(..., ge=0, description="Points routed to engines")

    @model_validator(mode="after")
    def _check_total(self) -> Self:
        total = self.weapons + self.shields + self.engines
        expected = DEFAULT_RULES.ship.allocation_total
        if total != expected:
            raise ValueError(f"energy allocation must sum to {expected}, got {total}")
        return self


class WeaponRecord(CamelModel):
    name: str = Field(..., description="Display name")
    damage: float = Field(..., ge=0, description="Base damage before allocation scaling")
    energy_cost: int = Field(..., ge=0, description="Energy spent per shot")
    ap_cost: int = Field(..., ge=0, description="Action points spent per shot")
    cooldown: int = Field(default=0, ge=0, description="Turns between shots")
    cooldown_remaining: int = Field(default=0, ge=0, description="Turns until ready")
    min_range: int = Field(default=0, ge=0, description="Minimum range in hexes")
    max_range: int = Field(..., ge=0, description="Maximum range in hexes")
    damage_type: DamageType = Field(default=DamageType.ENERGY, description="Damage type")
    key: str | None = Field(None, description="Weapon library key, if built from one")

    @model_validator(mode="after")
    def _check_range(self) -> Self:
        if self.min_range > self.max_range:
            raise ValueError(
                f"min_range ({self.min_range}) cannot exceed max_range ({self.max_range})"
            )
        return self


class AbilityRecord(CamelModel):
    key: AbilityKey = Field(..., description="Ability library key")
    cooldown_remaining: int = Field(default=0, ge=0, description="Turns until ready")


class StatusEffectsRecord(CamelModel):
    evasive_charges: int = Field(default=0, ge=0)
    overcharge_shots: int = Field(default=0, ge=0)


class ShipSnapshot(CamelModel):
    """Lossless serialized form of a ship."""

    id: str = Field(..., min_length=1, description="Unique ship id")
    name: str = Field(..., description="Display name")
    position: HexPosition
    team: Team
    ship_class: ShipClass
    hull: float = Field(..., ge=0)
    max_hull: float = Field(..., gt=0)
    shield: float = Field(..., ge=0)
    max_shield: float = Field(..., ge=0)
    armor: float = Field(..., ge=0)
    energy: float = Field(..., ge=0)
    max_energy: float = Field(..., ge=0)
    reactor_output: float = Field(..., ge=0)
    energy_allocation: EnergyAllocationRecord
    action_points: int = Field(..., ge=0)
    max_action_points: int = Field(..., ge=0)
    velocity: VelocityRecord = Field(default_factory=VelocityRecord)
    max_speed: float = Field(..., ge=0)
    sensors: int = Field(..., ge=0)
    initiative: int = Field(default=0)
    weapons: list[WeaponRecord] = Field(default_factory=list)
    abilities: list[AbilityRecord] = Field(default_factory=list)
    status_effects: StatusEffectsRecord = Field(default_factory=StatusEffectsRecord)
    ai_profile: AIProfile = Field(default=AIProfile.STANDARD)
    upgrades: list[str] = Field(default_factory=list)
    is_destroyed: bool = Field(default=False)

    @model_validator(mode="after")
    def _check_gauges(self) -> Self:
        for value, maximum, label in (
            (self.hull, self.max_hull, "hull"),
            (self.shield, self.max_shield, "shield"),
            (self.energy, self.max_energy, "energy"),
            (self.action_points, self.max_action_points, "action_points"),
        ):
            if value > maximum:
                raise ValueError(f"{label} ({value}) exceeds its maximum ({maximum})")
        if self.is_destroyed != (self.hull == 0):
            raise ValueError("is_destroyed must be set exactly when hull is 0")
        return self


class ShipConfig(CamelModel):
    """Construction input supplied by campaign or scenario code.

    Only ``ship_class`` is required; everything else overrides the preset.
    Weapons and abilities are given as library keys.
    """

    ship_class: str = Field(..., description="Preset name (interceptor/corvette/destroyer)")
    id: str | None = None
    name: str | None = None
    team: Team = Team.PLAYER
    position: HexPosition | None = None
    hull: float | None = Field(None, ge=0)
    shield: float | None = Field(None, ge=0)
    energy: float | None = Field(None, ge=0)
    ai_profile: AIProfile | None = None
    weapons: list[str] | None = None
    abilities: list[str] | None = None
    upgrades: list[str] = Field(default_factory=list)
    status_effects: StatusEffectsRecord | None = None
    energy_allocation: EnergyAllocationRecord | None = None
