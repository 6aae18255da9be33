"""Pydantic schemas for persisted ships and simulation input."""

from .ship import (
    AbilityRecord,
    CamelModel,
    EnergyAllocationRecord,
    HexPosition,
    ShipConfig,
    ShipSnapshot,
    StatusEffectsRecord,
    VelocityRecord,
    WeaponRecord,
)
from .simulation import ScenarioConfig, SimulationConfig, default_scenarios

__all__ = [
    "AbilityRecord",
    "CamelModel",
    "EnergyAllocationRecord",
    "HexPosition",
    "ScenarioConfig",
    "ShipConfig",
    "ShipSnapshot",
    "SimulationConfig",
    "StatusEffectsRecord",
    "VelocityRecord",
    "WeaponRecord",
    "default_scenarios",
]
