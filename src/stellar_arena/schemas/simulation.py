"""Pydantic records for headless battle simulations."""

from __future__ import annotations

from pydantic import Field, field_validator

from stellar_arena.domain.enums import AIProfile, ShipClass

from .ship import CamelModel


class ScenarioConfig(CamelModel):
    """Fleet composition for one simulated matchup.

    ``ai_profiles`` pairs with ``enemy_presets`` by index; enemies without a
    profile play ``standard``.
    """

    player_presets: list[ShipClass] = Field(
        default_factory=lambda: [ShipClass.CORVETTE, ShipClass.INTERCEPTOR],
        description="Player ship classes, spawned top to bottom",
    )
    enemy_presets: list[ShipClass] = Field(
        default_factory=lambda: [ShipClass.CORVETTE],
        description="Enemy ship classes, spawned top to bottom",
    )
    ai_profiles: list[AIProfile] = Field(default_factory=list, description="Enemy AI profiles")
    seed: int = Field(default=0, ge=0, description="Seed for initiative rolls")

    @field_validator("player_presets", "enemy_presets")
    @classmethod
    def _require_ships(cls, value: list[ShipClass]) -> list[ShipClass]:
        if not value:
            raise ValueError("a fleet needs at least one ship")
        return value


def default_scenarios() -> list[ScenarioConfig]:
    return [
        ScenarioConfig(enemy_presets=[ShipClass.CORVETTE], ai_profiles=[AIProfile.CAUTIOUS]),
        ScenarioConfig(
            enemy_presets=[ShipClass.INTERCEPTOR, ShipClass.CORVETTE],
            ai_profiles=[AIProfile.SKIRMISHER, AIProfile.CAUTIOUS],
        ),
    ]


class SimulationConfig(CamelModel):
    """Batch run definition, as accepted by the ``--config`` flag."""

    scenarios: list[ScenarioConfig] = Field(default_factory=default_scenarios)
    iterations: int = Field(default=5, gt=0, description="Battles per scenario")
    max_rounds: int = Field(default=50, gt=0, description="Round cap per battle")
