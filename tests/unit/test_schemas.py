from typing import Any

import pytest
from pydantic import ValidationError

from stellar_arena.domain.enums import AIProfile, DamageType, ShipClass, Team
from stellar_arena.schemas import (
    EnergyAllocationRecord,
    ScenarioConfig,
    ShipConfig,
    ShipSnapshot,
    SimulationConfig,
    WeaponRecord,
)


@pytest.fixture
def snapshot_data() -> dict[str, Any]:
    return {
        "id": "corvette-1",
        "name": "Aurora",
        "position": {"q": 1, "r": -2},
        "team": "player",
        "shipClass": "corvette",
        "hull": 120,
        "maxHull": 140,
        "shield": 30,
        "maxShield": 65,
        "armor": 12,
        "energy": 80,
        "maxEnergy": 120,
        "reactorOutput": 60,
        "energyAllocation": {"weapons": 3, "shields": 3, "engines": 4},
        "actionPoints": 2,
        "maxActionPoints": 3,
        "maxSpeed": 3,
        "sensors": 50,
        "weapons": [
            {
                "name": "Pulse Cannon",
                "damage": 30,
                "energyCost": 35,
                "apCost": 1,
                "maxRange": 6,
                "damageType": "energy",
                "key": "pulse_cannon",
            }
        ],
        "abilities": [{"key": "shield_surge", "cooldownRemaining": 2}],
    }


def test_snapshot_accepts_camel_case(snapshot_data):
    snapshot = ShipSnapshot.model_validate(snapshot_data)
    assert snapshot.ship_class is ShipClass.CORVETTE
    assert snapshot.position.q == 1
    assert snapshot.weapons[0].damage_type is DamageType.ENERGY
    assert snapshot.abilities[0].cooldown_remaining == 2
    assert snapshot.velocity.q == 0.0
    assert snapshot.ai_profile is AIProfile.STANDARD

    dumped = snapshot.model_dump(by_alias=True)
    assert dumped["maxHull"] == 140
    assert dumped["energyAllocation"] == {"weapons": 3, "shields": 3, "engines": 4}


def test_snapshot_accepts_field_names(snapshot_data):
    snapshot_data["max_hull"] = snapshot_data.pop("maxHull")
    assert ShipSnapshot.model_validate(snapshot_data).max_hull == 140


def test_snapshot_rejects_gauge_over_maximum(snapshot_data):
    snapshot_data["hull"] = 150
    with pytest.raises(ValidationError, match="hull"):
        ShipSnapshot.model_validate(snapshot_data)


def test_snapshot_destroyed_flag_tracks_hull(snapshot_data):
    snapshot_data["isDestroyed"] = True
    with pytest.raises(ValidationError, match="is_destroyed"):
        ShipSnapshot.model_validate(snapshot_data)

    snapshot_data["hull"] = 0
    assert ShipSnapshot.model_validate(snapshot_data).is_destroyed


def test_snapshot_rejects_unknown_team(snapshot_data):
    snapshot_data["team"] = "pirates"
    with pytest.raises(ValidationError):
        ShipSnapshot.model_validate(snapshot_data)


def test_energy_allocation_total():
    assert EnergyAllocationRecord(weapons=5, shields=5, engines=0).weapons == 5
    with pytest.raises(ValidationError, match="sum to 10"):
        EnergyAllocationRecord(weapons=4, shields=4, engines=4)
    with pytest.raises(ValidationError):
        EnergyAllocationRecord(weapons=-1, shields=6, engines=5)


def test_weapon_range_order():
    with pytest.raises(ValidationError, match="min_range"):
        WeaponRecord(name="Bent", damage=10, energy_cost=5, ap_cost=1, min_range=5, max_range=2)


def test_ship_config_defaults():
    config = ShipConfig.model_validate({"shipClass": "interceptor"})
    assert config.team is Team.PLAYER
    assert config.position is None
    assert config.upgrades == []
    assert config.weapons is None


def test_scenario_config_defaults():
    scenario = ScenarioConfig()
    assert scenario.player_presets == [ShipClass.CORVETTE, ShipClass.INTERCEPTOR]
    assert scenario.enemy_presets == [ShipClass.CORVETTE]
    assert scenario.ai_profiles == []


def test_scenario_config_needs_ships():
    with pytest.raises(ValidationError, match="at least one ship"):
        ScenarioConfig(enemy_presets=[])


def test_simulation_config_from_json():
    config = SimulationConfig.model_validate_json(
        '{"iterations": 2, "maxRounds": 10, "scenarios": ['
        '{"playerPresets": ["destroyer"], "enemyPresets": ["interceptor"], '
        '"aiProfiles": ["aggressive"], "seed": 7}]}'
    )
    assert config.iterations == 2
    assert config.max_rounds == 10
    [scenario] = config.scenarios
    assert scenario.player_presets == [ShipClass.DESTROYER]
    assert scenario.ai_profiles == [AIProfile.AGGRESSIVE]
    assert scenario.seed == 7


def test_simulation_config_defaults():
    config = SimulationConfig()
    assert config.iterations == 5
    assert len(config.scenarios) == 2
    with pytest.raises(ValidationError):
        SimulationConfig(iterations=0)
