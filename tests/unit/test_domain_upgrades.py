"""Unit tests for the upgrade library."""

from __future__ import annotations

import logging

from stellar_arena.domain.enums import UpgradeCategory, UpgradeKey
from stellar_arena.domain.upgrades import (
    UPGRADE_LIBRARY,
    apply_upgrade,
    get_upgrade,
    ship_upgrades,
    upgrade_choices,
)
from stellar_arena.utils.rng import RandomSource


def test_library_covers_every_key():
    assert set(UPGRADE_LIBRARY) == set(UpgradeKey)
    assert len(UPGRADE_LIBRARY) == 12
    categories = {spec.category for spec in UPGRADE_LIBRARY.values()}
    assert categories == set(UpgradeCategory)


def test_weapon_upgrades(make_ship):
    ship = make_ship("corvette")
    assert apply_upgrade(ship, "reinforced_barrel")
    assert apply_upgrade(ship, "efficient_capacitors")
    assert apply_upgrade(ship, "rapid_reloader")
    assert apply_upgrade(ship, "extended_range")

    pulse, missiles = ship.weapons
    assert pulse.damage == 33
    assert missiles.damage == 60
    assert pulse.energy_cost == 28
    assert missiles.cooldown == 1
    assert missiles.max_range == 11
    assert ship.upgrades == [
        "reinforced_barrel",
        "efficient_capacitors",
        "rapid_reloader",
        "extended_range",
    ]


def test_defense_upgrades(make_ship):
    ship = make_ship("corvette")
    apply_upgrade(ship, "reinforced_hull")
    apply_upgrade(ship, "shield_booster")
    apply_upgrade(ship, "reactive_armor")
    assert (ship.max_hull, ship.hull) == (168, 168)
    assert (ship.max_shield, ship.shield) == (84, 84)
    assert ship.armor == 17


def test_mobility_and_utility_upgrades(make_ship):
    ship = make_ship("interceptor", hull=40)
    for key in ("thruster_upgrade", "improved_reactor", "agile_maneuvers", "advanced_sensors", "emergency_repair"):
        assert apply_upgrade(ship, key)
    assert ship.max_action_points == 5
    assert ship.max_energy == 120
    assert ship.reactor_output == 60
    assert ship.max_speed == 5
    assert ship.sensors == 75
    assert ship.hull == 64


def test_unknown_upgrade_leaves_ship_untouched(make_ship, caplog):
    ship = make_ship()
    before = ship.to_dict()
    with caplog.at_level(logging.WARNING):
        assert not apply_upgrade(ship, "warp_core")
    assert ship.to_dict() == before
    assert get_upgrade("warp_core") is None
    assert "warp_core" in caplog.text


def test_upgrade_choices_are_distinct_and_seeded():
    first = upgrade_choices(RandomSource("offer"), 3)
    second = upgrade_choices(RandomSource("offer"), 3)
    assert len({spec.key for spec in first}) == 3
    assert [spec.key for spec in first] == [spec.key for spec in second]


def test_ship_upgrades_resolves_records(make_ship):
    ship = make_ship()
    apply_upgrade(ship, "reactive_armor")
    ship.upgrades.append("retired_upgrade")
    assert [spec.name for spec in ship_upgrades(ship)] == ["Reactive Armor"]
