"""Unit tests for weapons, damage resolution and line of sight."""

from __future__ import annotations

import logging

import pytest

from stellar_arena.domain.combat import (
    calculate_damage,
    damage_multiplier,
    get_targeting_info,
    has_line_of_sight,
)
from stellar_arena.domain.enums import DamageType
from stellar_arena.domain.models import AttackData
from stellar_arena.domain.weapons import WEAPON_LIBRARY, Weapon, create_weapon, create_weapons
from stellar_arena.utils.hex_math import HexCoord


class TestWeaponLibrary:
    def test_fresh_instances(self):
        a = create_weapon("missiles")
        b = create_weapon("missiles")
        a.cooldown_remaining = 2
        assert b.cooldown_remaining == 0
        assert a is not b

    def test_library_is_read_only(self):
        with pytest.raises(TypeError):
            WEAPON_LIBRARY["laser"] = WEAPON_LIBRARY["light_laser"]  # type: ignore[index]

    def test_unknown_key_skipped(self, caplog):
        with caplog.at_level(logging.WARNING):
            weapons = create_weapons(["heavy_cannon", "plasma_lance"])
        assert [w.key for w in weapons] == ["heavy_cannon"]
        assert "plasma_lance" in caplog.text

    def test_range_helpers(self):
        weapon = Weapon(name="Test", damage=10, energy_cost=5, ap_cost=1, min_range=2, max_range=6)
        assert weapon.optimal_range == 4
        assert weapon.range_gap(1) == 1
        assert weapon.range_gap(4) == 0
        assert weapon.range_gap(9) == 3

    def test_ion_disruptor_is_emp(self):
        assert create_weapon("ion_disruptor").damage_type is DamageType.EMP


class TestDamageMultiplier:
    @pytest.mark.parametrize(
        ("damage_type", "expected"),
        [
            (DamageType.ENERGY, 1.0),
            (DamageType.KINETIC, 1.2),
            (DamageType.EXPLOSIVE, 1.3),
        ],
    )
    def test_multipliers(self, damage_type, expected):
        assert damage_multiplier(damage_type) == expected


class TestCalculateDamage:
    def test_kinetic_hits_shield(self, make_ship):
        attacker = make_ship("destroyer")
        target = make_ship(q=2, r=0)
        attack = AttackData(weapon=create_weapon("heavy_cannon"), damage=50, attacker=attacker, target=target)

        result = calculate_damage(attack)

        assert result.total_damage == pytest.approx(60)
        assert result.shield_damage == pytest.approx(60)
        assert result.hull_damage == 0
        assert not result.destroyed
        assert target.shield == pytest.approx(5)

    def test_explosive_overflows_into_hull(self, make_ship):
        target = make_ship(q=2, r=0, shield=10)
        attack = AttackData(weapon=create_weapon("missiles"), damage=40, attacker=make_ship(), target=target)

        result = calculate_damage(attack)

        # 40 * 1.3 = 52: 10 on shields, 42 - 12 * 0.5 = 36 on the hull
        assert result.shield_damage == pytest.approx(10)
        assert result.hull_damage == pytest.approx(36)
        assert result.dealt == pytest.approx(46)

    def test_emp_drains_energy_only(self, make_ship):
        target = make_ship(q=1, r=0, energy=30)
        attack = AttackData(weapon=create_weapon("ion_disruptor"), damage=40, attacker=make_ship(), target=target)

        result = calculate_damage(attack)

        assert result.is_emp
        assert result.energy_damage == 30
        assert target.energy == 0
        assert target.shield == target.max_shield
        assert target.hull == target.max_hull
        assert result.dealt == 0

    def test_destroying_hit(self, make_ship):
        target = make_ship(q=1, r=0, shield=0, hull=3)
        attack = AttackData(weapon=create_weapon("light_laser"), damage=30, attacker=make_ship(), target=target)
        assert calculate_damage(attack).destroyed
        assert target.is_destroyed


class TestLineOfSight:
    def test_clear_line(self, grid, make_ship):
        a, b = make_ship(q=0, r=0), make_ship(q=3, r=0)
        grid.place_ship(a)
        grid.place_ship(b)
        assert has_line_of_sight(a, b, grid)

    def test_obstacle_blocks(self, grid, make_ship):
        a, b = make_ship(q=0, r=0), make_ship(q=3, r=0)
        grid.add_obstacle(HexCoord(2, 0))
        assert not has_line_of_sight(a, b, grid)

    def test_ship_in_between_blocks(self, grid, make_ship):
        a, b = make_ship(q=0, r=0), make_ship(q=3, r=0)
        grid.place_ship(make_ship(q=1, r=0))
        assert not has_line_of_sight(a, b, grid)

    def test_endpoints_ignored(self, grid, make_ship):
        a, b = make_ship(q=0, r=0), make_ship(q=1, r=0)
        grid.place_ship(a)
        grid.place_ship(b)
        assert has_line_of_sight(a, b, grid)

    def test_off_line_obstacle(self, grid, make_ship):
        a, b = make_ship(q=0, r=0), make_ship(q=3, r=0)
        grid.add_obstacle(HexCoord(0, 2))
        assert has_line_of_sight(a, b, grid)


class TestTargetingInfo:
    def test_ready_weapon(self, make_ship):
        ship = make_ship()
        target = make_ship(q=4, r=0)
        info = get_targeting_info(ship, target, ship.weapons[1])
        assert info.distance == 4
        assert info.in_range
        assert info.can_fire

    def test_reports_each_blocker(self, make_ship):
        ship = make_ship(energy=10)
        ship.action_points = 0
        ship.weapons[1].cooldown_remaining = 1
        info = get_targeting_info(ship, make_ship(q=1, r=0), ship.weapons[1])
        assert not info.in_range
        assert not info.has_energy
        assert not info.has_ap
        assert not info.not_on_cooldown
        assert not info.can_fire
