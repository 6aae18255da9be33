"""Enumerations used across the combat domain."""

from __future__ import annotations

from enum import StrEnum


class Team(StrEnum):
    """Side a ship fights for."""

    PLAYER = "player"
    ENEMY = "enemy"

    @property
    def opponent(self) -> Team:
        return Team.ENEMY if self is Team.PLAYER else Team.PLAYER


class ShipClass(StrEnum):
    """Hull class; selects the base stat preset."""

    INTERCEPTOR = "interceptor"
    CORVETTE = "corvette"
    DESTROYER = "destroyer"


class DamageType(StrEnum):
    """How a weapon's damage interacts with its target."""

    ENERGY = "energy"
    KINETIC = "kinetic"
    EXPLOSIVE = "explosive"
    EMP = "emp"


class AIProfile(StrEnum):
    """Weighting profile for the enemy decision heuristics."""

    STANDARD = "standard"
    AGGRESSIVE = "aggressive"
    CAUTIOUS = "cautious"
    FLANKER = "flanker"
    SKIRMISHER = "skirmisher"
    ANCHOR = "anchor"
    VANGUARD = "vanguard"
    OPPORTUNIST = "opportunist"


class TurnPhase(StrEnum):
    """Turn manager phases."""

    INITIATIVE = "initiative"
    ACTION = "action"
    END = "end"


class AbilityKey(StrEnum):
    """Stable keys of the ability library."""

    SHIELD_SURGE = "shield_surge"
    EVASIVE_MANEUVER = "evasive_maneuver"
    WEAPON_OVERCHARGE = "weapon_overcharge"
    BURST_ENGINES = "burst_engines"
    EMP_BURST = "emp_burst"
    EMERGENCY_REPAIR = "emergency_repair"


class UpgradeKey(StrEnum):
    """Stable keys of the upgrade library."""

    REINFORCED_BARREL = "reinforced_barrel"
    EFFICIENT_CAPACITORS = "efficient_capacitors"
    RAPID_RELOADER = "rapid_reloader"
    EXTENDED_RANGE = "extended_range"
    REINFORCED_HULL = "reinforced_hull"
    SHIELD_BOOSTER = "shield_booster"
    REACTIVE_ARMOR = "reactive_armor"
    THRUSTER_UPGRADE = "thruster_upgrade"
    IMPROVED_REACTOR = "improved_reactor"
    AGILE_MANEUVERS = "agile_maneuvers"
    ADVANCED_SENSORS = "advanced_sensors"
    EMERGENCY_REPAIR = "emergency_repair"


class UpgradeCategory(StrEnum):
    """Grouping of upgrades for reward screens."""

    WEAPON = "weapon"
    DEFENSE = "defense"
    MOBILITY = "mobility"
    UTILITY = "utility"


class CombatEventKind(StrEnum):
    """Notifications the combat core emits for external logs and renderers."""

    ROUND_START = "round_start"
    TURN_START = "turn_start"
    MOVEMENT = "movement"
    DRIFT = "drift"
    WEAPON_FIRE = "weapon_fire"
    DAMAGE = "damage"
    EMP = "emp"
    ABILITY = "ability"
    ENERGY_ALLOCATION = "energy_allocation"
    DESTRUCTION = "destruction"
    VICTORY = "victory"
    DEFEAT = "defeat"


class BattleWinner(StrEnum):
    """Reported winner once a battle ends."""

    PLAYER = "player"
    ENEMY = "enemy"
