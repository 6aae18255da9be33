"""Declarative rule configuration for the combat domain."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ShipRules:
    """Ship resource and regeneration constants."""

    allocation_total: int = 10
    allocation_change_ap_cost: int = 1
    shield_regen_factor: float = 0.5
    initiative_die: int = 20  # uniform [0, 20)
    overcharge_multiplier: float = 1.25
    evasive_multiplier: float = 0.7
    armor_mitigation_factor: float = 0.5
    minimum_hull_damage: float = 1.0


@dataclass(frozen=True, slots=True)
class MovementRules:
    """Movement, momentum and drift constants."""

    base_step_cost: float = 1.0
    with_drift_step_cost: float = 0.5
    against_drift_step_cost: float = 1.5
    velocity_gain_factor: float = 0.3
    drift_friction: float = 0.9
    drift_stop_threshold: float = 0.1


@dataclass(frozen=True, slots=True)
class DamageRules:
    """Damage-type multipliers applied by the resolver."""

    kinetic_multiplier: float = 1.2
    energy_multiplier: float = 1.0
    explosive_multiplier: float = 1.3


@dataclass(frozen=True, slots=True)
class AbilityRules:
    """Magnitudes of the ability effects."""

    shield_surge_fraction: float = 0.4
    evasive_charges: int = 1
    overcharge_shots: int = 1
    burst_engines_hexes: int = 2
    burst_engines_velocity_boost: float = 1.0
    emp_burst_radius: int = 3
    emp_burst_drain: int = 30
    emergency_repair_fraction: float = 0.25


@dataclass(frozen=True, slots=True)
class AIRules:
    """Weights for the enemy decision heuristics."""

    # Target scoring
    kill_incentive_weight: float = 120.0
    zero_shield_bonus: float = 25.0
    threat_weight: float = 0.5
    distance_penalty: float = 1.8
    no_line_of_sight_penalty: float = 45.0
    no_weapon_base_penalty: float = 30.0
    range_gap_penalty: float = 5.0
    default_range_gap: int = 5
    weapon_access_bonus: float = 18.0
    focus_bonus: float = 25.0
    low_own_shield_ratio: float = 0.2
    low_own_shield_bonus: float = 10.0
    low_threat_threshold: float = 10.0
    low_threat_distance: int = 4
    low_threat_penalty: float = 15.0

    # Threat estimation matchups
    energy_vs_shield_threat: float = 1.1
    kinetic_vs_hull_threat: float = 1.2

    # Weapon suitability
    energy_vs_shield: float = 1.1
    energy_vs_hull: float = 0.85
    kinetic_vs_shield: float = 0.75
    kinetic_vs_hull: float = 1.2
    explosive_factor: float = 1.05
    expected_damage_weight: float = 1.4
    energy_cost_weight: float = 0.4
    ap_cost_weight: float = 1.5
    spare_ap_weight: float = 3.0
    finishing_blow_bonus: float = 35.0
    fragile_hull_ratio: float = 0.3
    fragile_no_ap_penalty: float = 25.0
    ready_weapon_bonus: float = 8.0
    target_score_weight: float = 0.35

    # Ability choice
    surge_shield_ratio: float = 0.4
    surge_hull_ratio: float = 0.5
    evasive_hull_ratio: float = 0.35
    evasive_hull_ratio_cautious: float = 0.55
    evasive_threat_damage: float = 45.0
    overcharge_hull_ratio: float = 0.4
    overcharge_energy_ratio: float = 0.4
    repair_hull_ratio: float = 0.4

    # Positioning
    retreat_hull_ratio: float = 0.35
    retreat_hull_ratio_aggressive: float = 0.22
    retreat_hull_ratio_anchor: float = 0.45
    retreat_hull_ratio_cautious: float = 0.55
    retreat_shield_ratio: float = 0.4
    retreat_shield_ratio_aggressive: float = 0.25
    spare_ap_threshold: int = 4
    min_ap_to_move: int = 2
    optimal_range_tolerance: int = 2
    in_band_score: float = 100.0
    band_offset_penalty: float = 12.0
    near_band_score: float = 45.0
    near_band_margin: int = 2
    near_band_penalty: float = 18.0
    far_distance_penalty: float = 6.0
    closing_bonus: float = 15.0
    closing_bonus_aggressive: float = 22.0
    retreat_distance_bonus: float = 20.0
    retreat_in_range_penalty: float = 25.0
    flanker_band_penalty: float = 5.0
    cluster_radius: int = 3
    cluster_penalty: float = 12.0
    anchor_distance_penalty: float = 3.0
    no_attack_after_move_penalty: float = 50.0

    # Attack loop
    max_attacks_per_turn: int = 10
    ai_requires_line_of_sight: bool = False


@dataclass(frozen=True, slots=True)
class BattleRules:
    """Battle setup and log constants."""

    combat_log_capacity: int = 100
    player_spawn_q: int = -5
    enemy_spawn_q: int = 5
    spawn_row_spacing: int = 2
    spawn_row_offset: int = -1


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    ship: ShipRules = ShipRules()
    movement: MovementRules = MovementRules()
    damage: DamageRules = DamageRules()
    abilities: AbilityRules = AbilityRules()
    ai: AIRules = AIRules()
    battle: BattleRules = BattleRules()


DEFAULT_RULES = RulesConfig()
