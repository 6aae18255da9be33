"""Enemy decision heuristics.

:class:`EnemyAI` scores targets, weapons, abilities and candidate positions
for an automated ship. It only reads state and returns decisions; the turn
manager carries them out. No random numbers are drawn here, and when two
candidates score exactly the same the first one considered wins.

The AI works against "the opposing team" of whichever ship it decides for,
so either side can be automated.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stellar_arena.utils.hex_math import HexCoord, hex_distance, hex_neighbors

from .abilities import AbilityContext
from .combat import has_line_of_sight
from .enums import AbilityKey, AIProfile, DamageType
from .rules_config import DEFAULT_RULES, RulesConfig

if TYPE_CHECKING:
    from .grid import Grid
    from .ship import Ship
    from .weapons import Weapon

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WeaponAccess:
    """How many weapons can fire on a target now, and how far off the rest are."""

    available: int
    range_gap: int


@dataclass(slots=True)
class WeaponChoice:
    index: int
    score: float
    expected_damage: float


@dataclass(slots=True)
class AttackPlan:
    target: Ship
    weapon_choice: WeaponChoice
    total_score: float


class EnemyAI:
    """Deterministic multi-factor tactical scoring."""

    def __init__(self, grid: Grid, rules: RulesConfig = DEFAULT_RULES) -> None:
        self.grid = grid
        self.rules = rules
        self.last_focus_target_id: str | None = None

    def opponents(self, ship: Ship) -> list[Ship]:
        return self.grid.get_ships_by_team(ship.team.opponent)

    def forget_target(self, ship_id: str) -> None:
        if self.last_focus_target_id == ship_id:
            self.last_focus_target_id = None

    # --- Target selection -------------------------------------------------------

    def choose_best_target(self, ship: Ship, candidates: list[Ship]) -> Ship | None:
        """Highest scoring living candidate; the first candidate breaks ties."""

        best_target = None
        best_score = -math.inf
        for target in candidates:
            if target.is_destroyed:
                continue
            score = self.evaluate_target_score(ship, target)
            if score > best_score:
                best_score = score
                best_target = target

        if best_target is None and candidates:
            return candidates[0]
        return best_target

    def evaluate_target_score(self, ship: Ship, target: Ship) -> float:  # noqa: PLR0912
        ai = self.rules.ai
        hull_percent = target.hull / max(1, target.max_hull)
        shield_percent = target.shield / max(1, target.max_shield or 1)
        profile = ship.ai_profile

        score = (1 - hull_percent) * ai.kill_incentive_weight
        if target.shield == 0:
            score += ai.zero_shield_bonus

        threat = self.estimate_target_threat(target, ship)
        score += threat * ai.threat_weight

        distance = hex_distance(ship.position, target.position)
        score -= distance * ai.distance_penalty

        if not has_line_of_sight(ship, target, self.grid):
            score -= ai.no_line_of_sight_penalty

        access = self.count_weapons_in_range(ship, target)
        if access.available == 0:
            score -= ai.no_weapon_base_penalty + access.range_gap * ai.range_gap_penalty
        else:
            score += access.available * ai.weapon_access_bonus

        if self.last_focus_target_id is not None and target.id == self.last_focus_target_id:
            score += ai.focus_bonus

        if ship.shield < ship.max_shield * ai.low_own_shield_ratio and target.shield > 0:
            score += ai.low_own_shield_bonus

        if threat < ai.low_threat_threshold and distance > ai.low_threat_distance:
            score -= ai.low_threat_penalty

        if profile is AIProfile.AGGRESSIVE:
            score += (1 - hull_percent) * 35
            score += threat * 0.2
            score -= distance * 0.5
        elif profile is AIProfile.CAUTIOUS:
            score -= (1 - shield_percent) * 20
            if distance > 4:  # noqa: PLR2004
                score -= 10
            if target.shield == 0:
                score += 15
        elif profile in (AIProfile.FLANKER, AIProfile.SKIRMISHER):
            score -= abs(distance - 4) * 8
            score += access.available * 5
        elif profile is AIProfile.ANCHOR:
            score += shield_percent * 10
            score -= distance * 2
        elif profile in (AIProfile.VANGUARD, AIProfile.OPPORTUNIST):
            score += (1 - hull_percent) * 20 + threat * 0.3

        return score

    def estimate_target_threat(self, attacker: Ship, defender: Ship) -> float:
        """Damage ``attacker`` could plausibly deal ``defender`` from where it is.

        Resources fall back to their maxima when currently empty, since the
        attacker will regenerate before its next turn.
        """

        ai = self.rules.ai
        distance = hex_distance(attacker.position, defender.position)
        action_points = attacker.action_points or attacker.max_action_points
        energy = attacker.energy or attacker.max_energy

        threat = 0.0
        for weapon in attacker.weapons:
            if action_points < weapon.ap_cost or energy < weapon.energy_cost:
                continue
            if weapon.cooldown_remaining > 0 or not weapon.in_range(distance):
                continue

            potential = weapon.damage
            if weapon.damage_type is DamageType.ENERGY and defender.shield > 0:
                potential *= ai.energy_vs_shield_threat
            elif weapon.damage_type is DamageType.KINETIC and defender.shield == 0:
                potential *= ai.kinetic_vs_hull_threat
            threat += potential
        return threat

    def count_weapons_in_range(self, ship: Ship, target: Ship) -> WeaponAccess:
        distance = hex_distance(ship.position, target.position)
        available = 0
        range_gap: int | None = None
        for weapon in ship.weapons:
            gap = weapon.range_gap(distance)
            range_gap = gap if range_gap is None else min(range_gap, gap)
            if weapon.in_range(distance) and ship.can_fire_weapon(weapon, target):
                available += 1

        if range_gap is None:
            range_gap = self.rules.ai.default_range_gap
        return WeaponAccess(available=available, range_gap=range_gap)

    # --- Weapon selection -------------------------------------------------------

    def evaluate_weapon_choice(
        self, attacker: Ship, target: Ship, weapon: Weapon
    ) -> tuple[float, float]:
        """Return ``(score, expected_damage)`` for firing ``weapon`` at ``target``."""

        ai = self.rules.ai
        target_shield = target.shield
        target_hull = target.hull
        profile = attacker.ai_profile

        expected = weapon.damage
        if weapon.damage_type is DamageType.ENERGY:
            expected *= ai.energy_vs_shield if target_shield > 0 else ai.energy_vs_hull
        elif weapon.damage_type is DamageType.KINETIC:
            expected *= ai.kinetic_vs_shield if target_shield > 0 else ai.kinetic_vs_hull
        elif weapon.damage_type is DamageType.EXPLOSIVE:
            expected *= ai.explosive_factor

        if target_shield > 0:
            expected = min(expected, target_shield + target_hull)

        score = expected * ai.expected_damage_weight
        score -= weapon.energy_cost * ai.energy_cost_weight
        score -= weapon.ap_cost * ai.ap_cost_weight
        score += max(0, attacker.action_points - weapon.ap_cost) * ai.spare_ap_weight

        if expected >= target_hull > 0:
            score += ai.finishing_blow_bonus

        if (
            attacker.hull_ratio < ai.fragile_hull_ratio
            and attacker.action_points - weapon.ap_cost <= 0
        ):
            score -= ai.fragile_no_ap_penalty

        if weapon.cooldown_remaining == 0:
            score += ai.ready_weapon_bonus

        if profile is AIProfile.AGGRESSIVE:
            score += expected * 0.2
            score -= weapon.ap_cost * 0.5
        elif profile is AIProfile.CAUTIOUS:
            score -= expected * 0.1
            score -= weapon.energy_cost * 0.3
        elif profile in (AIProfile.SKIRMISHER, AIProfile.FLANKER):
            score += (weapon.max_range - weapon.min_range) * 0.5
            if expected > target_hull and weapon.ap_cost <= 1:
                score += 10
        elif profile is AIProfile.ANCHOR:
            if weapon.damage_type is DamageType.ENERGY:
                score += 12
        elif profile is AIProfile.VANGUARD:
            if weapon.ap_cost <= 1:
                score += 6

        return score, max(0.0, expected)

    def choose_best_weapon(self, ship: Ship, target: Ship) -> WeaponChoice | None:
        """Best weapon that can fire on ``target`` right now, or None."""

        distance = hex_distance(ship.position, target.position)
        best_choice = None
        best_score = -math.inf
        for index, weapon in enumerate(ship.weapons):
            if not weapon.in_range(distance):
                continue
            if not ship.can_fire_weapon(weapon, target):
                continue
            score, expected = self.evaluate_weapon_choice(ship, target, weapon)
            if score > best_score:
                best_score = score
                best_choice = WeaponChoice(index=index, score=score, expected_damage=expected)
        return best_choice

    def select_best_attack(self, ship: Ship) -> AttackPlan | None:
        """Best (target, weapon) pair across all living opponents."""

        ai = self.rules.ai
        best_plan = None
        best_score = -math.inf
        for target in self.opponents(ship):
            if ai.ai_requires_line_of_sight and not has_line_of_sight(ship, target, self.grid):
                continue
            choice = self.choose_best_weapon(ship, target)
            if choice is None:
                continue
            total = choice.score + self.evaluate_target_score(ship, target) * ai.target_score_weight
            if total > best_score:
                best_score = total
                best_plan = AttackPlan(target=target, weapon_choice=choice, total_score=total)
        return best_plan

    # --- Abilities --------------------------------------------------------------

    def _usable_ability(self, ship: Ship, key: AbilityKey) -> int | None:
        context = AbilityContext(ship=ship, grid=self.grid)
        for index, ability in enumerate(ship.abilities):
            if ability.key != key:
                continue
            if ship.can_use_ability(ability) and ability.spec.is_available(context, self.rules):
                return index
        return None

    def choose_ability(self, ship: Ship, target: Ship | None) -> int | None:
        """Pick at most one ability for this turn, in priority order."""

        if not ship.abilities:
            return None

        ai = self.rules.ai
        hull_ratio = ship.hull_ratio
        shield_ratio = ship.shield_ratio
        profile = ship.ai_profile

        surge = self._usable_ability(ship, AbilityKey.SHIELD_SURGE)
        if surge is not None and (
            shield_ratio < ai.surge_shield_ratio
            or hull_ratio < ai.surge_hull_ratio
            or profile is AIProfile.ANCHOR
        ):
            return surge

        evasive = self._usable_ability(ship, AbilityKey.EVASIVE_MANEUVER)
        if evasive is not None:
            threshold = (
                ai.evasive_hull_ratio_cautious
                if profile is AIProfile.CAUTIOUS
                else ai.evasive_hull_ratio
            )
            heavy_hitter = target is not None and any(
                weapon.damage > ai.evasive_threat_damage for weapon in target.weapons
            )
            if hull_ratio < threshold or heavy_hitter:
                return evasive

        overcharge = self._usable_ability(ship, AbilityKey.WEAPON_OVERCHARGE)
        if (
            overcharge is not None
            and target is not None
            and profile is not AIProfile.CAUTIOUS
            and hull_ratio > ai.overcharge_hull_ratio
            and ship.energy > ship.max_energy * ai.overcharge_energy_ratio
        ):
            ap_after = ship.action_points - ship.abilities[overcharge].ap_cost
            available = self.count_weapons_in_range(ship, target).available
            if ap_after >= 1 and (available > 0 or ap_after >= 2):  # noqa: PLR2004
                return overcharge

        repair = self._usable_ability(ship, AbilityKey.EMERGENCY_REPAIR)
        if repair is not None and hull_ratio < ai.repair_hull_ratio:
            return repair

        emp = self._usable_ability(ship, AbilityKey.EMP_BURST)
        if emp is not None and profile is not AIProfile.CAUTIOUS:
            return emp

        return None

    # --- Positioning ------------------------------------------------------------

    def is_retreating(self, ship: Ship) -> bool:
        """Low hull and low shield; thresholds depend on the profile."""

        ai = self.rules.ai
        profile = ship.ai_profile
        if profile is AIProfile.AGGRESSIVE:
            hull_threshold = ai.retreat_hull_ratio_aggressive
        elif profile is AIProfile.ANCHOR:
            hull_threshold = ai.retreat_hull_ratio_anchor
        elif profile is AIProfile.CAUTIOUS:
            hull_threshold = ai.retreat_hull_ratio_cautious
        else:
            hull_threshold = ai.retreat_hull_ratio
        shield_threshold = (
            ai.retreat_shield_ratio_aggressive
            if profile is AIProfile.AGGRESSIVE
            else ai.retreat_shield_ratio
        )
        return ship.hull_ratio < hull_threshold and ship.shield_ratio < shield_threshold

    def compute_cluster_penalty(self, position: HexCoord, focus: HexCoord | None) -> float:
        if focus is None:
            return 0.0
        ai = self.rules.ai
        distance = hex_distance(position, focus)
        if distance >= ai.cluster_radius:
            return 0.0
        return (ai.cluster_radius - distance) * ai.cluster_penalty

    def wants_to_move(self, ship: Ship, target: Ship) -> bool:
        """Whether repositioning is mandatory or a worthwhile improvement."""

        if not ship.weapons:
            return False

        ai = self.rules.ai
        weapon = ship.weapons[0]
        distance = hex_distance(ship.position, target.position)
        retreat = self.is_retreating(ship)
        can_attack_here = weapon.in_range(distance)

        should_consider = retreat or not can_attack_here or ship.action_points >= ai.spare_ap_threshold
        if not should_consider or ship.action_points < ai.min_ap_to_move:
            return False

        optimal = weapon.optimal_range
        if retreat:
            must_move = distance <= weapon.max_range - 1
            could_improve = distance <= weapon.max_range and ship.action_points >= ai.min_ap_to_move
        else:
            must_move = not can_attack_here
            could_improve = (
                abs(distance - optimal) > ai.optimal_range_tolerance
                and ship.action_points >= ai.spare_ap_threshold
            )
        return must_move or could_improve

    def score_position(  # noqa: PLR0913
        self,
        ship: Ship,
        target: Ship,
        weapon: Weapon,
        position: HexCoord,
        cost: float,
        retreat: bool,
    ) -> float:
        """Desirability of ending movement on ``position``."""

        ai = self.rules.ai
        profile = ship.ai_profile
        optimal = weapon.optimal_range
        current_distance = hex_distance(ship.position, target.position)
        dist = hex_distance(position, target.position)

        if weapon.in_range(dist):
            score = ai.in_band_score - abs(dist - optimal) * ai.band_offset_penalty
        elif dist < weapon.max_range + ai.near_band_margin:
            score = ai.near_band_score - (dist - weapon.max_range) * ai.near_band_penalty
        else:
            score = -dist * ai.far_distance_penalty

        if not retreat and current_distance > weapon.max_range:
            weight = (
                ai.closing_bonus_aggressive if profile is AIProfile.AGGRESSIVE else ai.closing_bonus
            )
            score += (current_distance - dist) * weight

        if retreat:
            score += (dist - current_distance) * ai.retreat_distance_bonus
            if dist <= weapon.max_range:
                score -= (weapon.max_range - dist) * ai.retreat_in_range_penalty

        if profile is AIProfile.FLANKER:
            score -= abs(dist - optimal) * ai.flanker_band_penalty
            score -= self.compute_cluster_penalty(position, target.position)
        if profile is AIProfile.ANCHOR:
            score -= dist * ai.anchor_distance_penalty

        if ship.action_points - cost < weapon.ap_cost:
            score -= ai.no_attack_after_move_penalty

        return score

    def choose_position(self, ship: Ship, target: Ship) -> HexCoord | None:
        """Best reachable hex to move to, or None to stay put."""

        if not self.wants_to_move(ship, target):
            return None

        weapon = ship.weapons[0]
        retreat = self.is_retreating(ship)
        best_hex = None
        best_score = -math.inf
        for candidate in self.grid.get_reachable_hexes(ship):
            score = self.score_position(ship, target, weapon, candidate.hex, candidate.cost, retreat)
            if score > best_score:
                best_score = score
                best_hex = candidate.hex

        if best_hex is None or best_hex == ship.position:
            return None
        logger.debug("%s repositions to %s (score %.1f)", ship.id, best_hex, best_score)
        return best_hex

    def plan_fallback_advance(self, ship: Ship) -> list[HexCoord] | None:
        """Truncated path toward the best target when no attack is possible.

        The target hex itself is occupied, so the cheapest path to a free
        neighbour is used; half of it (at least one step, at most the AP left)
        is returned.
        """

        if ship.action_points <= 0:
            return None
        candidates = self.opponents(ship)
        target = self.choose_best_target(ship, candidates)
        if target is None:
            return None

        path = self.grid.find_path(ship.position, target.position, ship)
        if not path:
            path = None
            best_length = math.inf
            for neighbor in hex_neighbors(target.position):
                if not self.grid.is_valid_hex(neighbor) or self.grid.is_blocked(neighbor):
                    continue
                candidate = self.grid.find_path(ship.position, neighbor, ship)
                if candidate and len(candidate) < best_length:
                    best_length = len(candidate)
                    path = candidate

        if not path:
            return None

        steps = min(ship.action_points, max(1, len(path) // 2))
        return path[:steps] or None
