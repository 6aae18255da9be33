"""Combat event records and the bounded in-memory combat log."""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass

from .enums import CombatEventKind, Team
from .rules_config import DEFAULT_RULES


@dataclass(frozen=True, slots=True)
class CombatEvent:
    """A notification emitted by the combat core.

    ``ship`` is the acting ship (attacker, mover, destroyed ship) and
    ``target`` the ship acted upon, both by display name.
    """

    kind: CombatEventKind
    round_number: int = 0
    ship: str | None = None
    team: Team | None = None
    target: str | None = None
    weapon: str | None = None
    ability: str | None = None
    hex_count: int = 0
    shield_damage: float = 0.0
    hull_damage: float = 0.0
    energy_damage: float = 0.0

    @property
    def message(self) -> str:  # noqa: PLR0911
        """Human readable log line."""

        kind = self.kind
        if kind is CombatEventKind.ROUND_START:
            return f"═══ Round {self.round_number} ═══"
        if kind is CombatEventKind.TURN_START:
            return f"Turn {self.round_number}: {self.ship}'s turn begins"
        if kind is CombatEventKind.MOVEMENT:
            return f"{self.ship} moved {self.hex_count} hexes"
        if kind is CombatEventKind.DRIFT:
            return f"{self.ship} drifted {self.hex_count} hexes"
        if kind is CombatEventKind.WEAPON_FIRE:
            return f"{self.ship} fires {self.weapon} at {self.target}"
        if kind is CombatEventKind.DAMAGE:
            return _damage_message(self.target, self.shield_damage, self.hull_damage)
        if kind is CombatEventKind.EMP:
            return f"{self.target} lost {math.floor(self.energy_damage)} energy"
        if kind is CombatEventKind.ABILITY:
            return f"{self.ship} uses {self.ability}"
        if kind is CombatEventKind.ENERGY_ALLOCATION:
            return f"{self.ship} reallocated energy"
        if kind is CombatEventKind.DESTRUCTION:
            return f"{self.ship} DESTROYED!"
        if kind is CombatEventKind.VICTORY:
            return "VICTORY! All enemy ships destroyed!"
        return "DEFEAT! All player ships destroyed!"


def _damage_message(target: str | None, shield_damage: float, hull_damage: float) -> str:
    shield = math.floor(shield_damage)
    hull = math.floor(hull_damage)
    if shield_damage > 0 and hull_damage > 0:
        return f"{target} took {shield} shield damage and {hull} hull damage"
    if shield_damage > 0:
        return f"{target}'s shields absorbed {shield} damage"
    if hull_damage > 0:
        return f"{target} took {hull} hull damage"
    return f"{target} took no damage"


class CombatLog:
    """Keeps the most recent events; older entries fall off the front."""

    def __init__(self, capacity: int = DEFAULT_RULES.battle.combat_log_capacity) -> None:
        self.capacity = capacity
        self._entries: deque[CombatEvent] = deque(maxlen=capacity)

    def record(self, event: CombatEvent) -> None:
        self._entries.append(event)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CombatEvent]:
        return iter(self._entries)

    @property
    def entries(self) -> list[CombatEvent]:
        return list(self._entries)

    def messages(self) -> list[str]:
        return [event.message for event in self._entries]

    def of_kind(self, kind: CombatEventKind) -> list[CombatEvent]:
        return [event for event in self._entries if event.kind is kind]

    def clear(self) -> None:
        self._entries.clear()
