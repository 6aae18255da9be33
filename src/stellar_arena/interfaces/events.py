"""Combat Event Protocol Interfaces.

This module defines the protocols for the external collaborators that
receive notifications from the combat core: combat logs and renderers.
The core never requires a response from either.
"""

from typing import Protocol

from stellar_arena.domain.events import CombatEvent
from stellar_arena.utils.hex_math import HexCoord


class ICombatEventSink(Protocol):
    """Protocol for anything that consumes combat events.

    :class:`stellar_arena.domain.events.CombatLog` is the in-memory
    implementation; a UI combat log or a statistics collector can stand in.
    """

    def record(self, event: CombatEvent) -> None:
        """Receive one combat event.

        Args:
            event: The event emitted by the combat core
        """
        ...


class IRenderer(Protocol):
    """Protocol for presentation hooks fired by abilities and attacks."""

    def add_effect(self, effect: str, position: HexCoord) -> None:
        """Queue a visual effect.

        Args:
            effect: Effect name (e.g. 'shield_surge', 'explosion', 'beam')
            position: Hex where the effect is anchored
        """
        ...
