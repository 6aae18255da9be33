"""Protocol-based interfaces for the combat core's external collaborators.

This module exports the protocols the core emits to, enabling renderers,
combat logs and statistics collectors to be swapped in tests.
"""

from stellar_arena.interfaces.events import ICombatEventSink, IRenderer

__all__ = [
    "ICombatEventSink",
    "IRenderer",
]
