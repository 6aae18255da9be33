"""Combat rules: ships, grid, pathfinding, damage, abilities, AI and turn flow.

Submodules are imported directly (``from stellar_arena.domain.ship import
Ship``); nothing is re-exported here.
"""
