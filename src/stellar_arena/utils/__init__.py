"""Utility functions for the Stellar Arena combat core."""

from stellar_arena.utils.hex_math import HexCoord, HexLayout, hex_distance, hex_line, hex_neighbors
from stellar_arena.utils.rng import RandomSource, generate_seed

__all__ = [
    "HexCoord",
    "HexLayout",
    "RandomSource",
    "generate_seed",
    "hex_distance",
    "hex_line",
    "hex_neighbors",
]
