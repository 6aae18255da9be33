"""
Hexagonal coordinate system mathematics for Stellar Arena.

This module implements the hex coordinate operations used by the combat grid.
It supports:
- Distance calculations between hexes
- Finding adjacent hexes in a stable direction order
- Line interpolation between hexes (line of sight)
- Mapping continuous drift vectors onto hex directions
- Pixel layout helpers for external renderers

Coordinate Systems:
-------------------
We use two coordinate systems:

1. Axial Coordinates (q, r) - for storage and representation
   - q: column coordinate
   - r: row coordinate
   - Used in HexCoord dataclass and as grid keys

2. Cube Coordinates (x, y, z) - for distance and interpolation
   - x, y, z: three coordinates with constraint x + y + z = 0
   - Distance is (|dx| + |dy| + |dz|) / 2
   - Conversion: x = q, z = r, y = -x - z

References:
-----------
Based on the excellent guide at: https://www.redblobgames.com/grids/hexagons/
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class HexCoord:
    """
    A hexagonal coordinate using axial coordinate system.

    Attributes:
        q: Column coordinate (horizontal axis)
        r: Row coordinate (diagonal axis)

    HexCoord is a value type: equality and hashing are structural, so it can
    be used directly as a dict key or set member. The canonical string form
    ``"q,r"`` is available through :attr:`key` for serialized records.

    Example:
        >>> origin = HexCoord(q=0, r=0)
        >>> neighbor = HexCoord(q=1, r=0)
        >>> hex_distance(origin, neighbor)
        1
        >>> neighbor.key
        '1,0'
    """

    q: int
    r: int

    def __hash__(self) -> int:
        """Make HexCoord hashable for use in sets and dicts."""
        return hash((self.q, self.r))

    def __str__(self) -> str:
        return self.key

    @property
    def key(self) -> str:
        """Canonical ``"q,r"`` string key."""
        return f"{self.q},{self.r}"

    @classmethod
    def from_key(cls, key: str) -> HexCoord:
        """
        Parse a canonical ``"q,r"`` key.

        Raises:
            ValueError: If the key is not two comma-separated integers

        Example:
            >>> HexCoord.from_key("-2,3")
            HexCoord(q=-2, r=3)
        """
        parts = key.split(",")
        if len(parts) != 2:  # noqa: PLR2004
            raise ValueError(f"Invalid hex key: '{key}'. Expected format: q,r")
        return cls(q=int(parts[0]), r=int(parts[1]))

    def distance_to(self, other: HexCoord) -> int:
        """Shortcut for :func:`hex_distance`."""
        return hex_distance(self, other)

    def neighbors(self) -> list[HexCoord]:
        """Shortcut for :func:`hex_neighbors`."""
        return hex_neighbors(self)


def axial_to_cube(coord: HexCoord) -> tuple[int, int, int]:
    """
    Convert axial coordinates (q, r) to cube coordinates (x, y, z).

    The conversion follows:
        x = q
        z = r
        y = -x - z

    Args:
        coord: A hex coordinate in axial system

    Returns:
        A tuple (x, y, z) representing cube coordinates

    Example:
        >>> x, y, z = axial_to_cube(HexCoord(q=1, r=2))
        >>> x, y, z
        (1, -3, 2)
    """
    x = coord.q
    z = coord.r
    y = -x - z
    return x, y, z


def cube_to_axial(x: int, y: int, z: int) -> HexCoord:  # noqa: ARG001
    """
    Convert cube coordinates (x, y, z) back to axial coordinates (q, r).

    The y parameter is accepted for API consistency with cube coordinates,
    but is not used in the conversion as it's redundant (y = -x - z).

    Example:
        >>> cube_to_axial(x=1, y=-3, z=2)
        HexCoord(q=1, r=2)
    """
    return HexCoord(q=x, r=z)


def hex_distance(a: HexCoord, b: HexCoord) -> int:
    """
    Calculate the distance between two hexes.

    The distance is the minimum number of hex steps to move from hex a to hex b:
        distance = (|dx| + |dy| + |dz|) / 2

    where dx, dy, dz are the differences in cube coordinates. The sum is always
    even for valid cube coordinates, so the result is an exact integer.

    Args:
        a: First hex coordinate
        b: Second hex coordinate

    Returns:
        The distance between the two hexes (non-negative integer)

    Example:
        >>> hex_distance(HexCoord(q=0, r=0), HexCoord(q=2, r=1))
        3
    """
    ax, ay, az = axial_to_cube(a)
    bx, by, bz = axial_to_cube(b)
    return (abs(ax - bx) + abs(ay - by) + abs(az - bz)) // 2


# Direction vectors for the 6 neighbors in axial coordinates.
# The order is part of the contract: pathfinding and the drift sectors index
# into it, so it must never change.
HEX_DIRECTIONS: tuple[tuple[int, int], ...] = (
    (1, 0),  # East
    (1, -1),  # Northeast
    (0, -1),  # Northwest
    (-1, 0),  # West
    (-1, 1),  # Southwest
    (0, 1),  # Southeast
)


def hex_neighbors(coord: HexCoord) -> list[HexCoord]:
    """
    Find all 6 adjacent hexes to the given hex.

    Neighbors are returned in :data:`HEX_DIRECTIONS` order:
    East, Northeast, Northwest, West, Southwest, Southeast.

    Args:
        coord: The center hex coordinate

    Returns:
        A list of 6 HexCoord objects representing the neighbors

    Example:
        >>> neighbors = hex_neighbors(HexCoord(q=0, r=0))
        >>> len(neighbors)
        6
        >>> neighbors[0]
        HexCoord(q=1, r=0)
    """
    return [HexCoord(q=coord.q + dq, r=coord.r + dr) for dq, dr in HEX_DIRECTIONS]


def hex_neighbor(coord: HexCoord, direction: int) -> HexCoord:
    """Return the neighbor of ``coord`` in direction index ``direction`` (mod 6)."""
    dq, dr = HEX_DIRECTIONS[direction % 6]
    return HexCoord(q=coord.q + dq, r=coord.r + dr)


def hex_direction_index(from_hex: HexCoord, to_hex: HexCoord) -> int | None:
    """
    Return the direction index of a single step between adjacent hexes.

    Returns:
        Index into :data:`HEX_DIRECTIONS`, or None if the hexes are not adjacent

    Example:
        >>> hex_direction_index(HexCoord(0, 0), HexCoord(0, 1))
        5
    """
    step = (to_hex.q - from_hex.q, to_hex.r - from_hex.r)
    try:
        return HEX_DIRECTIONS.index(step)
    except ValueError:
        return None


def opposite_direction(direction: int) -> int:
    """Return the direction index pointing the opposite way."""
    return (direction + 3) % 6


def nearest_direction(dq: float, dr: float) -> int | None:
    """
    Map a continuous axial vector onto the closest hex direction.

    The vector and each direction are compared in cube space (where the six
    directions are evenly spread) by dot product; the best-aligned direction
    wins and the lowest index wins exact ties.

    Args:
        dq: Vector component along q
        dr: Vector component along r

    Returns:
        Index into :data:`HEX_DIRECTIONS`, or None for a zero vector

    Example:
        >>> nearest_direction(0.8, 0.0)
        0
        >>> nearest_direction(-0.2, 1.5)
        5
        >>> nearest_direction(0.0, 0.0) is None
        True
    """
    if dq == 0 and dr == 0:
        return None

    vx, vy, vz = dq, -dq - dr, dr
    best_index = 0
    best_dot = -math.inf
    for index, (q, r) in enumerate(HEX_DIRECTIONS):
        dot = vx * q + vy * (-q - r) + vz * r
        if dot > best_dot:
            best_dot = dot
            best_index = index
    return best_index


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def hex_round(q: float, r: float) -> HexCoord:
    """
    Round fractional axial coordinates to the nearest hex.

    Each cube component is rounded independently, then the component with
    the largest rounding error is recomputed from the other two so the
    x + y + z = 0 constraint holds again.

    Example:
        >>> hex_round(0.6, 0.2)
        HexCoord(q=1, r=0)
    """
    x = q
    z = r
    y = -x - z

    rx = _round_half_up(x)
    ry = _round_half_up(y)
    rz = _round_half_up(z)

    x_diff = abs(rx - x)
    y_diff = abs(ry - y)
    z_diff = abs(rz - z)

    if x_diff > y_diff and x_diff > z_diff:
        rx = -ry - rz
    elif y_diff > z_diff:
        ry = -rx - rz
    else:
        rz = -rx - ry

    return HexCoord(q=rx, r=rz)


# Nudge applied to the line start so interpolated points never sit exactly on
# a hex edge, where rounding would be ambiguous.
_LINE_EPSILON_Q = 1e-6
_LINE_EPSILON_R = 2e-6


def hex_line(start: HexCoord, end: HexCoord) -> list[HexCoord]:
    """
    Get the line of hexes between two points, both endpoints included.

    Interpolates N + 1 points (N = distance) linearly and rounds each to the
    nearest hex. Consecutive hexes on the returned line are always adjacent.

    This is useful for:
    - Line of sight checks
    - Beam and projectile paths

    Args:
        start: First endpoint
        end: Second endpoint

    Returns:
        List of N + 1 hexes from start to end

    Example:
        >>> hex_line(HexCoord(0, 0), HexCoord(2, 0))
        [HexCoord(q=0, r=0), HexCoord(q=1, r=0), HexCoord(q=2, r=0)]
    """
    n = hex_distance(start, end)
    if n == 0:
        return [start]

    sq = start.q + _LINE_EPSILON_Q
    sr = start.r + _LINE_EPSILON_R
    eq = end.q + _LINE_EPSILON_Q
    er = end.r + _LINE_EPSILON_R

    results = []
    for i in range(n + 1):
        t = i / n
        results.append(hex_round(sq * (1 - t) + eq * t, sr * (1 - t) + er * t))
    return results


def hexes_in_range(center: HexCoord, n: int) -> list[HexCoord]:
    """
    Find all hexes within range n of the center hex (inclusive).

    The number of hexes follows the formula: 3n^2 + 3n + 1

    Args:
        center: The center hex coordinate
        n: The maximum distance (range)

    Returns:
        A list of HexCoord objects within the range

    Raises:
        ValueError: If n is negative

    Example:
        >>> len(hexes_in_range(HexCoord(q=0, r=0), n=1))
        7
    """
    if n < 0:
        msg = f"Range n must be non-negative, got {n}"
        raise ValueError(msg)

    hexes = []
    for dq in range(-n, n + 1):
        for dr in range(max(-n, -dq - n), min(n, -dq + n) + 1):
            hexes.append(HexCoord(q=center.q + dq, r=center.r + dr))
    return hexes


@dataclass(frozen=True)
class PixelPoint:
    """A point in renderer pixel space."""

    x: float
    y: float


class HexLayout:
    """
    Flat-top hex layout converting between hex and pixel coordinates.

    The combat core never draws anything; renderers use this to place ships
    and effects consistently with the core's coordinates.
    """

    # Forward (f*) and backward (b*) matrices for the flat-top orientation
    F0, F1, F2, F3 = 3.0 / 2.0, 0.0, math.sqrt(3.0) / 2.0, math.sqrt(3.0)
    B0, B1, B2, B3 = 2.0 / 3.0, 0.0, -1.0 / 3.0, math.sqrt(3.0) / 3.0
    START_ANGLE = 0.0

    def __init__(self, size: float, origin: PixelPoint) -> None:
        self.size = size
        self.origin = origin

    def hex_to_pixel(self, coord: HexCoord) -> PixelPoint:
        x = (self.F0 * coord.q + self.F1 * coord.r) * self.size
        y = (self.F2 * coord.q + self.F3 * coord.r) * self.size
        return PixelPoint(x=x + self.origin.x, y=y + self.origin.y)

    def pixel_to_hex(self, point: PixelPoint) -> HexCoord:
        px = (point.x - self.origin.x) / self.size
        py = (point.y - self.origin.y) / self.size
        q = self.B0 * px + self.B1 * py
        r = self.B2 * px + self.B3 * py
        return hex_round(q, r)

    def hex_corners(self, coord: HexCoord) -> list[PixelPoint]:
        center = self.hex_to_pixel(coord)
        corners = []
        for i in range(6):
            angle = 2.0 * math.pi * (self.START_ANGLE + i) / 6.0
            corners.append(
                PixelPoint(
                    x=center.x + self.size * math.cos(angle),
                    y=center.y + self.size * math.sin(angle),
                )
            )
        return corners
