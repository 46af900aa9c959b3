"""Uniform cube grid over system coordinates."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import itertools
import math

from jumpmap.catalog import System
from jumpmap.errors import ConfigError

CubeKey = tuple[int, int, int]

_NEIGHBOR_OFFSETS: tuple[CubeKey, ...] = tuple(
    itertools.product((-1, 0, 1), repeat=3)
)


def cube_key(system: System, cell_size: float) -> CubeKey:
    return (
        math.floor(system.x / cell_size),
        math.floor(system.y / cell_size),
        math.floor(system.z / cell_size),
    )


def _validate_cell_size(cell_size: float) -> float:
    try:
        value = float(cell_size)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"cell size must be a number, got {cell_size!r}.") from exc
    if not math.isfinite(value) or value <= 0.0:
        raise ConfigError(f"cell size must be positive and finite, got {cell_size!r}.")
    return value


@dataclass(frozen=True)
class SpatialIndex:
    """Systems bucketed into cubes of edge ``cell_size``.

    Only occupied cubes are stored. With the cell size equal to the search
    radius, every system within that radius of a point lies in the point's
    cube or one of its 26 neighbors.
    """

    cell_size: float
    cubes: dict[CubeKey, frozenset[System]]

    @classmethod
    def build(cls, systems: Iterable[System], cell_size: float) -> "SpatialIndex":
        cell_size = _validate_cell_size(cell_size)
        buckets: dict[CubeKey, set[System]] = {}
        for system in systems:
            buckets.setdefault(cube_key(system, cell_size), set()).add(system)
        cubes = {key: frozenset(members) for key, members in buckets.items()}
        return cls(cell_size=cell_size, cubes=cubes)

    def __len__(self) -> int:
        return len(self.cubes)

    def __contains__(self, key: object) -> bool:
        return key in self.cubes

    def keys(self) -> Iterator[CubeKey]:
        return iter(self.cubes)

    def members(self, key: CubeKey) -> frozenset[System]:
        return self.cubes.get(key, frozenset())

    def key_of(self, system: System) -> CubeKey:
        return cube_key(system, self.cell_size)

    def neighbors(self, key: CubeKey) -> set[CubeKey]:
        """Occupied cubes among ``key`` and its 26 surrounding cubes."""
        cx, cy, cz = key
        found: set[CubeKey] = set()
        for dx, dy, dz in _NEIGHBOR_OFFSETS:
            candidate = (cx + dx, cy + dy, cz + dz)
            if candidate in self.cubes:
                found.add(candidate)
        return found


__all__ = ["CubeKey", "SpatialIndex", "cube_key"]
