"""Source-to-sink reachability within the jump distance."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
import logging
import math

from jumpmap.catalog import System
from jumpmap.errors import ConfigError
from jumpmap.spatial import SpatialIndex

logger = logging.getLogger(__name__)

# 7 light-years in meters.
DEFAULT_JUMP_DISTANCE = 6.622512e16


@dataclass(frozen=True)
class Reachability:
    """Reachability pairs stored in both directions."""

    threshold: float
    by_source: Mapping[System, frozenset[System]]
    by_sink: Mapping[System, frozenset[System]]

    def targets_of(self, source: System) -> frozenset[System]:
        return self.by_source.get(source, frozenset())

    def sources_of(self, sink: System) -> frozenset[System]:
        return self.by_sink.get(sink, frozenset())

    def coverage(self, source: System) -> int:
        return len(self.targets_of(source))

    @property
    def sources(self) -> frozenset[System]:
        return frozenset(self.by_source)

    @property
    def pair_count(self) -> int:
        return sum(len(targets) for targets in self.by_source.values())

    def pairs(self) -> Iterator[tuple[System, System]]:
        for source, targets in self.by_source.items():
            for target in targets:
                yield source, target


def _validate_threshold(
    threshold: float,
    source_index: SpatialIndex,
    sink_index: SpatialIndex,
) -> float:
    if source_index.cell_size != sink_index.cell_size:
        raise ConfigError(
            "source and sink indexes must share a cell size "
            f"({source_index.cell_size} != {sink_index.cell_size})."
        )
    try:
        value = float(threshold)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"threshold must be a number, got {threshold!r}.") from exc
    if not math.isfinite(value) or value <= 0.0:
        raise ConfigError(f"threshold must be positive and finite, got {threshold!r}.")
    if value > source_index.cell_size:
        raise ConfigError(
            f"threshold {value} exceeds the index cell size {source_index.cell_size}; "
            "pairs across non-adjacent cubes would be missed."
        )
    return value


def compute(
    source_index: SpatialIndex,
    sink_index: SpatialIndex,
    threshold: float,
) -> Reachability:
    """Link every source to the sinks strictly closer than ``threshold``."""
    threshold = _validate_threshold(threshold, source_index, sink_index)
    threshold_sq = threshold * threshold

    by_source: dict[System, set[System]] = {}
    by_sink: dict[System, set[System]] = {}
    candidates = 0
    for key in source_index.keys():
        search_cubes = sink_index.neighbors(key)
        if not search_cubes:
            continue
        for source in source_index.members(key):
            for search_key in search_cubes:
                for sink in sink_index.members(search_key):
                    candidates += 1
                    if source.distance_sq(sink) < threshold_sq:
                        by_source.setdefault(source, set()).add(sink)
                        by_sink.setdefault(sink, set()).add(source)

    result = Reachability(
        threshold=threshold,
        by_source={source: frozenset(sinks) for source, sinks in by_source.items()},
        by_sink={sink: frozenset(sources) for sink, sources in by_sink.items()},
    )
    logger.debug(
        "Reachability: %d candidate pairs checked, %d kept.",
        candidates,
        result.pair_count,
    )
    return result


__all__ = ["DEFAULT_JUMP_DISTANCE", "Reachability", "compute"]
