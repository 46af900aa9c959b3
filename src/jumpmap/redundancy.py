"""Find neighboring stations made redundant by a stronger station."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Optional, Union

from jumpmap.catalog import System
from jumpmap.reachability import Reachability
from jumpmap.registry import Registry, register, resolve_rating_policy

RatingPolicy = Callable[[System, System], bool]

DEFAULT_RATING_POLICY = "at_most"


def rating_at_most(candidate: System, station: System) -> bool:
    return candidate.station_rating <= station.station_rating


def rating_ignored(candidate: System, station: System) -> bool:
    return True


register("rating_policy", "at_most", rating_at_most)
register("rating_policy", "ignore", rating_ignored)


@dataclass(frozen=True)
class Redundancy:
    """Verified neighbors of one station.

    ``main`` holds neighbors with the same targets; ``redundant`` holds
    neighbors whose targets are a strict subset. The station itself is in
    neither.
    """

    main: frozenset[System]
    redundant: frozenset[System]


def _resolve_policy(
    policy: Union[str, RatingPolicy, None],
    registry: Optional[Registry],
) -> RatingPolicy:
    if policy is None:
        policy = DEFAULT_RATING_POLICY
    if isinstance(policy, str):
        return resolve_rating_policy(policy, registry=registry)
    return policy


def find_candidates(
    reach: Reachability,
    station: System,
    policy: RatingPolicy,
) -> set[System]:
    """Stations sharing a target with ``station`` that might be subsumed by it.

    Passing this filter is necessary but not sufficient: a smaller target
    count does not imply the targets are a subset.
    """
    targets = reach.targets_of(station)
    coverage = len(targets)
    candidates: set[System] = set()
    seen: set[System] = {station}
    for target in targets:
        for neighbor in reach.sources_of(target):
            if neighbor in seen:
                continue
            seen.add(neighbor)
            if reach.coverage(neighbor) <= coverage and policy(neighbor, station):
                candidates.add(neighbor)
    return candidates


def find_redundant_neighbors(
    reach: Reachability,
    station: System,
    policy: Union[str, RatingPolicy, None] = None,
    *,
    registry: Optional[Registry] = None,
) -> Redundancy:
    rating_policy = _resolve_policy(policy, registry)
    targets = reach.targets_of(station)
    main: set[System] = set()
    redundant: set[System] = set()
    for neighbor in find_candidates(reach, station, rating_policy):
        neighbor_targets = reach.targets_of(neighbor)
        if not neighbor_targets <= targets:
            continue
        if len(neighbor_targets) == len(targets):
            main.add(neighbor)
        else:
            redundant.add(neighbor)
    return Redundancy(main=frozenset(main), redundant=frozenset(redundant))


def resolve(
    reach: Reachability,
    policy: Union[str, RatingPolicy, None] = None,
    *,
    registry: Optional[Registry] = None,
) -> dict[System, Redundancy]:
    """Redundancy of every station that reaches at least one target."""
    rating_policy = _resolve_policy(policy, registry)
    return {
        station: find_redundant_neighbors(reach, station, rating_policy)
        for station in reach.sources
    }


def redundant_systems(resolved: Mapping[System, Redundancy]) -> frozenset[System]:
    """Every station listed as redundant under some other station."""
    found: set[System] = set()
    for redundancy in resolved.values():
        found.update(redundancy.redundant)
    return frozenset(found)


__all__ = [
    "DEFAULT_RATING_POLICY",
    "RatingPolicy",
    "Redundancy",
    "find_candidates",
    "find_redundant_neighbors",
    "rating_at_most",
    "rating_ignored",
    "redundant_systems",
    "resolve",
]
