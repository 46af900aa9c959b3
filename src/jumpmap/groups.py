"""Station groups: main members sharing targets plus redundant members."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging

from networkx.utils import UnionFind

from jumpmap.catalog import System
from jumpmap.reachability import Reachability
from jumpmap.redundancy import Redundancy, redundant_systems

logger = logging.getLogger(__name__)

GroupKey = tuple[str, ...]


def group_key(systems: Iterable[System]) -> GroupKey:
    return tuple(sorted(system.name for system in systems))


@dataclass(frozen=True)
class SourceGroup:
    """Stations that reach the same targets.

    Every main member reaches exactly ``targets``. Redundant members reach a
    strict subset of ``targets`` with an equal or lower rating, so they never
    form a group of their own.
    """

    main: frozenset[System]
    redundant: frozenset[System]
    targets: frozenset[System]
    rating: int

    @property
    def key(self) -> GroupKey:
        return group_key(self.main)

    @property
    def label(self) -> str:
        return ",".join(self.key)


@dataclass(frozen=True)
class GroupBuildResult:
    groups: dict[GroupKey, SourceGroup]
    redundant: frozenset[System]
    candidate_count: int


def candidate_groups(
    reach: Reachability,
    resolved: Mapping[System, Redundancy],
) -> dict[System, SourceGroup]:
    """One group per station, anchored on that station."""
    candidates: dict[System, SourceGroup] = {}
    for station, redundancy in resolved.items():
        candidates[station] = SourceGroup(
            main=frozenset({station}) | redundancy.main,
            redundant=redundancy.redundant,
            targets=reach.targets_of(station),
            rating=station.station_rating,
        )
    return candidates


def _merge(groups: list[SourceGroup]) -> SourceGroup:
    if len(groups) == 1:
        return groups[0]
    main: set[System] = set()
    redundant: set[System] = set()
    for group in groups:
        main.update(group.main)
        redundant.update(group.redundant)
    return SourceGroup(
        main=frozenset(main),
        redundant=frozenset(redundant - main),
        targets=groups[0].targets,
        rating=max(group.rating for group in groups),
    )


def canonicalize_groups(groups: Iterable[SourceGroup]) -> dict[GroupKey, SourceGroup]:
    """Merge groups that share a main member and key them by main names.

    Main members of one group reach identical targets, so groups sharing any
    main member describe one equivalence class, however long the chain of
    shared members. The result has pairwise disjoint main sets, which makes
    the operation idempotent.
    """
    groups = [group for group in groups if group.main]
    forest = UnionFind()
    for group in groups:
        forest.union(*group.main)

    classes: dict[System, list[SourceGroup]] = {}
    for group in groups:
        root = forest[next(iter(group.main))]
        classes.setdefault(root, []).append(group)

    canonical: dict[GroupKey, SourceGroup] = {}
    for members in classes.values():
        merged = _merge(members)
        canonical[merged.key] = merged
    return canonical


def build_source_groups(
    reach: Reachability,
    resolved: Mapping[System, Redundancy],
) -> GroupBuildResult:
    """Drop groups anchored on redundant stations, then canonicalize the rest."""
    candidates = candidate_groups(reach, resolved)
    redundant = redundant_systems(resolved)
    survivors = [
        group for station, group in candidates.items() if station not in redundant
    ]
    groups = canonicalize_groups(survivors)
    logger.debug(
        "Station groups: %d candidates, %d redundant stations, %d groups.",
        len(candidates),
        len(redundant),
        len(groups),
    )
    return GroupBuildResult(
        groups=groups,
        redundant=redundant,
        candidate_count=len(candidates),
    )


__all__ = [
    "GroupBuildResult",
    "GroupKey",
    "SourceGroup",
    "build_source_groups",
    "candidate_groups",
    "canonicalize_groups",
    "group_key",
]
