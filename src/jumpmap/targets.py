"""Combine target systems covered by the same station groups."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from typing import Optional

from jumpmap.catalog import System
from jumpmap.groups import GroupKey, SourceGroup

logger = logging.getLogger(__name__)

CoverageKey = tuple[GroupKey, ...]


@dataclass(frozen=True)
class TargetGroup:
    region: Optional[str]
    members: frozenset[System]

    @property
    def name(self) -> str:
        return ", ".join(sorted(system.name for system in self.members))

    @property
    def identity(self) -> tuple[Optional[str], str]:
        return (self.region, self.name)


@dataclass(frozen=True)
class TargetConsolidation:
    groups: tuple[TargetGroup, ...]
    by_target: Mapping[System, TargetGroup]
    coverage: Mapping[System, CoverageKey]

    def group_of(self, target: System) -> TargetGroup:
        return self.by_target[target]


def covering_groups(
    source_groups: Mapping[GroupKey, SourceGroup],
) -> dict[System, CoverageKey]:
    """For each target, the sorted keys of the station groups reaching it."""
    linked: dict[System, set[GroupKey]] = {}
    for key, group in source_groups.items():
        for target in group.targets:
            linked.setdefault(target, set()).add(key)
    return {target: tuple(sorted(keys)) for target, keys in linked.items()}


def _common_region(members: set[System]) -> Optional[str]:
    regions = {system.region for system in members}
    if len(regions) == 1:
        return next(iter(regions))
    return None


def consolidate_targets(
    source_groups: Mapping[GroupKey, SourceGroup],
    *,
    split_by_region: bool = True,
) -> TargetConsolidation:
    """Merge targets with identical station-group coverage.

    With ``split_by_region`` targets only merge inside their own region.
    """
    coverage = covering_groups(source_groups)
    buckets: dict[tuple[Optional[str], CoverageKey], set[System]] = {}
    for target, coverage_key in coverage.items():
        region = target.region if split_by_region else None
        buckets.setdefault((region, coverage_key), set()).add(target)

    groups: list[TargetGroup] = []
    by_target: dict[System, TargetGroup] = {}
    for (region, _), members in buckets.items():
        if not split_by_region:
            region = _common_region(members)
        group = TargetGroup(region=region, members=frozenset(members))
        groups.append(group)
        for target in members:
            by_target[target] = group

    logger.debug(
        "Target groups: %d targets combined into %d groups.",
        len(coverage),
        len(groups),
    )
    return TargetConsolidation(
        groups=tuple(groups),
        by_target=by_target,
        coverage=coverage,
    )


__all__ = [
    "CoverageKey",
    "TargetConsolidation",
    "TargetGroup",
    "consolidate_targets",
    "covering_groups",
]
