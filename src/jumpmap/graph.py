"""Node-link graph of station groups and target groups for the map viewer."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import networkx as nx

from jumpmap.catalog import System
from jumpmap.groups import GroupKey, SourceGroup
from jumpmap.targets import TargetConsolidation, TargetGroup

STATION_PREFIX = "station:"
TARGET_PREFIX = "target:"
NO_REDUNDANCY = "<none>"
_ID_SPECIALS = ("\\", ",", ":")


def _escape_id_part(text: str) -> str:
    for char in _ID_SPECIALS:
        text = text.replace(char, "\\" + char)
    return text


def station_node_id(group: SourceGroup) -> str:
    """``station:`` plus the comma-joined main names, each escaped."""
    return STATION_PREFIX + ",".join(_escape_id_part(name) for name in group.key)


def target_node_id(group: TargetGroup) -> str:
    names = ", ".join(
        _escape_id_part(name) for name in sorted(system.name for system in group.members)
    )
    if group.region:
        return f"{TARGET_PREFIX}{_escape_id_part(group.region)}:{names}"
    return f"{TARGET_PREFIX}{names}"


def centroid(systems: Iterable[System]) -> dict[str, float]:
    members = list(systems)
    if not members:
        return {"x": 0.0, "y": 0.0, "z": 0.0}
    count = float(len(members))
    return {
        "x": sum(system.x for system in members) / count,
        "y": sum(system.y for system in members) / count,
        "z": sum(system.z for system in members) / count,
    }


def _station_attrs(group: SourceGroup) -> dict[str, Any]:
    redundancies = ", ".join(sorted(system.name for system in group.redundant))
    return {
        "kind": "station",
        "name": f"main: {group.label}\nredundant: {redundancies or NO_REDUNDANCY}",
        "stationRating": group.rating,
        "count": len(group.targets),
        "center": centroid(group.main),
    }


def _target_attrs(group: TargetGroup) -> dict[str, Any]:
    label = f"({group.region}) {group.name}" if group.region else group.name
    return {
        "kind": "target",
        "name": label,
        "region": group.region,
        "count": len(group.members),
        "center": centroid(group.members),
    }


def build_graph_model(
    source_groups: Mapping[GroupKey, SourceGroup],
    consolidation: TargetConsolidation,
) -> nx.DiGraph:
    """Station-group to target-group graph with one edge per group pair."""
    graph = nx.DiGraph()
    graph.graph.update(
        {
            "bipartite": "station-target",
            "edge_direction": "station_to_target",
        }
    )
    for key in sorted(source_groups):
        group = source_groups[key]
        station_id = station_node_id(group)
        graph.add_node(station_id, **_station_attrs(group))
        for target in sorted(group.targets, key=lambda system: system.name):
            target_group = consolidation.group_of(target)
            target_id = target_node_id(target_group)
            if target_id not in graph:
                graph.add_node(target_id, **_target_attrs(target_group))
            graph.add_edge(station_id, target_id)
    return graph


def build_graph(
    source_groups: Mapping[GroupKey, SourceGroup],
    consolidation: TargetConsolidation,
) -> dict[str, Any]:
    """Serialize the group graph as node-link JSON (``nodes`` and ``links``)."""
    graph = build_graph_model(source_groups, consolidation)
    return nx.node_link_data(graph, edges="links")


__all__ = [
    "build_graph",
    "build_graph_model",
    "centroid",
    "station_node_id",
    "target_node_id",
]
