"""End-to-end build: records in, coverage graph out."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from jumpmap import reachability, redundancy
from jumpmap.catalog import Catalog, decode_records
from jumpmap.config.schema import AppConfig
from jumpmap.errors import InputError, ParseError
from jumpmap.graph import build_graph
from jumpmap.groups import GroupBuildResult, build_source_groups
from jumpmap.reachability import Reachability
from jumpmap.spatial import SpatialIndex
from jumpmap.targets import TargetConsolidation, consolidate_targets

logger = logging.getLogger(__name__)

Record = Union[Mapping[str, Any], str]


@dataclass(frozen=True)
class BuildResult:
    catalog: Catalog
    reach: Reachability
    groups: GroupBuildResult
    targets: TargetConsolidation
    graph: dict[str, Any]


def read_records(path: Union[str, Path]) -> list[dict[str, Any]]:
    """Read systems from a JSON-lines file or a single JSON array."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InputError(
            f"Failed to read input {path}: {exc}",
            user_message=f"Cannot read input file: {path}",
            context={"path": str(path)},
        ) from exc
    except UnicodeDecodeError as exc:
        raise ParseError(
            f"{path} is not valid UTF-8 text: {exc.reason} at byte {exc.start}.",
            context={"path": str(path)},
        ) from exc

    if text.lstrip().startswith("["):
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(
                f"{path} is not a valid JSON array: {exc.msg}.",
                context={"path": str(path)},
            ) from exc
        records: list[dict[str, Any]] = []
        for index, entry in enumerate(payload):
            if not isinstance(entry, dict):
                raise ParseError(
                    f"{path} entry {index} must be a JSON object.",
                    context={"path": str(path), "index": index},
                )
            records.append(entry)
        return records
    return list(decode_records(text.splitlines()))


def build_coverage_graph(
    records: Iterable[Record],
    config: Optional[AppConfig] = None,
) -> BuildResult:
    config = config or AppConfig()
    threshold = config.reachability.threshold

    catalog = Catalog.load(
        records,
        rating_threshold=config.catalog.source_rating_threshold,
        sink_security_class=config.catalog.sink_security_class,
    )
    logger.info(
        "Loaded %d systems: %d stations, %d targets.",
        len(catalog),
        len(catalog.sources),
        len(catalog.sinks),
    )

    source_index = SpatialIndex.build(catalog.sources, threshold)
    sink_index = SpatialIndex.build(catalog.sinks, threshold)
    reach = reachability.compute(source_index, sink_index, threshold)
    logger.info(
        "Found %d station-target links from %d stations.",
        reach.pair_count,
        len(reach.by_source),
    )

    resolved = redundancy.resolve(reach, config.grouping.rating_policy)
    groups = build_source_groups(reach, resolved)
    logger.info(
        "Built %d station groups (%d redundant stations folded in).",
        len(groups.groups),
        len(groups.redundant),
    )

    targets = consolidate_targets(
        groups.groups,
        split_by_region=config.grouping.split_by_region,
    )
    logger.info(
        "Combined %d targets into %d target groups.",
        len(targets.by_target),
        len(targets.groups),
    )

    graph = build_graph(groups.groups, targets)
    logger.info(
        "Graph has %d nodes and %d links.",
        len(graph["nodes"]),
        len(graph["links"]),
    )
    return BuildResult(
        catalog=catalog,
        reach=reach,
        groups=groups,
        targets=targets,
        graph=graph,
    )


def build_from_file(
    path: Union[str, Path],
    config: Optional[AppConfig] = None,
) -> BuildResult:
    records = read_records(path)
    return build_coverage_graph(records, config)


__all__ = ["BuildResult", "build_coverage_graph", "build_from_file", "read_records"]
