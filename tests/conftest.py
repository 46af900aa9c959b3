from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import pytest


def pytest_configure() -> None:
    src_root = Path(__file__).resolve().parents[1] / "src"
    src_path = str(src_root)
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


def make_record(
    name: str,
    x: float = 0.0,
    y: float = 0.0,
    z: float = 0.0,
    *,
    security_class: Optional[str] = "null",
    rating: int = 0,
    region: Optional[str] = "X",
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "name": name,
        "x": x,
        "y": y,
        "z": z,
        "securityClass": security_class,
        "stationRating": rating,
    }
    if region is not None:
        record["region"] = region
    return record


@pytest.fixture
def record_factory():
    return make_record


def make_reach(links):
    """Reachability from ``{source: [targets]}`` without any geometry."""
    from jumpmap.reachability import Reachability

    by_source = {source: frozenset(targets) for source, targets in links.items() if targets}
    by_sink: dict = {}
    for source, targets in by_source.items():
        for target in targets:
            by_sink.setdefault(target, set()).add(source)
    return Reachability(
        threshold=1.0,
        by_source=by_source,
        by_sink={sink: frozenset(sources) for sink, sources in by_sink.items()},
    )


@pytest.fixture
def reach_factory():
    return make_reach


@pytest.fixture
def system_factory():
    from jumpmap.catalog import parse_record

    def _make(name: str, rating: int = 0, region: Optional[str] = "X", **kwargs: Any):
        security_class = "low" if rating > 2 else "null"
        return parse_record(
            make_record(
                name,
                security_class=kwargs.pop("security_class", security_class),
                rating=rating,
                region=region,
                **kwargs,
            )
        )

    return _make
