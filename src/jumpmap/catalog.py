"""System records and the validated catalog of sources and sinks."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
import json
import logging
import math
from typing import Any, Optional, Union

from jumpmap.errors import DuplicateEntityError, ParseError

logger = logging.getLogger(__name__)

DEFAULT_RATING_THRESHOLD = 2
HIGH_SECURITY_MIN = 0.5


class SecurityClass(str, Enum):
    HIGH = "high"
    LOW = "low"
    NULL = "null"

    @classmethod
    def from_value(cls, value: Any) -> "SecurityClass":
        if isinstance(value, SecurityClass):
            return value
        if value is None:
            return cls.NULL
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"unknown security class {value!r}")

    @classmethod
    def from_security(cls, security: float) -> "SecurityClass":
        """Classify a raw security status the way the game client does."""
        if security >= HIGH_SECURITY_MIN:
            return cls.HIGH
        if security > 0:
            return cls.LOW
        return cls.NULL


@dataclass(frozen=True)
class System:
    """A star system; equality and hashing use the unique name only."""

    name: str
    x: float = field(compare=False)
    y: float = field(compare=False)
    z: float = field(compare=False)
    security_class: SecurityClass = field(compare=False)
    station_rating: int = field(compare=False, default=0)
    region: Optional[str] = field(compare=False, default=None)
    security: Optional[float] = field(compare=False, default=None)

    @property
    def position(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def distance_sq(self, other: "System") -> float:
        dx = other.x - self.x
        dy = other.y - self.y
        dz = other.z - self.z
        return dx * dx + dy * dy + dz * dz


def _record_label(record: Mapping[str, Any]) -> str:
    name = record.get("name")
    if isinstance(name, str) and name.strip():
        return f"record {name!r}"
    return "record"


def _require_name(record: Mapping[str, Any]) -> str:
    name = record.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ParseError(
            "record is missing a non-empty 'name'.",
            context={"record": dict(record)},
        )
    return name


def _coerce_float(record: Mapping[str, Any], key: str) -> float:
    if key not in record or record.get(key) is None:
        raise ParseError(
            f"{_record_label(record)} is missing '{key}'.",
            context={"field": key},
        )
    value = record.get(key)
    if isinstance(value, bool):
        raise ParseError(
            f"{_record_label(record)} has non-numeric '{key}': {value!r}.",
            context={"field": key},
        )
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ParseError(
            f"{_record_label(record)} has non-numeric '{key}': {value!r}.",
            context={"field": key},
        ) from exc
    if not math.isfinite(number):
        raise ParseError(
            f"{_record_label(record)} has non-finite '{key}': {value!r}.",
            context={"field": key},
        )
    return number


def _coerce_rating(record: Mapping[str, Any]) -> int:
    value = record.get("stationRating")
    if value is None:
        raise ParseError(
            f"{_record_label(record)} is missing 'stationRating'.",
            context={"field": "stationRating"},
        )
    if isinstance(value, bool):
        raise ParseError(
            f"{_record_label(record)} has invalid 'stationRating': {value!r}.",
            context={"field": "stationRating"},
        )
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and value.strip().isdecimal():
        value = int(value.strip())
    if not isinstance(value, int) or value < 0:
        raise ParseError(
            f"{_record_label(record)} has invalid 'stationRating': {value!r}.",
            context={"field": "stationRating"},
        )
    return value


def _coerce_security_class(
    record: Mapping[str, Any],
    security: Optional[float],
) -> SecurityClass:
    if "securityClass" in record:
        try:
            return SecurityClass.from_value(record.get("securityClass"))
        except ValueError as exc:
            raise ParseError(
                f"{_record_label(record)} has invalid 'securityClass': "
                f"{record.get('securityClass')!r}.",
                context={"field": "securityClass"},
            ) from exc
    if security is not None:
        return SecurityClass.from_security(security)
    raise ParseError(
        f"{_record_label(record)} is missing 'securityClass'.",
        context={"field": "securityClass"},
    )


def _coerce_region(record: Mapping[str, Any]) -> Optional[str]:
    region = record.get("region")
    if region is None:
        return None
    if not isinstance(region, str):
        raise ParseError(
            f"{_record_label(record)} has non-string 'region': {region!r}.",
            context={"field": "region"},
        )
    return region or None


def parse_record(record: Mapping[str, Any]) -> System:
    """Validate one decoded record and build its System."""
    if not isinstance(record, Mapping):
        raise ParseError(f"record must be a JSON object, got {type(record).__name__}.")
    name = _require_name(record)
    security: Optional[float] = None
    if record.get("security") is not None:
        security = _coerce_float(record, "security")
    return System(
        name=name,
        x=_coerce_float(record, "x"),
        y=_coerce_float(record, "y"),
        z=_coerce_float(record, "z"),
        security_class=_coerce_security_class(record, security),
        station_rating=_coerce_rating(record),
        region=_coerce_region(record),
        security=security,
    )


def decode_records(lines: Iterable[str]) -> Iterator[dict[str, Any]]:
    """Decode line-delimited JSON, skipping blank lines."""
    for line_no, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ParseError(
                f"line {line_no} is not valid JSON: {exc.msg}.",
                context={"line": line_no},
            ) from exc
        if not isinstance(payload, dict):
            raise ParseError(
                f"line {line_no} must hold a JSON object.",
                context={"line": line_no},
            )
        yield payload


def _iter_mappings(
    records: Iterable[Union[Mapping[str, Any], str]],
) -> Iterator[Mapping[str, Any]]:
    for record in records:
        if isinstance(record, str):
            if not record.strip():
                continue
            yield from decode_records([record])
            continue
        yield record


@dataclass(frozen=True)
class Catalog:
    """Deduplicated systems split into source and sink populations."""

    systems: tuple[System, ...]
    sources: frozenset[System]
    sinks: frozenset[System]
    rating_threshold: int = DEFAULT_RATING_THRESHOLD
    sink_security_class: SecurityClass = SecurityClass.NULL

    @classmethod
    def load(
        cls,
        records: Iterable[Union[Mapping[str, Any], str]],
        *,
        rating_threshold: int = DEFAULT_RATING_THRESHOLD,
        sink_security_class: Union[SecurityClass, str, None] = SecurityClass.NULL,
    ) -> "Catalog":
        sink_class = SecurityClass.from_value(sink_security_class)
        by_name: dict[str, System] = {}
        for record in _iter_mappings(records):
            system = parse_record(record)
            if system.name in by_name:
                raise DuplicateEntityError(
                    f"Duplicate system name: {system.name}",
                    context={"name": system.name},
                )
            by_name[system.name] = system

        systems = tuple(by_name.values())
        sources = frozenset(
            system for system in systems if system.station_rating > rating_threshold
        )
        sinks = frozenset(
            system for system in systems if system.security_class is sink_class
        )
        logger.debug(
            "Catalog loaded: %d systems, %d sources, %d sinks.",
            len(systems),
            len(sources),
            len(sinks),
        )
        return cls(
            systems=systems,
            sources=sources,
            sinks=sinks,
            rating_threshold=rating_threshold,
            sink_security_class=sink_class,
        )

    def __len__(self) -> int:
        return len(self.systems)


__all__ = [
    "DEFAULT_RATING_THRESHOLD",
    "Catalog",
    "SecurityClass",
    "System",
    "decode_records",
    "parse_record",
]
