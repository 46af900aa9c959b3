"""Structured config schema for the graph build."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
import math
from typing import Any

from jumpmap.catalog import DEFAULT_RATING_THRESHOLD, SecurityClass
from jumpmap.errors import ConfigError
from jumpmap.reachability import DEFAULT_JUMP_DISTANCE
from jumpmap.redundancy import DEFAULT_RATING_POLICY


def _section(cfg: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = cfg.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{name} config must be a mapping.")
    return value


def _coerce_int(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{label} must be an integer, got {value!r}.")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ConfigError(f"{label} must be an integer, got {value!r}.") from exc
    if isinstance(value, float) and not value.is_integer():
        raise ConfigError(f"{label} must be an integer, got {value!r}.")
    return number


def _coerce_positive_float(value: Any, label: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{label} must be a number, got {value!r}.")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ConfigError(f"{label} must be a number, got {value!r}.") from exc
    if not math.isfinite(number) or number <= 0.0:
        raise ConfigError(f"{label} must be positive and finite, got {value!r}.")
    return number


def _coerce_bool(value: Any, label: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    raise ConfigError(f"{label} must be a boolean, got {value!r}.")


def _coerce_str(value: Any, label: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"{label} must be a string, got {value!r}.")
    return value


@dataclass
class CatalogConfig:
    source_rating_threshold: int = DEFAULT_RATING_THRESHOLD
    sink_security_class: str = SecurityClass.NULL.value

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "CatalogConfig":
        threshold = _coerce_int(
            cfg.get("source_rating_threshold", DEFAULT_RATING_THRESHOLD),
            "catalog.source_rating_threshold",
        )
        raw_class = cfg.get("sink_security_class", SecurityClass.NULL.value)
        try:
            sink_class = SecurityClass.from_value(raw_class)
        except ValueError as exc:
            raise ConfigError(
                f"catalog.sink_security_class must be one of high, low, null; got {raw_class!r}."
            ) from exc
        return cls(source_rating_threshold=threshold, sink_security_class=sink_class.value)


@dataclass
class ReachabilityConfig:
    threshold: float = DEFAULT_JUMP_DISTANCE

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "ReachabilityConfig":
        return cls(
            threshold=_coerce_positive_float(
                cfg.get("threshold", DEFAULT_JUMP_DISTANCE),
                "reachability.threshold",
            )
        )


@dataclass
class GroupingConfig:
    rating_policy: str = DEFAULT_RATING_POLICY
    split_by_region: bool = True

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "GroupingConfig":
        policy = cfg.get("rating_policy", DEFAULT_RATING_POLICY)
        if not isinstance(policy, str) or not policy.strip():
            raise ConfigError("grouping.rating_policy must be a non-empty string.")
        return cls(
            rating_policy=policy,
            split_by_region=_coerce_bool(
                cfg.get("split_by_region", True),
                "grouping.split_by_region",
            ),
        )


@dataclass
class AppConfig:
    input: str = ""
    output: str = ""
    log_level: str = "INFO"
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    reachability: ReachabilityConfig = field(default_factory=ReachabilityConfig)
    grouping: GroupingConfig = field(default_factory=GroupingConfig)

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "AppConfig":
        if not isinstance(cfg, Mapping):
            raise ConfigError("config must be a mapping.")
        return cls(
            input=_coerce_str(cfg.get("input"), "input"),
            output=_coerce_str(cfg.get("output"), "output"),
            log_level=_coerce_str(cfg.get("log_level", "INFO"), "log_level") or "INFO",
            catalog=CatalogConfig.from_mapping(_section(cfg, "catalog")),
            reachability=ReachabilityConfig.from_mapping(_section(cfg, "reachability")),
            grouping=GroupingConfig.from_mapping(_section(cfg, "grouping")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = ["AppConfig", "CatalogConfig", "GroupingConfig", "ReachabilityConfig"]
