"""Structured configuration."""

from jumpmap.config.schema import (
    AppConfig,
    CatalogConfig,
    GroupingConfig,
    ReachabilityConfig,
)

__all__ = ["AppConfig", "CatalogConfig", "GroupingConfig", "ReachabilityConfig"]
