"""Hydra config composition helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Optional, Union

from hydra import compose, initialize_config_dir
from hydra.core.global_hydra import GlobalHydra
from omegaconf import OmegaConf

from jumpmap.config.schema import AppConfig
from jumpmap.errors import ConfigError
from jumpmap.io_utils import read_yaml_payload

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "configs"
DEFAULT_CONFIG_NAME = "default"


def _normalize_overrides(overrides: Optional[Sequence[str]]) -> list[str]:
    if not overrides:
        return []
    normalized = [item for item in overrides if item and item != "--"]
    options = [item for item in normalized if item.startswith("--")]
    if options:
        raise ConfigError(
            f"Options must come before Hydra overrides: {' '.join(options)}",
            context={"overrides": normalized},
        )
    return normalized


def _normalize_config_name(config_name: str) -> str:
    if config_name.endswith((".yaml", ".yml")):
        return Path(config_name).stem
    return config_name


def compose_config(
    *,
    config_path: Union[Path, str] = DEFAULT_CONFIG_PATH,
    config_name: str = DEFAULT_CONFIG_NAME,
    overrides: Optional[Sequence[str]] = None,
) -> Any:
    config_dir = Path(config_path)
    if not config_dir.is_absolute():
        config_dir = (Path.cwd() / config_dir).resolve()
    if not config_dir.exists():
        raise ConfigError(f"Config directory not found: {config_dir}")
    overrides = _normalize_overrides(overrides)
    if GlobalHydra.instance().is_initialized():
        GlobalHydra.instance().clear()
    try:
        with initialize_config_dir(config_dir=str(config_dir), version_base=None):
            return compose(
                config_name=_normalize_config_name(config_name),
                overrides=overrides,
            )
    except Exception as exc:
        raise ConfigError(f"Failed to compose config from {config_dir}: {exc}") from exc


def resolve_config(cfg: Any) -> dict[str, Any]:
    if not OmegaConf.is_config(cfg):
        if isinstance(cfg, Mapping):
            return dict(cfg)
        raise ConfigError("config must be a mapping or OmegaConf config.")
    resolved = OmegaConf.to_container(
        cfg,
        resolve=True,
        throw_on_missing=False,
    )
    if not isinstance(resolved, dict):
        raise ConfigError("Resolved config must be a mapping.")
    return resolved


def format_config(cfg: Any) -> str:
    if not OmegaConf.is_config(cfg):
        cfg = OmegaConf.create(resolve_config(cfg))
    return OmegaConf.to_yaml(cfg, resolve=True)


def load_config(path: Union[str, Path]) -> dict[str, Any]:
    """Read a standalone YAML config file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config not found: {path}")
    try:
        payload = read_yaml_payload(
            path,
            error_message=f"Invalid YAML in {path}.",
            error_cls=ValueError,
        )
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Failed to load config from {path}: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Config in {path} must be a mapping.")
    return dict(payload)


def load_app_config(
    *,
    config_path: Union[Path, str] = DEFAULT_CONFIG_PATH,
    config_name: str = DEFAULT_CONFIG_NAME,
    overrides: Optional[Sequence[str]] = None,
) -> AppConfig:
    cfg = compose_config(
        config_path=config_path,
        config_name=config_name,
        overrides=overrides,
    )
    return AppConfig.from_mapping(resolve_config(cfg))


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_CONFIG_NAME",
    "compose_config",
    "format_config",
    "load_app_config",
    "load_config",
    "resolve_config",
]
