import pytest

from jumpmap.config.schema import AppConfig
from jumpmap.errors import ConfigError
from jumpmap.hydra_utils import (
    DEFAULT_CONFIG_PATH,
    compose_config,
    format_config,
    load_app_config,
    load_config,
    resolve_config,
)
from jumpmap.reachability import DEFAULT_JUMP_DISTANCE


def test_defaults_match_packaged_config() -> None:
    config = load_app_config()

    assert config == AppConfig()
    assert config.reachability.threshold == pytest.approx(DEFAULT_JUMP_DISTANCE)
    assert config.catalog.source_rating_threshold == 2
    assert config.catalog.sink_security_class == "null"
    assert config.grouping.rating_policy == "at_most"
    assert config.grouping.split_by_region is True


def test_hydra_overrides_apply() -> None:
    config = load_app_config(
        overrides=[
            "reachability.threshold=4.7e+16",
            "grouping.split_by_region=false",
            "grouping.rating_policy=ignore",
            "catalog.source_rating_threshold=0",
        ]
    )

    assert config.reachability.threshold == pytest.approx(4.7e16)
    assert config.grouping.split_by_region is False
    assert config.grouping.rating_policy == "ignore"
    assert config.catalog.source_rating_threshold == 0


def test_unknown_override_key_raises_config_error() -> None:
    with pytest.raises(ConfigError):
        compose_config(overrides=["grouping.no_such_key=1"])


def test_missing_config_dir_raises_config_error(tmp_path) -> None:
    with pytest.raises(ConfigError) as exc:
        compose_config(config_path=tmp_path / "nowhere")

    assert "Config directory not found" in str(exc.value)


def test_format_config_renders_yaml() -> None:
    text = format_config(compose_config(config_path=DEFAULT_CONFIG_PATH))

    assert "reachability:" in text
    assert "rating_policy: at_most" in text


def test_resolve_config_accepts_plain_mapping() -> None:
    assert resolve_config({"a": 1}) == {"a": 1}


@pytest.mark.parametrize(
    "payload",
    [
        {"reachability": {"threshold": 0}},
        {"reachability": {"threshold": "far"}},
        {"catalog": {"source_rating_threshold": 2.5}},
        {"catalog": {"sink_security_class": "medium"}},
        {"grouping": {"split_by_region": "maybe"}},
        {"grouping": {"rating_policy": ""}},
        {"grouping": []},
        {"input": 3},
    ],
)
def test_invalid_values_raise_config_error(payload) -> None:
    with pytest.raises(ConfigError):
        AppConfig.from_mapping(payload)


def test_load_config_reads_yaml_file(tmp_path) -> None:
    path = tmp_path / "jumpmap.yaml"
    path.write_text(
        "reachability:\n  threshold: 12.5\ngrouping:\n  split_by_region: no\n",
        encoding="utf-8",
    )

    config = AppConfig.from_mapping(load_config(path))

    assert config.reachability.threshold == pytest.approx(12.5)
    assert config.grouping.split_by_region is False
    assert config.catalog.source_rating_threshold == 2


def test_load_config_missing_file(tmp_path) -> None:
    missing = tmp_path / "missing.yaml"

    with pytest.raises(ConfigError) as exc:
        load_config(missing)

    assert "Config not found" in str(exc.value)
    assert str(missing) in str(exc.value)


def test_options_after_overrides_raise_config_error() -> None:
    with pytest.raises(ConfigError) as exc:
        compose_config(overrides=["grouping.split_by_region=false", "--input", "x.jsonl"])

    assert "Options must come before Hydra overrides" in str(exc.value)
    assert "--input" in str(exc.value)
