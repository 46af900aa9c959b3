"""CLI entry point."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from jumpmap.config.schema import AppConfig
from jumpmap.errors import ConfigError, JumpMapError
from jumpmap.hydra_utils import (
    DEFAULT_CONFIG_NAME,
    DEFAULT_CONFIG_PATH,
    compose_config,
    format_config,
    load_app_config,
    load_config,
)
from jumpmap.io_utils import dump_json, write_json_atomic
from jumpmap.logging_utils import (
    DEFAULT_LOGGER_NAME,
    configure_logging,
    log_exception,
    resolve_log_level,
    run_with_error_handling,
)
from jumpmap.pipeline import build_from_file

_SUBCOMMANDS: Sequence[str] = ("help", "cfg", "build")


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config-path",
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to the Hydra config directory.",
    )
    parser.add_argument(
        "--config-name",
        default=DEFAULT_CONFIG_NAME,
        help="Hydra config name (without extension).",
    )


def _cfg_handler(args: argparse.Namespace) -> None:
    cfg = compose_config(
        config_path=args.config_path,
        config_name=args.config_name,
        overrides=args.overrides,
    )
    output = format_config(cfg)
    print(output, end="")


def _register_help_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    parser: argparse.ArgumentParser,
) -> None:
    def _handler(_args: argparse.Namespace) -> None:
        parser.print_help()

    help_parser = subparsers.add_parser(
        "help",
        help="Show top-level help.",
        description="Show top-level help.",
    )
    help_parser.set_defaults(handler=_handler)


def _register_cfg_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    cfg_parser = subparsers.add_parser(
        "cfg",
        help="Compose and print Hydra config.",
        description="Compose and print Hydra config.",
    )
    _add_config_arguments(cfg_parser)
    cfg_parser.add_argument(
        "overrides",
        nargs=argparse.REMAINDER,
        help="Hydra overrides, after all options (ex: grouping.split_by_region=false).",
    )
    cfg_parser.set_defaults(handler=_cfg_handler)


def _load_build_config(args: argparse.Namespace) -> AppConfig:
    if args.config_file:
        if args.overrides:
            raise ConfigError("Hydra overrides cannot be combined with --config-file.")
        config = AppConfig.from_mapping(load_config(args.config_file))
    else:
        config = load_app_config(
            config_path=args.config_path,
            config_name=args.config_name,
            overrides=args.overrides,
        )
    if args.input:
        config.input = args.input
    if args.output:
        config.output = args.output
    return config


def _build_handler(args: argparse.Namespace) -> None:
    config = _load_build_config(args)
    logging.getLogger(DEFAULT_LOGGER_NAME).setLevel(resolve_log_level(config.log_level))
    if not config.input:
        raise ConfigError(
            "No input file configured.",
            user_message="No input file given; pass --input or set input=... .",
        )

    result = build_from_file(config.input, config)
    if config.output:
        output_path = Path(config.output)
        write_json_atomic(output_path, result.graph)
        logging.getLogger(DEFAULT_LOGGER_NAME).info("Wrote graph to %s", output_path)
    else:
        print(dump_json(result.graph, indent=None))


def _register_build_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    build_parser = subparsers.add_parser(
        "build",
        help="Build the station coverage graph from a systems file.",
        description=(
            "Build the station coverage graph from a JSON-lines systems file "
            "and write node-link JSON."
        ),
    )
    build_parser.add_argument(
        "--input",
        default=None,
        help="Systems file (one JSON object per line, or a JSON array).",
    )
    build_parser.add_argument(
        "--output",
        default=None,
        help="Graph JSON output path (stdout when omitted).",
    )
    build_parser.add_argument(
        "--config-file",
        default=None,
        help="Standalone YAML config file used instead of Hydra composition.",
    )
    _add_config_arguments(build_parser)
    build_parser.add_argument(
        "overrides",
        nargs=argparse.REMAINDER,
        help="Hydra overrides, after all options (ex: reachability.threshold=4.7e+16).",
    )
    build_parser.set_defaults(handler=_build_handler)


def _build_parser(subcommands: Iterable[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jumpmap",
        description="Station coverage graph builder.",
    )
    parser.add_argument(
        "--traceback",
        action="store_true",
        help="Show full traceback on errors.",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for name in subcommands:
        if name == "help":
            _register_help_subcommand(subparsers, parser)
        elif name == "cfg":
            _register_cfg_subcommand(subparsers)
        elif name == "build":
            _register_build_subcommand(subparsers)
    return parser


def _cli_main(
    *,
    cli_logger: logging.Logger,
    argv: Optional[Sequence[str]] = None,
) -> None:
    parser = _build_parser(_SUBCOMMANDS)
    args = parser.parse_args(argv)
    if not getattr(args, "command", None):
        parser.print_help()
        raise SystemExit(2)
    try:
        args.handler(args)
    except JumpMapError as exc:
        log_exception(cli_logger, exc, show_traceback=args.traceback)
        raise SystemExit(1) from None


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point with standard logging/error handling."""
    logger = configure_logging()
    run_with_error_handling(_cli_main, logger=logger, cli_logger=logger, argv=argv)


if __name__ == "__main__":
    main()
