"""Exceptions raised while loading systems and building the coverage graph.

Each error carries a terse ``user_message`` for the CLI and an optional
``context`` mapping that is only written to the log.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional


class JumpMapError(Exception):
    """Failure the CLI reports without a traceback."""

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.user_message = message if user_message is None else user_message
        self.context = dict(context) if context else {}

    def log_message(self) -> str:
        if not self.context:
            return str(self)
        return f"{self}: {self.context}"


class ConfigError(JumpMapError):
    """Bad threshold, policy name, override or config file."""


class InputError(JumpMapError):
    """The systems file is missing or unreadable."""


class ParseError(JumpMapError):
    """A system record or the file holding it is malformed."""


class DuplicateEntityError(JumpMapError):
    """Two records name the same system."""


__all__ = [
    "JumpMapError",
    "ConfigError",
    "InputError",
    "ParseError",
    "DuplicateEntityError",
]
