"""
Popcorn Settings
================
Host configuration read from environment variables. CLI flags override
these values; the core (lexer, parser, interpreter) takes no configuration.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

FALSY = ("0", "false", "no", "off")


@dataclass
class Settings:
    """Runtime settings for the runner, REPL, server and LSP stub."""

    log_level: str = "WARNING"          # POPCORN_LOG_LEVEL
    color: bool = True                  # POPCORN_COLOR
    host: str = "127.0.0.1"             # POPCORN_HOST
    port: int = 3000                    # POPCORN_PORT
    ast_dump: Optional[str] = None      # POPCORN_AST_DUMP (path)
    recursion_limit: int = 10000        # POPCORN_RECURSION_LIMIT

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            log_level=env.get("POPCORN_LOG_LEVEL", defaults.log_level).upper(),
            color=env.get("POPCORN_COLOR", "1").strip().lower() not in FALSY,
            host=env.get("POPCORN_HOST", defaults.host),
            port=int(env.get("POPCORN_PORT", defaults.port)),
            ast_dump=env.get("POPCORN_AST_DUMP") or None,
            recursion_limit=int(env.get("POPCORN_RECURSION_LIMIT", defaults.recursion_limit)),
        )
