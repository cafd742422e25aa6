# fluxgate/cli/context.py
"""
CLI context: project root, merged config and logging, resolved once per command.

Usage:
    ctx = CLIContext.load(root, config_path=None, static=False, verbose=False)
    run = run_validation(ctx.root, ctx.config)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fluxgate.config.loader import load_gate_config
from fluxgate.config.schema import GateConfig
from fluxgate.core.paths import ProjectPaths
from fluxgate.logging.logger import configure_logging, get_logger
from fluxgate.logging.tags import CLI

logger = get_logger(__name__)


@dataclass
class CLIContext:
    root: Path
    config: GateConfig
    paths: ProjectPaths

    @property
    def units_root(self) -> Path:
        return self.paths.units(self.config.units_dir)

    @classmethod
    def load(
        cls,
        root: Optional[Path] = None,
        config_path: Optional[Path] = None,
        static: bool = False,
        verbose: bool = False,
    ) -> "CLIContext":
        configure_logging(logging.DEBUG if verbose else logging.WARNING)

        paths = ProjectPaths(root)
        overrides = {"loader": "static"} if static else None
        config = load_gate_config(paths.root, config_path=config_path, overrides=overrides)

        logger.debug(f"{CLI} root={paths.root} units_dir={config.units_dir} loader={config.loader}")
        return cls(root=paths.root, config=config, paths=paths)


__all__ = ["CLIContext"]
