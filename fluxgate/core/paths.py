# fluxgate/core/paths.py
"""
Central path management for fluxgate.

Everything that needs a project path goes through ProjectPaths; nothing else
hardcodes locations.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

CONFIG_FILENAME = "fluxgate.yaml"


class ProjectPaths:
    """
    Paths of one project under validation.

    Usage:
        paths = ProjectPaths("/srv/app")
        paths.config()        # /srv/app/fluxgate.yaml
        paths.units("src/features")
    """

    def __init__(self, root: Optional[Union[str, Path]] = None):
        self._root = Path(root) if root is not None else Path.cwd()

    @property
    def root(self) -> Path:
        return self._root.resolve()

    def config(self) -> Path:
        """Project-level override config."""
        return self.root / CONFIG_FILENAME

    def units(self, units_dir: str) -> Path:
        """The directory holding one subdirectory per unit."""
        path = Path(units_dir)
        if path.is_absolute():
            return path
        return self.root / path

    def relative(self, path: Path) -> str:
        """Render a path relative to the project root when possible."""
        try:
            return path.resolve().relative_to(self.root).as_posix()
        except ValueError:
            return str(path)


__all__ = ["CONFIG_FILENAME", "ProjectPaths"]
