# fluxgate/discovery/discovery.py
"""
Feature Discovery - enumerates the enabled units of a project.

One directory per unit under the units root:

    src/features/
    ├── todo/feature.py        enabled
    ├── users/feature.py       enabled
    ├── _legacy/               disabled (skipped, not an error)
    └── __pycache__/           ignored

Discovery is best-effort: every unit is visited and every problem recorded
as a finding before the caller decides what to do. Only a missing units
root aborts the run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from fluxgate.config.schema import GateConfig
from fluxgate.contracts.models import Unit
from fluxgate.core.exceptions import LoadError, UnitsRootNotFoundError
from fluxgate.core.paths import ProjectPaths
from fluxgate.discovery.loader import Loader, get_loader
from fluxgate.logging.logger import get_logger
from fluxgate.logging.tags import DISCOVERY
from fluxgate.validation.findings import Finding, FindingKind, sort_findings

logger = get_logger(__name__)


@dataclass
class DiscoveryResult:
    """
    Outcome of one discovery pass.

    Attributes:
        units: Enabled, loaded units, ordered by name
        skipped: Disabled unit directory names
        findings: Structural problems (missing entry, load failures, ...)
    """

    units: List[Unit] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    findings: List[Finding] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [u.name for u in self.units]

    def get(self, name: str) -> Optional[Unit]:
        for unit in self.units:
            if unit.name == name:
                return unit
        return None


def _structural(kind: FindingKind, unit: str, message: str, file: Optional[str] = None) -> Finding:
    return Finding(kind=kind, unit=unit, category="entry", symbols=(), message=message, file=file)


def discover_units(
    project_root: Union[str, Path, None] = None,
    config: Optional[GateConfig] = None,
    loader: Optional[Loader] = None,
) -> DiscoveryResult:
    """
    Discover and load every enabled unit.

    Raises:
        UnitsRootNotFoundError: The units directory doesn't exist
    """
    config = config or GateConfig()
    loader = loader or get_loader(config.loader, config.entry_attribute)
    root = ProjectPaths(project_root).units(config.units_dir)

    if not root.is_dir():
        raise UnitsRootNotFoundError(root)

    result = DiscoveryResult()

    for directory in sorted(p for p in root.iterdir() if p.is_dir()):
        name = directory.name

        if name.startswith("__") or name.startswith("."):
            continue

        if name.startswith(config.disabled_prefix):
            logger.debug(f"{DISCOVERY} Skipping disabled unit: {name}")
            result.skipped.append(name)
            continue

        unit = _load_unit(directory, config, loader, result)
        if unit is not None:
            result.units.append(unit)

    result.findings = sort_findings(result.findings)
    logger.info(
        f"{DISCOVERY} {len(result.units)} units discovered in {root} "
        f"({len(result.skipped)} skipped, {len(result.findings)} problems)"
    )
    return result


def _load_unit(
    directory: Path, config: GateConfig, loader: Loader, result: DiscoveryResult
) -> Optional[Unit]:
    name = directory.name
    entry = directory / config.entry_file

    if not entry.is_file():
        result.findings.append(
            _structural(
                FindingKind.MISSING_ENTRY,
                name,
                f"Unit directory has no entry file '{config.entry_file}'",
                file=config.entry_file,
            )
        )
        return None

    try:
        feature = loader.load(entry)
    except LoadError as e:
        logger.warning(f"{DISCOVERY} Failed to load {name} ({e.category}): {e}")
        hints = f" Suggestions: {'; '.join(e.suggestions)}" if e.suggestions else ""
        result.findings.append(
            _structural(
                FindingKind.LOAD_FAILURE,
                name,
                f"Failed to load entry file ({e.category}): {e}.{hints}",
                file=config.entry_file,
            )
        )
        return None

    if not isinstance(feature.name, str) or not feature.name.strip():
        result.findings.append(
            _structural(FindingKind.MISSING_NAME, name, "FeatureConfig has no name", config.entry_file)
        )
        return None

    if feature.name != name:
        logger.warning(f"{DISCOVERY} Name mismatch: directory '{name}' declares '{feature.name}'")
        result.findings.append(
            _structural(
                FindingKind.NAME_MISMATCH,
                name,
                f"Declared name '{feature.name}' does not match directory name '{name}'",
                config.entry_file,
            )
        )

    if feature.contract is None:
        result.findings.append(
            _structural(
                FindingKind.MISSING_CONTRACT,
                name,
                "FeatureConfig declares no contract",
                config.entry_file,
            )
        )
        return None

    return Unit(name=name, path=directory, config=feature, entry_file=entry)


__all__ = ["DiscoveryResult", "discover_units"]
