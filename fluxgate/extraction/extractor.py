# fluxgate/extraction/extractor.py
"""
Source Extractor - scans a unit's files and returns what they export.

Per unit:
    routes    route calls in convention-named route files that have a
              route-named export
    services  service-named exports in convention-named service files
    models    model-named exports in convention-named model files
    imports   every import statement in every .py file of the unit

A file that cannot be read or tokenized becomes a ParseFailure for that file;
the remaining files are still scanned.

Extraction of different units is independent, so extract_all() runs units
concurrently.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from fluxgate.contracts.models import RouteSpec, Unit
from fluxgate.extraction.conventions import Conventions, FileConvention, iter_source_files
from fluxgate.extraction.records import (
    ExportKind,
    ExportRecord,
    ImportRecord,
    ParseFailure,
    UnitExtraction,
)
from fluxgate.extraction.source import (
    CleanSource,
    SourceError,
    clean_source,
    find_exports,
    find_imports,
    find_route_calls,
)
from fluxgate.logging.logger import get_logger
from fluxgate.logging.tags import EXTRACT

logger = get_logger(__name__)


class SourceExtractor:
    """
    Extracts ExportRecords and ImportRecords from unit source files.

    Usage:
        extractor = SourceExtractor(Conventions.default())
        result = extractor.extract(unit.name, unit.path)
        result.service_names   # ["todo_service"]
    """

    def __init__(self, conventions: Optional[Conventions] = None, max_workers: int = 4):
        self.conventions = conventions or Conventions.default()
        self.max_workers = max_workers

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def extract(self, unit_name: str, unit_path: Path) -> UnitExtraction:
        result = UnitExtraction(unit=unit_name)
        cache: Dict[Path, Optional[CleanSource]] = {}

        def load(path: Path) -> Optional[CleanSource]:
            if path not in cache:
                cache[path] = self._read(unit_path, path, result)
            return cache[path]

        result.routes = self._extract_routes(unit_path, load)
        result.services = self._extract_exports(unit_path, self.conventions.services, load)
        result.models = self._extract_exports(unit_path, self.conventions.models, load)
        result.imports = self._extract_imports(unit_path, load)
        result.failures.sort(key=lambda f: f.file)

        logger.debug(
            f"{EXTRACT} {unit_name}: {len(result.routes)} routes, "
            f"{len(result.services)} services, {len(result.models)} models, "
            f"{len(result.imports)} imports, {len(result.failures)} parse failures"
        )
        return result

    def extract_all(self, units: Iterable[Unit]) -> Dict[str, UnitExtraction]:
        """Extract every unit concurrently; results keyed by unit name."""
        units = list(units)
        if not units:
            return {}

        workers = min(self.max_workers, len(units))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fluxgate-extract") as pool:
            results = list(pool.map(lambda u: self.extract(u.name, u.path), units))

        return {r.unit: r for r in results}

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def _extract_routes(self, unit_path: Path, load) -> List[ExportRecord]:
        convention = self.conventions.routes
        records: List[ExportRecord] = []

        for path in convention.files(unit_path):
            clean = load(path)
            if clean is None:
                continue

            exports = [name for name, _ in find_exports(clean) if convention.matches_export(name)]
            if not exports:
                logger.debug(f"{EXTRACT} {path.name}: no route export, skipped")
                continue

            rel = _rel(unit_path, path)
            for method, route_path, line in find_route_calls(clean, convention.keyword):
                spec = RouteSpec(method, route_path)
                records.append(
                    ExportRecord(kind=ExportKind.ROUTE, name=str(spec), file=rel, line=line, route=spec)
                )

        return records

    def _extract_exports(
        self, unit_path: Path, convention: FileConvention, load
    ) -> List[ExportRecord]:
        records: List[ExportRecord] = []

        for path in convention.files(unit_path):
            clean = load(path)
            if clean is None:
                continue

            rel = _rel(unit_path, path)
            for name, line in find_exports(clean):
                if convention.matches_export(name):
                    records.append(
                        ExportRecord(kind=convention.kind, name=name, file=rel, line=line)
                    )

        return records

    def _extract_imports(self, unit_path: Path, load) -> List[ImportRecord]:
        records: List[ImportRecord] = []

        for path in iter_source_files(unit_path):
            clean = load(path)
            if clean is None:
                continue

            rel = _rel(unit_path, path)
            for module, names, line in find_imports(clean):
                records.append(ImportRecord(module=module, names=names, file=rel, line=line))

        return records

    # -------------------------------------------------------------------------
    # IO
    # -------------------------------------------------------------------------

    @staticmethod
    def _read(unit_path: Path, path: Path, result: UnitExtraction) -> Optional[CleanSource]:
        rel = _rel(unit_path, path)
        try:
            text = path.read_text(encoding="utf-8")
            return clean_source(text)
        except (OSError, UnicodeDecodeError) as e:
            error = f"{type(e).__name__}: {e}"
        except SourceError as e:
            error = str(e)

        logger.warning(f"{EXTRACT} Failed to parse {result.unit}/{rel}: {error}")
        result.failures.append(ParseFailure(file=rel, error=error))
        return None


def _rel(unit_path: Path, path: Path) -> str:
    return path.relative_to(unit_path).as_posix()


def extract_unit(unit: Unit, conventions: Optional[Conventions] = None) -> UnitExtraction:
    """Convenience wrapper for a single unit."""
    return SourceExtractor(conventions).extract(unit.name, unit.path)


__all__ = ["SourceExtractor", "extract_unit"]
