# fluxgate/extraction/__init__.py
"""Source Extractor: pattern-based export and import facts from unit sources."""

from fluxgate.extraction.conventions import Conventions, FileConvention, iter_source_files
from fluxgate.extraction.extractor import SourceExtractor, extract_unit
from fluxgate.extraction.records import (
    ExportKind,
    ExportRecord,
    ImportRecord,
    ParseFailure,
    UnitExtraction,
)

__all__ = [
    "SourceExtractor",
    "extract_unit",
    "Conventions",
    "FileConvention",
    "iter_source_files",
    "ExportKind",
    "ExportRecord",
    "ImportRecord",
    "ParseFailure",
    "UnitExtraction",
]
