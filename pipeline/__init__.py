"""
Pipeline Module

컬렉션 내보내기/가져오기 파이프라인
"""

from pipeline.types import (
    ExportOptions,
    ImportOptions,
    ImportStage,
    ImportOutcome,
    ArchiveSummary,
    ImportableArchive,
    CollectionExportInfo,
    ProgressReporter,
)
from pipeline.exporter import CollectionExporter
from pipeline.importer import CollectionImporter
from pipeline.inspection import inspect_archive, list_importable_archives

__all__ = [
    "ExportOptions",
    "ImportOptions",
    "ImportStage",
    "ImportOutcome",
    "ArchiveSummary",
    "ImportableArchive",
    "CollectionExportInfo",
    "ProgressReporter",
    "CollectionExporter",
    "CollectionImporter",
    "inspect_archive",
    "list_importable_archives",
]
