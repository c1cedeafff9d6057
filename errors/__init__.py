"""
Errors Module

가져오기/내보내기 오류 분류 및 처리
"""

from errors.errors import (
    ImportErrorKind,
    ImportErrorCode,
    Recommendation,
    Severity,
    ImportErrorDetails,
    ImportErrorInfo,
    LibraryArchiveError,
    CorruptedArchiveError,
    ManifestMissingError,
    ManifestInvalidError,
    IncompatibleFormatError,
    ArchiveReadError,
    ArchiveWriteError,
    CollectionNotFoundError,
    MissingDependencyError,
    classify_exception,
    error_from_exception,
)

__all__ = [
    "ImportErrorKind",
    "ImportErrorCode",
    "Recommendation",
    "Severity",
    "ImportErrorDetails",
    "ImportErrorInfo",
    "LibraryArchiveError",
    "CorruptedArchiveError",
    "ManifestMissingError",
    "ManifestInvalidError",
    "IncompatibleFormatError",
    "ArchiveReadError",
    "ArchiveWriteError",
    "CollectionNotFoundError",
    "MissingDependencyError",
    "classify_exception",
    "error_from_exception",
]
