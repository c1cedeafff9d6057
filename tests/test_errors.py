"""
오류 분류 테스트
"""

import pytest
from sqlalchemy.exc import IntegrityError

from errors.errors import (
    CorruptedArchiveError,
    ImportErrorCode,
    ImportErrorDetails,
    ImportErrorInfo,
    ImportErrorKind,
    ManifestMissingError,
    Recommendation,
    Severity,
    classify_exception,
    error_from_exception,
)


class TestClassifyException:
    """예외 분류 테스트"""

    def test_library_errors_carry_code(self):
        assert classify_exception(ManifestMissingError("x")) == (
            ImportErrorKind.CORRUPTED_DATA, ImportErrorCode.MISSING_MANIFEST
        )
        assert classify_exception(CorruptedArchiveError("x")) == (
            ImportErrorKind.CORRUPTED_DATA, ImportErrorCode.CORRUPTED_DATA
        )

    def test_integrity_error(self):
        error = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))
        assert classify_exception(error)[0] == ImportErrorKind.MISSING_DEPENDENCIES

    def test_os_error(self):
        assert classify_exception(FileNotFoundError("gone"))[1] == ImportErrorCode.FILE_READ_ERROR

    @pytest.mark.parametrize("message,code", [
        ("manifest.json is broken", ImportErrorCode.MISSING_MANIFEST),
        ("could not parse value", ImportErrorCode.INVALID_MANIFEST),
        ("failed to read entry", ImportErrorCode.FILE_READ_ERROR),
        ("failed to write entry", ImportErrorCode.FILE_WRITE_ERROR),
        ("something else", ImportErrorCode.UNKNOWN_ERROR),
    ])
    def test_message_inference(self, message, code):
        kind, inferred = classify_exception(RuntimeError(message))
        assert kind == ImportErrorKind.UNKNOWN_ERROR
        assert inferred == code


class TestImportErrorInfo:
    """구조화된 오류 테스트"""

    def test_error_from_exception(self):
        details = ImportErrorDetails(collection_id="o/c")
        error = error_from_exception(RuntimeError("boom"), details, can_retry=False)

        assert error.message == "boom"
        assert error.details is details
        assert not error.can_retry
        assert not error.is_warning

    def test_to_dict(self):
        error = ImportErrorInfo(
            kind=ImportErrorKind.VERSION_CONFLICT,
            code=ImportErrorCode.VERSION_CONFLICT_NEWER,
            message="newer",
            can_retry=True,
            severity=Severity.ERROR,
            details=ImportErrorDetails(
                existing_version="1.0", import_version="1.1", recommendation=Recommendation.OVERWRITE
            ),
        )

        assert error.to_dict() == {
            "type": "VERSION_CONFLICT",
            "code": 1000,
            "message": "newer",
            "canRetry": True,
            "severity": "error",
            "details": {"existingVersion": "1.0", "importVersion": "1.1", "recommendation": "OVERWRITE"},
        }
