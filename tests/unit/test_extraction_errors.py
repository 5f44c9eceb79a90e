import pytest

from labinsight.extraction.exceptions import (
    EXTRACTION_ERROR_MESSAGES,
    ExtractionError,
    ExtractionErrorKind,
    classify_engine_error,
)


class TestExtractionErrorMessages:
    def test_every_kind_has_a_message(self) -> None:
        assert set(EXTRACTION_ERROR_MESSAGES) == set(ExtractionErrorKind)

    def test_messages_are_distinct(self) -> None:
        messages = list(EXTRACTION_ERROR_MESSAGES.values())
        assert len(set(messages)) == len(messages)

    def test_error_exposes_kind_and_message(self) -> None:
        error = ExtractionError(ExtractionErrorKind.TOO_SMALL, "50 bytes")
        assert error.kind is ExtractionErrorKind.TOO_SMALL
        assert error.message == EXTRACTION_ERROR_MESSAGES[ExtractionErrorKind.TOO_SMALL]
        assert "50 bytes" in str(error)


class TestClassifyEngineError:
    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (ValueError("file is encrypted"), ExtractionErrorKind.PASSWORD_PROTECTED),
            (RuntimeError("Password required"), ExtractionErrorKind.PASSWORD_PROTECTED),
            (RuntimeError("out of heap space"), ExtractionErrorKind.MEMORY_LIMIT),
            (ValueError("No /Root object! - Is this really a PDF?"), ExtractionErrorKind.CORRUPT_FILE),
            (RuntimeError("cannot open broken document"), ExtractionErrorKind.CORRUPT_FILE),
            (RuntimeError("Unexpected EOF"), ExtractionErrorKind.CORRUPT_FILE),
            (RuntimeError("something odd"), ExtractionErrorKind.UNKNOWN),
        ],
    )
    def test_keyword_classification(
        self, exc: Exception, expected: ExtractionErrorKind
    ) -> None:
        assert classify_engine_error(exc) is expected

    def test_memory_error_always_memory_limit(self) -> None:
        assert classify_engine_error(MemoryError()) is ExtractionErrorKind.MEMORY_LIMIT

    def test_password_wins_over_corrupt(self) -> None:
        exc = ValueError("invalid password")
        assert classify_engine_error(exc) is ExtractionErrorKind.PASSWORD_PROTECTED
