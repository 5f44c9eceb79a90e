from enum import Enum


class AnalysisErrorKind(str, Enum):
    TOKEN_LIMIT_EXCEEDED = "token_limit_exceeded"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    MALFORMED_RESPONSE = "malformed_response"
    TIMEOUT = "timeout"


ANALYSIS_ERROR_MESSAGES: dict[AnalysisErrorKind, str] = {
    AnalysisErrorKind.TOKEN_LIMIT_EXCEEDED: (
        "The document is too long for the AI model to analyze in one request."
    ),
    AnalysisErrorKind.UPSTREAM_UNAVAILABLE: "The AI analysis service is currently unavailable.",
    AnalysisErrorKind.MALFORMED_RESPONSE: "The AI analysis service returned an unusable response.",
    AnalysisErrorKind.TIMEOUT: "The AI analysis did not finish within the time limit.",
}


class AnalysisError(Exception):
    """Raised when the AI invocation fails."""

    def __init__(self, kind: AnalysisErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(self.message if not detail else f"{self.message} ({detail})")

    @property
    def message(self) -> str:
        return ANALYSIS_ERROR_MESSAGES[self.kind]
