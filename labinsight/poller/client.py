"""HTTP client for the analysis job endpoints, used from the client side."""

from dataclasses import dataclass
from typing import Any

import httpx

from labinsight.normalization.models import CanonicalResult
from labinsight.normalization.normalizer import normalize
from labinsight.poller.exceptions import StatusTransportError

TERMINAL_STATUSES = frozenset({"completed", "failed"})


@dataclass(frozen=True)
class StatusSnapshot:
    """One reading of ``GET /analysis-jobs/{id}/status``."""

    status: str
    progress: int
    is_processing: bool
    data: CanonicalResult | None = None
    message: str | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


def _progress(value: Any) -> int:
    try:
        progress = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, min(progress, 100))


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None


def parse_status(body: dict[str, Any]) -> StatusSnapshot:
    """Build a snapshot from a status body, normalizing ``data`` when present."""
    status = str(body.get("status") or "pending").lower()
    data = body.get("data")
    return StatusSnapshot(
        status=status,
        progress=_progress(body.get("progress")),
        is_processing=bool(body.get("isProcessing", status not in TERMINAL_STATUSES)),
        data=normalize(data) if data is not None else None,
        message=body.get("message"),
        error=body.get("error"),
    )


class AnalysisStatusClient:
    """Thin httpx wrapper; every transport or HTTP failure becomes ``StatusTransportError``."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url, timeout=timeout_seconds, transport=transport
        )

    def get_status(self, job_id: str) -> StatusSnapshot:
        return parse_status(self._request("GET", f"/analysis-jobs/{job_id}/status"))

    def submit(
        self,
        *,
        document_ref: str | None = None,
        manual_summary_text: str | None = None,
        subject_id: str | None = None,
    ) -> str:
        body = {
            "documentRef": document_ref,
            "manualSummaryText": manual_summary_text,
            "subjectId": subject_id,
        }
        payload = self._request(
            "POST",
            "/analysis-jobs",
            json={key: value for key, value in body.items() if value is not None},
        )
        return str(payload["jobId"])

    def upload_document(self, data: bytes, filename: str, mime_type: str) -> str:
        payload = self._request(
            "POST", "/documents", files={"file": (filename, data, mime_type)}
        )
        return str(payload["documentRef"])

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "AnalysisStatusClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise StatusTransportError(
                f"{method} {url} returned {exc.response.status_code}",
                status_code=exc.response.status_code,
                error=_error_message(exc.response),
            ) from exc
        except httpx.HTTPError as exc:
            raise StatusTransportError(f"{method} {url} failed: {exc}") from exc
        except ValueError as exc:
            raise StatusTransportError(f"{method} {url} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise StatusTransportError(f"{method} {url} returned a non-object body")
        return payload
