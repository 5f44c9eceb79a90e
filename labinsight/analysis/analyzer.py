"""AI invocation for lab documents: text or image in, raw model output out."""

from pathlib import Path

from labinsight.analysis.client_base import BaseAnalysisClient, ImageInput
from labinsight.analysis.prompt_loader import load_prompt
from labinsight.logging.logger import Log


class LabAnalyzer:
    """Builds prompts and calls the configured AI client.

    The returned text is opaque: shape reconciliation is left to the
    normalization package.
    """

    def __init__(
        self,
        *,
        client: BaseAnalysisClient,
        model: str,
        temperature: float = 0.2,
        prompt_dir: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(1.0, temperature))
        self._system_prompt = load_prompt("system_prompt.txt", prompt_dir).strip()
        self._text_template = load_prompt("lab_text_prompt.txt", prompt_dir)
        self._image_prompt = load_prompt("lab_image_prompt.txt", prompt_dir)

    def analyze_text(self, text: str, page_number: int = 1, total_pages: int = 1) -> str:
        """Analyze report text; one call per page for multi-page documents.

        Raises:
            AnalysisError: propagated from the client.
        """
        prompt = self._text_template.format(
            document_text=text,
            page_context=self._page_context(page_number, total_pages),
        )
        Log.debug(f"Analysis prompt:\n{prompt}")
        raw = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
        )
        Log.debug(f"AI raw response:\n{raw}")
        return raw

    def analyze_image(self, data: bytes, mime_type: str) -> str:
        """Analyze a photographed or scanned report with a vision model."""
        Log.debug(f"Analysis image prompt for {mime_type} ({len(data)} bytes)")
        raw = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=self._image_prompt,
            image=ImageInput(data=data, mime_type=mime_type),
        )
        Log.debug(f"AI raw response:\n{raw}")
        return raw

    @staticmethod
    def _page_context(page_number: int, total_pages: int) -> str:
        if total_pages <= 1:
            return ""
        return (
            f" This is page {page_number} of {total_pages} of a PDF document; "
            "include every value visible on this page."
        )
