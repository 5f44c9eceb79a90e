"""Example analysis client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseAnalysisClient and register the provider in AnalyzerFactory.
"""

import json
from typing import ClassVar

from labinsight.analysis.client_base import BaseAnalysisClient, ImageInput


class ExampleClientAdapter(BaseAnalysisClient):
    """Offline adapter that echoes a fixed, well-formed analysis.

    No network calls. Selected explicitly with ``ANALYSIS_PROVIDER=example``
    for local development; the summary says so, so the output is never
    mistaken for a clinical reading.
    """

    RESPONSE: ClassVar[dict[str, object]] = {
        "summary": "Offline example analysis: no AI provider is configured.",
        "outOfRange": [],
        "recommendations": [
            "Configure an AI provider to obtain a real analysis of this document."
        ],
    }

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        image: ImageInput | None = None,
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt, image
        return json.dumps(self.RESPONSE)
