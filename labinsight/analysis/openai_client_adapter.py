import base64

import httpx
import openai

from labinsight.analysis.client_base import BaseAnalysisClient, ImageInput
from labinsight.analysis.exceptions import AnalysisError, AnalysisErrorKind

_TOKEN_LIMIT_MARKERS = ("context_length", "maximum context length", "too many tokens")


class OpenAIClientAdapter(BaseAnalysisClient):
    """AI client adapter built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=1,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        image: ImageInput | None = None,
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": self._user_content(user_prompt, image)},
                ],
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise AnalysisError(AnalysisErrorKind.TIMEOUT, str(exc)) from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise AnalysisError(AnalysisErrorKind.UPSTREAM_UNAVAILABLE, str(exc)) from exc
        except openai.BadRequestError as exc:
            if any(marker in str(exc).lower() for marker in _TOKEN_LIMIT_MARKERS):
                raise AnalysisError(
                    AnalysisErrorKind.TOKEN_LIMIT_EXCEEDED, str(exc)
                ) from exc
            raise AnalysisError(AnalysisErrorKind.MALFORMED_RESPONSE, str(exc)) from exc
        except openai.APIError as exc:
            raise AnalysisError(AnalysisErrorKind.UPSTREAM_UNAVAILABLE, str(exc)) from exc

        if not response.choices:
            raise AnalysisError(AnalysisErrorKind.MALFORMED_RESPONSE, "no choices returned")
        content = response.choices[0].message.content
        if not content:
            raise AnalysisError(AnalysisErrorKind.MALFORMED_RESPONSE, "empty response")
        return content

    @staticmethod
    def _user_content(
        user_prompt: str, image: ImageInput | None
    ) -> str | list[dict[str, object]]:
        if image is None:
            return user_prompt
        encoded = base64.b64encode(image.data).decode("ascii")
        return [
            {"type": "text", "text": user_prompt},
            {
                "type": "image_url",
                "image_url": {"url": f"data:{image.mime_type};base64,{encoded}"},
            },
        ]
