from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageInput:
    """An image sent to a vision-capable model."""

    data: bytes
    mime_type: str


class BaseAnalysisClient(ABC):
    """Contract for provider-specific AI clients."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        image: ImageInput | None = None,
    ) -> str:
        """Return the provider response as plain text.

        Raises:
            AnalysisError: classified by kind.
        """
