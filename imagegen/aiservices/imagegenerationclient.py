from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class GeneratedImagePayload:
    """Raw image bytes returned by an inference backend."""

    content: bytes
    media_type: str = "image/png"


class ImageGenerationClient(ABC):
    """Abstract interface for an image generation client.

    Implementations must provide synchronous generation methods
    used by the rest of the application.
    """

    @abstractmethod
    def generate(self, endpoint: str, payload: Dict[str, Any], token: str) -> GeneratedImagePayload:
        """Send a payload to a model endpoint and return the image bytes.

        Should raise UpstreamError when the backend answers with a non-success status.
        """
