# aiservices/huggingfaceimagegenerationclient.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import Settings, get_settings
from ..errors import UpstreamError
from .imagegenerationclient import GeneratedImagePayload, ImageGenerationClient

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "image/png"


class HuggingFaceImageGenerationClient(ImageGenerationClient):
    """
    Talks to the Hugging Face Inference API text-to-image task.

    The endpoint answers with the encoded image on success and with a
    JSON or plain text error body otherwise.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = httpx.Client(
            timeout=self.settings.request_timeout,
            transport=transport,
            follow_redirects=True,
        )

    def generate(self, endpoint: str, payload: Dict[str, Any], token: str) -> GeneratedImagePayload:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": DEFAULT_MEDIA_TYPE,
        }
        response = self._client.post(endpoint, json=payload, headers=headers)

        if not response.is_success:
            logger.error("HF API Error: %s %s", response.status_code, response.text)
            raise UpstreamError(response.status_code, response.text)

        media_type = response.headers.get("Content-Type", "").split(";")[0].strip()
        if not media_type.startswith("image/"):
            media_type = DEFAULT_MEDIA_TYPE

        return GeneratedImagePayload(content=response.content, media_type=media_type)

    def close(self) -> None:
        self._client.close()
