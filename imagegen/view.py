"""Client side state for the image generator page.

The view owns the form, the busy flag, the last error and the gallery of
recent results. It is independent of the widget toolkit so the Streamlit
page in :mod:`imagegen.frontend` only has to render it.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .catalog import DEFAULT_MODEL, SAMPLE_PROMPTS, get_model
from .config import Settings, get_settings
from .utils import sanitize_filename

logger = logging.getLogger(__name__)

MAX_GALLERY_SIZE = 6
GENERIC_ERROR = "Failed to generate image"


@dataclass
class FormState:
    model: str
    prompt: str
    negative_prompt: str
    width: int
    height: int
    steps: int
    guidance_scale: float

    @classmethod
    def for_model(cls, model_id: str, prompt: str = "", negative_prompt: Optional[str] = None) -> "FormState":
        model = get_model(model_id)
        if model is None:
            raise ValueError(f"Unknown model '{model_id}'")
        return cls(
            model=model.id,
            prompt=prompt,
            negative_prompt=get_settings().default_negative_prompt if negative_prompt is None else negative_prompt,
            width=model.width,
            height=model.height,
            steps=model.steps,
            guidance_scale=model.guidance_scale,
        )

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GeneratedImage:
    id: str
    data: bytes
    prompt: str
    model: str
    media_type: str = "image/png"
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def filename(self) -> str:
        return sanitize_filename(self.prompt, self.media_type)


def _read_error(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return GENERIC_ERROR

    if not isinstance(payload, dict):
        return GENERIC_ERROR

    message = payload.get("error") or GENERIC_ERROR
    details = payload.get("details")
    if details:
        return f"{message}: {details}"
    return message


class GeneratorView:
    """Form, submission and gallery state for a single page instance."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.endpoint = endpoint or settings.api_endpoint
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=settings.request_timeout)
        self.form = FormState.for_model(DEFAULT_MODEL, negative_prompt=settings.default_negative_prompt)
        self.is_loading = False
        self.error: Optional[str] = None
        self.images: List[GeneratedImage] = []

    # ------------------------------------------------------------------
    # Form handlers
    # ------------------------------------------------------------------
    def select_model(self, model_id: str) -> None:
        self.form = FormState.for_model(
            model_id,
            prompt=self.form.prompt,
            negative_prompt=self.form.negative_prompt,
        )

    def set_prompt(self, prompt: str) -> None:
        self.form.prompt = prompt

    def apply_sample(self, index: int) -> str:
        self.form.prompt = SAMPLE_PROMPTS[index]
        return self.form.prompt

    @property
    def sample_prompts(self) -> List[str]:
        return list(SAMPLE_PROMPTS)

    @property
    def can_submit(self) -> bool:
        return not self.is_loading and bool(self.form.prompt.strip())

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def submit(self) -> Optional[GeneratedImage]:
        """Post the form to the proxy and add the result to the gallery.

        Returns the new gallery entry, or None when the submission was blocked
        or failed. Failures are kept in ``error`` for inline display.
        """
        if not self.can_submit:
            logger.debug("Ignoring submission (loading=%s)", self.is_loading)
            return None

        self.is_loading = True
        self.error = None
        form = FormState(**self.form.to_payload())
        try:
            response = self._client.post(self.endpoint, json=form.to_payload())
            if not response.is_success:
                self.error = _read_error(response)
                logger.warning("Generation failed with status %s: %s", response.status_code, self.error)
                return None

            image = GeneratedImage(
                id=uuid.uuid4().hex,
                data=response.content,
                prompt=form.prompt,
                model=form.model,
                media_type=response.headers.get("Content-Type", "image/png"),
            )
        except httpx.HTTPError as exc:
            logger.warning("Generation request failed: %s", exc)
            self.error = f"Request failed: {exc}"
            return None
        finally:
            self.is_loading = False

        self.images = [image, *self.images[: MAX_GALLERY_SIZE - 1]]
        return image

    # ------------------------------------------------------------------
    # Gallery
    # ------------------------------------------------------------------
    def get_image(self, image_id: str) -> Optional[GeneratedImage]:
        for image in self.images:
            if image.id == image_id:
                return image
        return None

    def download(self, image_id: str) -> Tuple[str, bytes, str]:
        image = self.get_image(image_id)
        if image is None:
            raise KeyError(image_id)
        return image.filename, image.data, image.media_type

    def close(self) -> None:
        self.images.clear()
        if self._owns_client:
            self._client.close()
