"""Domain logic for turning proxy requests into inference API calls."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, List, Optional

from pydantic import ValidationError

from .aiservices.huggingfaceimagegenerationclient import HuggingFaceImageGenerationClient
from .aiservices.imagegenerationclient import GeneratedImagePayload, ImageGenerationClient
from .catalog import MODELS, ModelSpec, get_model
from .config import Settings, get_settings
from .errors import ConfigurationError, InvalidRequestError
from .schemas import GenerationRequest, UpstreamParameters, UpstreamPayload

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("model", "prompt", "width", "height", "steps", "guidance_scale")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _describe_validation_error(exc: ValidationError) -> str:
    problems: List[str] = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "body"
        problems.append(f"{location}: {err['msg']}")
    return "; ".join(problems)


class ImageGenerationService:
    """Validates generation requests and relays them to the hosted model."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: Optional[ImageGenerationClient] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = client or HuggingFaceImageGenerationClient(self.settings)

    # ------------------------------------------------------------------
    # Request validation
    # ------------------------------------------------------------------
    def parse_request(self, body: Any) -> GenerationRequest:
        if not isinstance(body, dict):
            raise InvalidRequestError(
                "Invalid request fields",
                details="Request body must be a JSON object",
            )

        missing = [field for field in REQUIRED_FIELDS if _is_blank(body.get(field))]
        if missing:
            raise InvalidRequestError(
                "Missing required fields",
                details=f"Missing: {', '.join(missing)}",
            )

        try:
            return GenerationRequest.model_validate(body)
        except ValidationError as exc:
            raise InvalidRequestError(
                "Invalid request fields",
                details=_describe_validation_error(exc),
            ) from exc

    def resolve_model(self, model_id: str) -> ModelSpec:
        model = get_model(model_id)
        if model is None:
            raise InvalidRequestError(
                "Invalid model specified",
                details=f"Unknown model '{model_id}'. Expected one of: {', '.join(MODELS)}",
            )
        return model

    def build_payload(self, request: GenerationRequest) -> UpstreamPayload:
        return UpstreamPayload(
            inputs=request.prompt,
            parameters=UpstreamParameters(
                negative_prompt=request.negative_prompt or self.settings.default_negative_prompt,
                width=request.width,
                height=request.height,
                num_inference_steps=request.steps,
                guidance_scale=request.guidance_scale,
            ),
        )

    # ------------------------------------------------------------------
    # Image Generation
    # ------------------------------------------------------------------
    def generate(self, body: Any) -> GeneratedImagePayload:
        """Validate a raw request body and return the generated image bytes."""
        request = self.parse_request(body)
        model = self.resolve_model(request.model)

        token = self.settings.hf_token.get_secret_value()
        if not token:
            raise ConfigurationError("HF_TOKEN not configured")

        endpoint = self.settings.model_endpoint(model.repo_id)
        payload = self.build_payload(request)
        logger.info(
            "Generating %sx%s image with %s (%s steps)",
            request.width,
            request.height,
            model.id,
            request.steps,
        )
        return self._client.generate(endpoint, payload.model_dump(), token)


@lru_cache
def get_image_generation_service() -> ImageGenerationService:
    return ImageGenerationService(get_settings())
