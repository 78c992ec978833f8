"""Catalog of the hosted text-to-image models the proxy can forward to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ModelSpec:
    """A hosted model together with the form defaults that suit it."""

    id: str
    display_name: str
    repo_id: str
    width: int
    height: int
    steps: int
    guidance_scale: float


MODELS: Dict[str, ModelSpec] = {
    "flux": ModelSpec(
        id="flux",
        display_name="FLUX.1-schnell",
        repo_id="black-forest-labs/FLUX.1-schnell",
        width=768,
        height=1024,
        steps=20,
        guidance_scale=3.5,
    ),
    "sdxl": ModelSpec(
        id="sdxl",
        display_name="Stable Diffusion XL",
        repo_id="stabilityai/stable-diffusion-xl-base-1.0",
        width=768,
        height=1024,
        steps=30,
        guidance_scale=7.5,
    ),
}

DEFAULT_MODEL = "flux"

SAMPLE_PROMPTS = [
    "A luxury perfume bottle on a marble surface with soft lighting, product photography style",
    "Elegant glass perfume bottle with golden accents, surrounded by rose petals, studio lighting",
]


def get_model(model_id: str) -> Optional[ModelSpec]:
    return MODELS.get(model_id)


def list_models() -> List[ModelSpec]:
    return list(MODELS.values())
