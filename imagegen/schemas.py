"""Pydantic models shared by the FastAPI endpoints."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class GenerationRequest(BaseModel):
    model: str = Field(..., description="Identifier of the hosted model, e.g. 'flux' or 'sdxl'")
    prompt: str = Field(..., min_length=1, description="Text describing the image to generate")
    negative_prompt: Optional[str] = Field(
        default=None,
        description="What to avoid in the image; the server default is used when empty",
    )
    width: int = Field(..., ge=256, le=1024, multiple_of=64, description="Image width in pixels")
    height: int = Field(..., ge=256, le=1024, multiple_of=64, description="Image height in pixels")
    steps: int = Field(..., ge=1, le=50, description="Number of inference steps")
    guidance_scale: float = Field(..., ge=1.0, le=20.0, description="Classifier-free guidance scale")


class UpstreamParameters(BaseModel):
    negative_prompt: str
    width: int
    height: int
    num_inference_steps: int
    guidance_scale: float


class UpstreamPayload(BaseModel):
    inputs: str = Field(..., description="Prompt forwarded to the inference API")
    parameters: UpstreamParameters


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Short, user facing error message")
    details: Optional[str] = Field(default=None, description="Additional context, e.g. the upstream body")


class ModelInfo(BaseModel):
    id: str
    display_name: str
    repo_id: str
    width: int
    height: int
    steps: int
    guidance_scale: float


class ModelListResponse(BaseModel):
    models: List[ModelInfo]
    default_model: str
