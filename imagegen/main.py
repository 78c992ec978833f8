"""FastAPI entry point exposing the image generator proxy API."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from .catalog import DEFAULT_MODEL, list_models
from .config import Settings, get_settings
from .errors import ImageGenerationError, UpstreamError
from .schemas import ErrorResponse, ModelInfo, ModelListResponse
from .service import ImageGenerationService, get_image_generation_service

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    payload = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=payload.model_dump())


settings = get_settings()
logging.basicConfig(level=settings.log_level.upper())

app = FastAPI(title="Hugging Face Image Generator", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", summary="Health Check Endpoint")
async def healthcheck(config: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "models": [model.id for model in list_models()],
        "tokenConfigured": bool(config.hf_token.get_secret_value()),
    }


@app.get(
    "/api/models",
    response_model=ModelListResponse,
    summary="List the hosted models and their form defaults",
)
async def models():
    return ModelListResponse(
        models=[ModelInfo(**asdict(model)) for model in list_models()],
        default_model=DEFAULT_MODEL,
    )


@app.post(
    "/api/generate",
    summary="Generate an image with a hosted model and return the image bytes",
    response_class=Response,
    responses={
        status.HTTP_200_OK: {"content": {"image/png": {}}},
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def generate_image(
    request: Request,
    service: ImageGenerationService = Depends(get_image_generation_service),
):
    try:
        body = await request.json()
    except ValueError:
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request fields",
            "Request body must be valid JSON",
        )

    try:
        image = await run_in_threadpool(service.generate, body)
    except UpstreamError as exc:
        # Already logged by the client.
        return _error_response(exc.status_code, exc.message, exc.details)
    except ImageGenerationError as exc:
        if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.info("Rejected generation request: %s (%s)", exc.message, exc.details)
        else:
            logger.warning("Generation request failed: %s", exc.message)
        return _error_response(exc.status_code, exc.message, exc.details)
    except Exception:
        logger.exception("API Error")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    return Response(
        content=image.content,
        media_type=image.media_type,
        headers={"Content-Length": str(len(image.content))},
    )


__all__ = ["app"]


if __name__ == "__main__":  # pragma: no cover - convenience entry point
    import uvicorn

    uvicorn.run("imagegen.main:app", host="0.0.0.0", port=8000, reload=True)
