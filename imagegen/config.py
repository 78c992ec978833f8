from functools import lru_cache
from typing import List

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the image generator proxy and front end."""

    #----------------------------------------------------------
    # Upstream inference API settings
    #----------------------------------------------------------
    hf_token: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("HF_TOKEN", "IMAGEGEN_HF_TOKEN", "hf_token"),
        description="Hugging Face access token sent as a bearer token to the inference API.",
    )

    inference_base_url: str = Field(
        default="https://api-inference.huggingface.co/models",
        description="Base URL of the hosted inference API; the model repo id is appended to it.",
    )

    request_timeout: float = Field(
        default=120.0,
        gt=0.0,
        description="Seconds to wait for the inference API before giving up.",
    )

    #----------------------------------------------------------
    # Generation settings
    #----------------------------------------------------------
    default_negative_prompt: str = Field(
        default="low quality, blurry, watermark, text",
        description="Negative prompt used when a request does not provide one.",
    )

    #----------------------------------------------------------
    # Server settings
    #----------------------------------------------------------
    allowed_origins: List[str] = Field(
        default=["*"],
        description="Origins allowed to call the proxy from a browser.",
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level applied when the application starts.",
    )

    #----------------------------------------------------------
    # Front end settings
    #----------------------------------------------------------
    api_endpoint: str = Field(
        default="http://localhost:8000/api/generate",
        description="Proxy URL the front end posts generation requests to.",
    )

    model_config = SettingsConfigDict(
        env_prefix="IMAGEGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def model_endpoint(self, repo_id: str) -> str:
        return f"{self.inference_base_url.rstrip('/')}/{repo_id}"


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
