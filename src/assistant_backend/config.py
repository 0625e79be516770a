"""Configuration for the backend using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_BACKEND_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """All backend settings, loaded from environment variables and .env file.

    Nothing here is validated at import time: a missing credential only
    disables the service that needs it, and the config probe reports which
    services are ready.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", str(_BACKEND_DIR / ".env")),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Completion service (OpenAI-compatible endpoint, Groq by default)
    # ------------------------------------------------------------------
    groq_api_key: str = ""
    groq_base_url: str = "https://api.groq.com/openai/v1"
    chat_model: str = "meta-llama/llama-4-scout-17b-16e-instruct"
    chat_max_tokens: int = 2048

    # ------------------------------------------------------------------
    # Embeddings — "openai" (text-embedding-3-small) or "pinecone"
    # (hosted multilingual-e5-large with passage/query input types)
    # ------------------------------------------------------------------
    embedding_provider: Literal["openai", "pinecone"] = "openai"
    openai_api_key: str = ""
    openai_base_url: str | None = None
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    pinecone_embedding_model: str = "multilingual-e5-large"
    pinecone_embedding_dimensions: int = 1024

    # ------------------------------------------------------------------
    # Vector index
    # ------------------------------------------------------------------
    pinecone_api_key: str = ""
    pinecone_index: str = "decoupled-search"
    pinecone_cloud: str = "aws"
    pinecone_region: str = "us-east-1"

    # ------------------------------------------------------------------
    # Content source (only probed here; the indexer owns the credentials)
    # ------------------------------------------------------------------
    drupal_base_url: str = ""

    # ------------------------------------------------------------------
    # Search limits
    # ------------------------------------------------------------------
    search_default_limit: int = 10
    search_max_limit: int = 50
    tool_result_limit: int = 5

    # ------------------------------------------------------------------
    # Demo mode — canned answers over bundled mock articles
    # ------------------------------------------------------------------
    demo_mode: bool = False

    # ------------------------------------------------------------------
    # HTTP / logging
    # ------------------------------------------------------------------
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    log_json: bool = False

    # ------------------------------------------------------------------
    # Observability — "off", "otel" or "logfire"
    # ------------------------------------------------------------------
    observability: str = "off"
    otel_service_name: str = "article-assistant-backend"
    otel_exporter_otlp_endpoint: str = "http://localhost:4318"
    otel_console_exporter: bool = False

    # ------------------------------------------------------------------
    # Config probe
    # ------------------------------------------------------------------
    def service_status(self) -> dict[str, bool]:
        """Report, per backing service, whether its configuration is present."""
        if self.embedding_provider == "pinecone":
            embeddings = bool(self.pinecone_api_key)
        else:
            embeddings = bool(self.openai_api_key)
        return {
            "completion": bool(self.groq_api_key),
            "embeddings": embeddings,
            "vectorIndex": bool(self.pinecone_api_key),
            "contentSource": bool(self.drupal_base_url),
        }

    def is_configured(self) -> bool:
        return all(self.service_status().values())


@lru_cache
def get_settings() -> Settings:
    """Return the cached Settings singleton."""
    return Settings()
