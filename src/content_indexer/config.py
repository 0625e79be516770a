"""Configuration for the content indexer."""

import os
from pathlib import Path

from dotenv import load_dotenv

from assistant_shared.embedding import (
    OPENAI_EMBEDDING_DIMENSIONS,
    OPENAI_EMBEDDING_MODEL,
    PINECONE_EMBEDDING_DIMENSIONS as _PINECONE_DIMENSIONS,
    PINECONE_EMBEDDING_MODEL as _PINECONE_MODEL,
)
from assistant_shared.exceptions import ConfigurationMissingError
from assistant_shared.vector_index import DEFAULT_INDEX_NAME

# Load .env from the working directory first, then from this package, so
# env vars are set before any getenv() below.
_CONFIG_DIR = Path(__file__).resolve().parent
load_dotenv(Path.cwd() / ".env")
load_dotenv(_CONFIG_DIR / ".env")

# Content source (Drupal with OAuth client credentials + GraphQL)
DRUPAL_BASE_URL = (os.getenv("DRUPAL_BASE_URL") or "").rstrip("/")
DRUPAL_CLIENT_ID = os.getenv("DRUPAL_CLIENT_ID")
DRUPAL_CLIENT_SECRET = os.getenv("DRUPAL_CLIENT_SECRET")
DRUPAL_TIMEOUT_SECONDS = float(os.getenv("DRUPAL_TIMEOUT_SECONDS", "30"))

# Pagination: PAGE_SIZE articles per GraphQL request, at most MAX_PAGES requests
PAGE_SIZE = int(os.getenv("INDEXER_PAGE_SIZE", "100"))
MAX_PAGES = int(os.getenv("INDEXER_MAX_PAGES", "50"))

# Embeddings ("openai" or "pinecone")
EMBEDDING_PROVIDER = os.getenv("EMBEDDING_PROVIDER", "openai")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", OPENAI_EMBEDDING_MODEL)
EMBEDDING_DIMENSIONS = int(os.getenv("EMBEDDING_DIMENSIONS", str(OPENAI_EMBEDDING_DIMENSIONS)))
PINECONE_EMBEDDING_MODEL = os.getenv("PINECONE_EMBEDDING_MODEL", _PINECONE_MODEL)
PINECONE_EMBEDDING_DIMENSIONS = int(os.getenv("PINECONE_EMBEDDING_DIMENSIONS", str(_PINECONE_DIMENSIONS)))

# Vector index
PINECONE_API_KEY = os.getenv("PINECONE_API_KEY")
PINECONE_INDEX = os.getenv("PINECONE_INDEX", DEFAULT_INDEX_NAME)
PINECONE_CLOUD = os.getenv("PINECONE_CLOUD", "aws")
PINECONE_REGION = os.getenv("PINECONE_REGION", "us-east-1")
INDEX_WAIT_TIMEOUT = float(os.getenv("INDEX_WAIT_TIMEOUT", "60"))

# Pause between items to stay under embedding/index rate limits
ITEM_DELAY_SECONDS = float(os.getenv("INDEXER_ITEM_DELAY_SECONDS", "0.1"))


def validate_config(*, mock_embeddings: bool = False):
    """Check that every credential the indexing run needs is present."""
    if not DRUPAL_BASE_URL:
        raise ConfigurationMissingError("DRUPAL_BASE_URL not configured. Set it in .env")
    if not DRUPAL_CLIENT_ID or not DRUPAL_CLIENT_SECRET:
        raise ConfigurationMissingError(
            "Drupal credentials not configured. Set DRUPAL_CLIENT_ID and DRUPAL_CLIENT_SECRET in .env"
        )
    if not PINECONE_API_KEY:
        raise ConfigurationMissingError("PINECONE_API_KEY not configured. Set it in .env")

    if mock_embeddings or EMBEDDING_PROVIDER == "pinecone":
        return
    if EMBEDDING_PROVIDER != "openai":
        raise ConfigurationMissingError(
            f"Unknown EMBEDDING_PROVIDER '{EMBEDDING_PROVIDER}'. Use 'openai' or 'pinecone'."
        )
    if not OPENAI_API_KEY:
        raise ConfigurationMissingError("OPENAI_API_KEY not configured. Set it in .env")


if __name__ == "__main__":
    validate_config()
    print("✓ Configuration validated successfully")
    print(f"  Drupal: {DRUPAL_BASE_URL}")
    print(f"  Index: {PINECONE_INDEX}")
    print(f"  Embeddings: {EMBEDDING_PROVIDER}")
