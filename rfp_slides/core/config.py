"""
Service configuration read from the environment (and a local .env file).
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv(override=True)

# Global singleton
_settings_instance: Optional["Settings"] = None


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value not in (None, "") else default


class Settings:
    """Environment-backed settings for storage, generation and uploads."""

    def __init__(self):
        # Document store
        self.store_backend = os.getenv("STORE_BACKEND", "mongodb").lower()
        self.mongodb_uri = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
        self.mongodb_database = os.getenv("MONGODB_DATABASE", "rfp_slides")
        self.qdrant_uri = os.getenv("QDRANT_URI")
        self.qdrant_api_key = os.getenv("QDRANT_API_KEY")

        # Upload archive
        self.s3_bucket_name = os.getenv("S3_BUCKET_NAME")
        self.user_uploads_dir = os.getenv("USER_UPLOADS_DIR", "./user_uploads")
        self.max_upload_bytes = _env_int("MAX_UPLOAD_BYTES", 50 * 1024 * 1024)

        # Language model
        self.gemini_model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self.gemini_api_key = os.getenv("GEMINI_API_KEY")
        self.google_credentials_file = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        self.google_cloud_project = os.getenv("GOOGLE_CLOUD_PROJECT")
        self.google_cloud_location = os.getenv("GOOGLE_CLOUD_LOCATION", "global")
        self.generation_temperature = _env_float("GENERATION_TEMPERATURE", 0.7)
        self.generation_max_output_tokens = _env_int("GENERATION_MAX_OUTPUT_TOKENS", 3000)
        # 0 disables the bound
        self.generation_timeout_seconds = _env_float("GENERATION_TIMEOUT_SECONDS", 120.0)

        # Server
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.port = _env_int("PORT", 5000)


def get_settings() -> Settings:
    """Get singleton instance of Settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def setup_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
