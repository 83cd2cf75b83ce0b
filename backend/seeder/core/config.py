from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(ENV_FILE), env_ignore_empty=True, extra="ignore")

    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_SERVICE_ACCOUNT_PATH: Optional[str] = None
    FIREBASE_SERVICE_ACCOUNT_JSON: Optional[str] = None
    FIRESTORE_DATABASE: str = "(default)"

    AUTHORIZATION_TYPES_COLLECTION: str = "user_authorization_types"
    IDENTITY_LINKS_COLLECTION: str = "user_identity_links"
    METADATA_COLLECTION: str = "metadata"


settings = Settings()
