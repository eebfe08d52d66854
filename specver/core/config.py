import logging
from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices

ROOT = Path(__file__).resolve().parents[2]
load_dotenv(ROOT / ".env", override=False)     # loads AZURE_* / SPECVER_* vars if present

log = logging.getLogger(__name__)

BACKENDS = ("memory", "sqlite", "firestore")


class Settings(BaseSettings):
    # ───────────────── Entry store ─────────────────
    storage_backend: str = Field("sqlite", validation_alias="STORAGE_BACKEND")
    db_path: str = Field("specver.db", validation_alias="SPECVER_DB_PATH")
    # create the history table on startup (sqlite only)
    auto_init: bool = Field(True, validation_alias="SPECVER_AUTO_INIT")

    # ───────────────── GCP / Firestore ───────────────
    firestore_collection: str = Field("history_entries", validation_alias="FIRESTORE_COLLECTION")
    gcp_project: str | None = Field(
        None,
        validation_alias=AliasChoices(
            "GCP_PROJECT_ID",
            "GCLOUD_PROJECT",
            "GOOGLE_CLOUD_PROJECT",
        ),
    )
    gcp_credentials_path: str | None = Field(
        None,
        validation_alias=AliasChoices("GOOGLE_APPLICATION_CREDENTIALS", "GCP_CREDENTIALS")
    )

    # ───────────────── Azure OpenAI (suggestions) ────
    # all optional: suggestions are disabled when any is missing
    endpoint: str | None = Field(None, validation_alias="AZURE_OAI_ENDPOINT")
    api_key: str | None = Field(None, validation_alias="AZURE_OAI_KEY")
    suggest_model: str | None = Field(None, validation_alias="AZURE_SUGGEST_MODEL")
    suggest_api_ver: str = Field("2024-10-21", validation_alias="AZURE_SUGGEST_API_VERSION")

    ui_origin: str = Field(
        "*",
        validation_alias=AliasChoices("UI_ORIGIN")
    )
    log_level: str = Field("INFO", validation_alias="SPECVER_LOG_LEVEL")

    model_config = SettingsConfigDict(
        case_sensitive=False, env_file=ROOT / ".env", extra="ignore", populate_by_name=True,
    )

    @property
    def suggestions_enabled(self) -> bool:
        return all([self.endpoint, self.api_key, self.suggest_model])


def load_settings(**overrides) -> Settings:
    """Build settings from env/.env, with keyword overrides (used by tests)."""
    s = Settings(**overrides)
    backend = s.storage_backend.lower()
    if backend not in BACKENDS:
        raise RuntimeError(f"Unknown STORAGE_BACKEND={s.storage_backend!r}; expected one of {', '.join(BACKENDS)}")
    s.storage_backend = backend
    if backend == "firestore" and not s.gcp_credentials_path:
        log.warning("GOOGLE_APPLICATION_CREDENTIALS not set; relying on ADC.")
    return s


settings = load_settings()
