from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Literal
from core_config.constants import DEFAULT_SCHEME_PATH, MANIFEST_FILENAME

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    service_log_level: str = Field(default="INFO", alias="SERVICE_LOG_LEVEL")

    # Scheme backend, as "module:attribute"
    keygen_scheme: str = Field(default=DEFAULT_SCHEME_PATH, alias="KEYGEN_SCHEME")

    # Export defaults (CLI flags override these)
    export_format: Literal["ssz", "both"] = Field(default="both", alias="KEYGEN_EXPORT_FORMAT")
    create_manifest: bool = Field(default=True, alias="KEYGEN_CREATE_MANIFEST")
    new_format: bool = Field(default=False, alias="KEYGEN_NEW_FORMAT")
    manifest_name: str = Field(default=MANIFEST_FILENAME, alias="KEYGEN_MANIFEST_NAME")

    @field_validator("export_format", mode="before")
    @classmethod
    def _lower_format(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("service_log_level", mode="before")
    @classmethod
    def _known_level(cls, v):
        level = str(v).strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v!r}")
        return level

    @field_validator("manifest_name")
    @classmethod
    def _plain_filename(cls, v: str) -> str:
        # The manifest always lives directly inside the output directory.
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError("manifest name must be a plain file name")
        return v

def get_settings() -> "Settings":
    return Settings()  # type: ignore
