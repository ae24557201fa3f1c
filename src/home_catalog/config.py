"""Application configuration using pydantic-settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HOME_CATALOG_",
        extra="ignore",
    )

    # Backend selection: the in-memory mock or a remote record API
    backend: Literal["mock", "remote"] = Field(
        default="mock",
        description="Record store adapter chosen at startup",
    )

    # Remote record API (required when backend=remote)
    api_base_url: str = Field(
        default="",
        description="Base URL of the record API (e.g. https://records.example.com/v1)",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Bearer token sent to the record API",
    )
    api_timeout_seconds: float = Field(default=10.0, gt=0, le=120)

    # Mock backend
    mock_properties_path: str = Field(
        default="",
        description="JSON file of listings to seed the mock store (empty = bundled sample)",
    )
    mock_saved_properties_path: str = Field(
        default="",
        description="JSON file of saved entries to seed the mock store (empty = bundled sample)",
    )
    mock_latency_ms: int = Field(
        default=0,
        ge=0,
        le=5000,
        description="Artificial delay per mock store call",
    )

    # Catalog
    featured_count: int = Field(default=3, ge=1, le=24)

    # Web API
    web_host: str = Field(default="127.0.0.1", description="Web server host")
    web_port: int = Field(default=8000, description="Web server port")

    # Logging
    log_json: bool = Field(default=False, description="Emit JSON logs instead of console output")
    log_level: str = Field(default="INFO")

    def get_mock_properties_path(self) -> Path:
        return Path(self.mock_properties_path or DATA_DIR / "properties.json")

    def get_mock_saved_properties_path(self) -> Path:
        return Path(self.mock_saved_properties_path or DATA_DIR / "saved_properties.json")

    @property
    def mock_latency_seconds(self) -> float:
        return self.mock_latency_ms / 1000
