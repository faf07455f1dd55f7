"""
Configuration settings management with environment variable support.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional
from functools import lru_cache

from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


# Load environment variables
load_dotenv()


class AISettings(BaseModel):
    """AI model settings configuration."""
    enabled: bool = True
    model: str = "llama3.1"
    temperature: float = 0.7
    max_tokens: int = 1500
    available_models: List[str] = Field(
        default_factory=lambda: ["llama3.1", "gpt-4o-mini", "claude-3-5-sonnet-latest"]
    )


class StorageSettings(BaseModel):
    """Database and uploaded file storage configuration."""
    database_url: str = "sqlite:///hirewise.db"
    uploads_dir: Path = Path("uploads")
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_extensions: List[str] = Field(default_factory=lambda: ["pdf", "doc", "docx"])


class MatchingSettings(BaseModel):
    """Job matching limits."""
    jobs_to_consider: int = 20
    min_fallback_score: int = 20
    max_fallback_results: int = 10


class Settings(BaseSettings):
    """Main application settings."""

    ai_settings: AISettings = Field(default_factory=AISettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)

    # Application settings from environment
    debug: bool = Field(default=False, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, validation_alias="LOG_FILE")

    # Flat environment overrides for the nested sections
    database_url: Optional[str] = Field(default=None, validation_alias="DATABASE_URL")
    uploads_dir: Optional[Path] = Field(default=None, validation_alias="UPLOADS_DIR")
    ai_enabled: Optional[bool] = Field(default=None, validation_alias="AI_ENABLED")
    ai_model: Optional[str] = Field(default=None, validation_alias="AI_MODEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def apply_env_overrides(self) -> "Settings":
        if self.database_url:
            self.storage.database_url = self.database_url
        if self.uploads_dir:
            self.storage.uploads_dir = self.uploads_dir
        if self.ai_enabled is not None:
            self.ai_settings.enabled = self.ai_enabled
        if self.ai_model:
            self.ai_settings.model = self.ai_model
        return self

    @classmethod
    def from_json(cls, config_path: str = "config.json") -> "Settings":
        """
        Load settings from JSON configuration file.

        Args:
            config_path: Path to JSON configuration file

        Returns:
            Settings instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        try:
            with open(config_path, 'r') as f:
                config_data = json.load(f)

            return cls(**config_data)

        except FileNotFoundError:
            raise FileNotFoundError(
                f"❌ Config file not found: {config_path}\n"
                "   Please create config.json or rely on environment variables"
            )
        except json.JSONDecodeError as e:
            raise ValueError(f"❌ Invalid JSON in config file: {e}")
        except ValidationError as e:
            raise ValueError(f"❌ Invalid configuration: {e}")

    def to_dict(self) -> Dict:
        """Convert settings to dictionary."""
        return self.model_dump(exclude_none=True)


@lru_cache()
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get cached settings instance.

    Args:
        config_path: Optional path to JSON configuration file. Environment
            variables alone are used when it is omitted or missing.

    Returns:
        Settings instance (cached)
    """
    if config_path and Path(config_path).exists():
        return Settings.from_json(config_path)
    return Settings()
