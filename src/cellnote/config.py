"""Configuration management for Cellnote."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cellnote.formatting.ir import ScriptPosition, StyleSpec


# Written to the target cell before it is located in the shared strings.
# Must never appear as real text in a workbook.
PLACEHOLDER_TEXT = (
    "This is placeholder text that should not appear anywhere in your document."
)


class Settings(BaseSettings):
    """Application configuration via environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Annotation style defaults
    font: str = Field(default="Arial", alias="CELLNOTE_FONT")
    size: int = Field(default=8, gt=0, alias="CELLNOTE_SIZE")
    color: str = Field(default="000000", alias="CELLNOTE_COLOR")
    family: int = Field(default=2, gt=0, alias="CELLNOTE_FAMILY")
    script: str = Field(default="superscript", alias="CELLNOTE_SCRIPT")

    placeholder: str = Field(default=PLACEHOLDER_TEXT, alias="CELLNOTE_PLACEHOLDER")

    def default_style(self) -> StyleSpec:
        """Build the default StyleSpec from these settings."""
        return StyleSpec(
            font=self.font,
            size=self.size,
            color=self.color,
            family=self.family,
            script=ScriptPosition.parse(self.script),
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, creating it if needed."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load settings from an optional specific .env file."""
    global _settings
    if env_file:
        _settings = Settings(_env_file=env_file)
    else:
        _settings = Settings()
    return _settings
