"""
Configuration for the Message Board backend
===========================================

Central configuration for storage locations, upload limits and the HTTP
server. Values come from defaults below, overridden by environment variables
(a local .env file is honoured).
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

TRUTHY_ENV_VALUES = {"1", "true", "yes", "on"}


class StorageSettings(BaseModel):
    """Message document and attachment storage configuration."""

    data_dir: str = Field(
        default="data",
        description="Directory holding the message document and the uploads tree",
    )
    uploads_dir_name: str = Field(
        default="uploads",
        description="Subdirectory of data_dir where per-message attachment folders live",
    )
    messages_file_name: str = Field(
        default="messages.json",
        description="File name of the JSON message document inside data_dir",
    )
    max_file_size_bytes: int = Field(
        default=10 * 1024 * 1024,
        gt=0,
        description="Maximum allowed size of a single uploaded file",
    )
    max_files_per_request: int = Field(
        default=9,
        ge=1,
        description="Maximum number of files accepted with one message",
    )
    sniff_sample_bytes: int = Field(
        default=4100,
        ge=64,
        description="Leading bytes read from each upload for signature detection",
    )
    zip_chunk_size: int = Field(
        default=64 * 1024,
        gt=0,
        description="Read size used when copying attachments into a ZIP stream",
    )

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)

    @property
    def uploads_path(self) -> Path:
        return self.data_path / self.uploads_dir_name

    @property
    def messages_path(self) -> Path:
        return self.data_path / self.messages_file_name


class Config(BaseModel):
    """Configuration settings for the Message Board backend."""

    model_config = {"populate_by_name": True}

    STORAGE: StorageSettings = Field(default_factory=StorageSettings, description="Storage and upload settings")

    # FastAPI Configuration
    APP_HOST: str = Field(default="0.0.0.0", description="FastAPI host")
    APP_PORT: int = Field(default=7070, description="FastAPI port")
    APP_RELOAD: bool = Field(default=False, description="FastAPI reload mode")

    HELP_FILE: str = Field(default="HELP.md", description="Text document served by GET /api/help")

    LOG_LEVEL: str = Field(default="INFO", description="Root logging level")
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )

    def __init__(self, **data):
        super().__init__(**data)
        self.load_from_environment()

    def load_from_environment(self):
        """Load configuration overrides from environment variables."""
        data_dir = os.getenv("DATA_DIR")
        if data_dir:
            self.STORAGE.data_dir = data_dir

        max_size_override = os.getenv("MAX_FILE_SIZE_BYTES")
        if max_size_override:
            try:
                parsed = int(max_size_override)
                if parsed > 0:
                    self.STORAGE.max_file_size_bytes = parsed
            except ValueError:
                pass

        max_files_override = os.getenv("MAX_FILES_PER_REQUEST")
        if max_files_override:
            try:
                parsed = int(max_files_override)
                if parsed > 0:
                    self.STORAGE.max_files_per_request = parsed
            except ValueError:
                pass

        self.APP_HOST = os.getenv("APP_HOST", self.APP_HOST)
        port_override = os.getenv("APP_PORT")
        if port_override:
            try:
                self.APP_PORT = int(port_override)
            except ValueError:
                pass
        reload_override = os.getenv("APP_RELOAD")
        if reload_override:
            self.APP_RELOAD = reload_override.lower() in TRUTHY_ENV_VALUES

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", self.LOG_LEVEL).upper()
        self.HELP_FILE = os.getenv("HELP_FILE", self.HELP_FILE)

        origins_override = os.getenv("CORS_ORIGINS")
        if origins_override:
            origins = [value.strip() for value in origins_override.split(",") if value.strip()]
            if origins:
                self.CORS_ORIGINS = origins


# Global configuration instance
config = Config()
