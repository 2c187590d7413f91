"""Configuration management for the parity splitter service."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service configuration
    service_name: str = "pdf-parity-splitter"
    host: str = "0.0.0.0"
    port: int = 10000
    log_level: str = "INFO"

    # Filesystem layout
    upload_dir: str = Field(
        default="uploads", description="Transient storage for raw uploads")
    public_dir: str = Field(
        default="public", description="Publicly served split outputs")
    public_url_path: str = Field(
        default="/files", description="URL prefix the public dir is mounted at")

    # Upload settings
    upload_field: str = "pdfFile"
    allowed_extension: str = ".pdf"
    max_input_size_mb: int = Field(
        default=100, description="Max PDF upload size in MB")

    # Retention of split outputs
    output_retention_seconds: int = Field(
        default=3600, description="Age after which outputs are swept, 0 disables")
    sweep_interval_seconds: int = Field(
        default=300, description="Seconds between retention sweeps")

    model_config = {
        "env_prefix": "",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Global settings instance
settings = Settings()
