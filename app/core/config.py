"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with defaults and env var overrides."""

    # App
    app_env: str = "development"
    app_port: int = 8000
    log_level: str = "INFO"

    # Conversion defaults (used when the upload form omits a field)
    default_sie_type: str = "sie4"
    default_encoding: str = "ISO-8859-1"
    default_company_name: str = "My Company"

    # Upload limits
    max_upload_bytes: int = 10 * 1024 * 1024

    # CSV files are headerless unless this is switched on
    csv_skip_header: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
