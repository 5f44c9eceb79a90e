from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    job_store: str = "memory"
    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "labinsight"
    db_username: str = "labinsight"
    db_password: str = "secret"

    files_root: Path = Path("/app/files")
    min_document_bytes: int = 100
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_mime_types: list[str] = ["application/pdf", "image/jpeg", "image/png"]

    extraction_engine: str = "pdfplumber"
    extraction_timeout_seconds: float = 30

    analysis_provider: str = "openai"
    analysis_api_key: str = ""
    analysis_model_name: str = "gpt-4o-mini"
    analysis_base_url: str = ""
    analysis_timeout_seconds: float = 120
    analysis_temperature: float = 0.2
    analysis_max_pages: int = 20

    job_worker_threads: int = 4

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    status_base_url: str = "http://localhost:8000"
    poll_interval_seconds: float = 3.0
    poll_confirm_delay_seconds: float = 1.0
    poll_max_duration_seconds: float = 600
    poll_max_transport_failures: int = 5
    demo_step_delay_seconds: float = 1.0
