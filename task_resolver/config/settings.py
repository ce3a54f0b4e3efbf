import tempfile

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000

    temp_dir: str = tempfile.gettempdir()
    max_upload_bytes: int = 10 * 1024 * 1024

    adapter_timeout_seconds: float = 30.0
    http_user_agent: str = "task-resolver/1.0"

    allowed_commands: list[str] = ["echo", "date", "uname"]
