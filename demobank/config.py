"""Configuration settings for the Demo Bank service."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3000

    # Signs the session cookie; override in any shared environment
    session_secret: str = "dev-secret"

    # Service identification
    service_name: str = "demo-bank"

    # Static UI, mounted only when the directory exists
    static_dir: str = "public"

    log_level: str = "INFO"

    # Load the alice/bob demo users and accounts at startup
    seed_demo_data: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
