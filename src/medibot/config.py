"""Application configuration using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Backend collaborators
    api_base_url: str = "http://localhost:3000"
    analysis_path: str = "/api/process-prescription"
    history_path: str = "/api/history"
    profile_path: str = "/api/user/profile"
    session_path: str = "/api/auth/session"
    signout_path: str = "/api/auth/signout"
    login_url: str = "/login"

    # Timeouts (seconds); image analysis runs a vision model and is slow
    request_timeout: float = 10.0
    analysis_timeout: float = 60.0

    # User-facing messages
    generic_failure_message: str = "Failed to process prescription"
    unreadable_failure_message: str = (
        "We couldn't read the prescription properly. Please try a clearer photo."
    )
    profile_ack_message: str = "Health Profile Synced with MediBot AI!"
    profile_failure_message: str = "Could not sync your health profile. Please try again."

    # Application
    log_level: str = "INFO"
    environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MEDIBOT_",
        case_sensitive=False,
    )


settings = Settings()
