from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # LLM settings
    anthropic_api_key: str | None = None  # semantic signal scores 0 without it
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_retries: int = 2

    # Storage settings
    local_wing_store_path: str = "data/wings.json"

    # Connection settings
    score_threshold: float = 0.3
    high_score_threshold: float = 0.7

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
