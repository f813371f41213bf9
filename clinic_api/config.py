from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "sqlite:///./functional_labs.db"
    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"

    api_base_url: str = "http://localhost:8000"
    allowed_origins: str = "http://localhost:8501"

    marker_fuzzy_threshold: int = 85
    trend_stable_threshold: float = 5.0
    chart_padding_ratio: float = 0.1
    chart_min_padding: float = 1.0

    payment_tolerance: float = 0.01
    gift_card_code_attempts: int = 10


settings = Settings()
