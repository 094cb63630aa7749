from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "AlphaVantage Intraday Aggregator"
    app_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"

    # Upstream
    alphavantage_api_key: str | None = None
    alphavantage_base_url: str = "https://www.alphavantage.co/query"
    request_timeout_seconds: float = 30

    disconnect_poll_seconds: float = 0.5

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


settings = Settings()
