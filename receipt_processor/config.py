from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    ENV: str = "dev"

    # Swagger/ReDoc are extra endpoints; keep them off unless asked for
    EXPOSE_DOCS: bool = False
    # Reject badly formatted totals/prices/dates at the boundary instead of
    # letting the affected rule score zero
    STRICT_VALIDATION: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
