from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./efootball.db"
    SESSION_SECRET: str = "efootball-secret"
    SESSION_MAX_AGE: int = 14 * 24 * 60 * 60
    BCRYPT_ROUNDS: int = 10
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Go up two levels from core/config.py → project root
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        extra="ignore",
    )

settings = Settings()
