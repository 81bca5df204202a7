from typing import List, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Guardian Paws"
    ENVIRONMENT: str = "development"
    API_V1_STR: str = "/api/v1"

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str):
            v = v.strip("[").strip("]").strip('"').strip("'")
            if not v:
                return []
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    # Database - sqlite file by default, any async SQLAlchemy URL works
    DATABASE_URL: str = "sqlite+aiosqlite:///./guardian_paws.db"

    # AI triage
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    TRIAGE_TIMEOUT_SECONDS: float = 30.0

    # Guardian points
    REPORT_POINTS: int = 10
    RESCUE_POINTS: int = 50

    SEED_DEMO_DATA: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file="backend_config.env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
