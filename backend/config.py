# backend/config.py
import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """
    Application settings read from the environment (and an optional .env file)
    """
    project_name: str = "Worksy Marketplace API"
    api_version: str = "1.0.0"
    # Empty string means no datastore is configured
    database_url: str = "sqlite:///./worksy.db"
    demo_mode: bool = False
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
        return cls(
            project_name=os.getenv("PROJECT_NAME", cls.project_name),
            api_version=os.getenv("API_VERSION", cls.api_version),
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            demo_mode=_env_bool("DEMO_MODE"),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL", cls.openai_model),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
        )
