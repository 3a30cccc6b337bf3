from pathlib import Path
from typing import List, Optional
from urllib.parse import urlsplit

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Passwords that ship in docker-compose files and tutorials
_WEAK_DB_PASSWORDS = frozenset({"postgres", "password", "changeme", "personnel"})

_LOCAL_ORIGINS = frozenset({
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
})

_DEFAULT_SEED_DATA_PATH = str(Path(__file__).resolve().parent.parent / "db" / "seed_data")


def _database_password(database_url: Optional[str]) -> Optional[str]:
    if not database_url:
        return None
    try:
        return urlsplit(database_url).password
    except ValueError:
        return None


class Settings(BaseSettings):
    # List fields accept comma-separated env values
    model_config = SettingsConfigDict(env_file=".env", env_parse_delimiter=",")

    PROJECT_NAME: str = "Personnel API"
    # Empty keeps routes at /employee; set to "/api" for /api/employee
    API_PREFIX: str = ""
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Logging; unset values follow DEBUG and ENVIRONMENT
    LOG_LEVEL: Optional[str] = None
    JSON_LOGS: Optional[bool] = None

    # CORS, as a JSON array or a comma-separated string
    ALLOWED_ORIGINS: List[str] | str = Field(
        default_factory=lambda: ["http://localhost:3000"],
        validation_alias=AliasChoices("ALLOWED_ORIGINS", "BACKEND_CORS_ORIGINS"),
    )

    # PostgreSQL connection parts, used when DATABASE_URL is not given
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_SERVER: str = Field(
        default="db",
        validation_alias=AliasChoices("POSTGRES_SERVER", "POSTGRES_HOST", "POSTGRES_HOSTNAME"),
    )
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "personnel"

    # Connection pool (ignored for SQLite)
    DB_POOL_SIZE: int = Field(default=5, description="Number of persistent DB connections")
    DB_MAX_OVERFLOW: int = Field(default=10, description="Max additional connections under load")

    # Any SQLAlchemy async URL, e.g. sqlite+aiosqlite:///./personnel.db
    DATABASE_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "SQLALCHEMY_DATABASE_URI"),
    )
    SQLALCHEMY_ECHO: bool = False

    # How many levels of direct reports the reporting-structure query loads
    REPORTING_STRUCTURE_DEPTH: int = Field(default=2, ge=1)

    # Startup behaviour
    CREATE_TABLES_ON_STARTUP: bool = True
    SEED_DATA_ON_STARTUP: Optional[bool] = None
    SEED_DATA_PATH: str = _DEFAULT_SEED_DATA_PATH

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        return (self.DATABASE_URL or "").startswith("sqlite")

    def model_post_init(self, __context):
        """
        Fill derived defaults, then refuse to start in production with an
        insecure configuration. All problems are reported in one error.
        """
        if not self.DATABASE_URL:
            self.DATABASE_URL = (
                f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

        # The sample organisation is loaded only outside production unless told otherwise
        if self.SEED_DATA_ON_STARTUP is None:
            self.SEED_DATA_ON_STARTUP = not self.is_production

        if self.is_production:
            problems = self._production_problems()
            if problems:
                raise ValueError(
                    "Production configuration errors:\n" + "\n".join(f"  - {p}" for p in problems)
                )

    def _production_problems(self) -> List[str]:
        problems = []

        if _database_password(self.DATABASE_URL) in _WEAK_DB_PASSWORDS:
            problems.append(
                "DATABASE_URL contains an insecure password. "
                "Set a strong POSTGRES_PASSWORD or a DATABASE_URL with a strong password."
            )
        if not self.ALLOWED_ORIGINS or set(self.ALLOWED_ORIGINS) <= _LOCAL_ORIGINS:
            problems.append("ALLOWED_ORIGINS must list your real domain(s) in production, not localhost.")
        if self.DEBUG:
            problems.append("DEBUG must be False in production.")
        if self.SEED_DATA_ON_STARTUP:
            problems.append("SEED_DATA_ON_STARTUP must be false in production.")

        return problems

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("API_PREFIX")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value


settings = Settings()
