import logging
import re
from dataclasses import dataclass
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from teambuilder.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "TeamBuilder"
    app_env: str = "development"
    cors_origins: str = "http://localhost:5173"

    # Database (see resolve_database_target for precedence)
    database_url: str = ""
    db_url_override: str = ""
    db_override_file: str = "/tmp/db-override"
    replit_db_file: str = "/tmp/replitdb"

    # Teams
    default_group_size: int = 4

    # Sentry (optional, only set in staging/production)
    sentry_dsn: str = ""

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def log_level(self) -> str:
        return "INFO" if self.is_production else "DEBUG"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]


settings = Settings()

# ---------------------------------------------------------------------------
# Application constants (not env-configurable, change in code)
# ---------------------------------------------------------------------------

# Team size bounds for a company
MIN_GROUP_SIZE = 2
MAX_GROUP_SIZE = 10

# Team numbers are 1..MAX_TEAM_NUMBER per company
MAX_TEAM_NUMBER = 1000

# Characters of the company name kept in a team's group id ("MAKECENTSGRO-T3")
GROUP_ID_PREFIX_LENGTH = 12


# ---------------------------------------------------------------------------
# Database target
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseTarget:
    url: str
    source: str  # env-override, db-override, replitdb, env
    host: str
    masked_url: str


def _read_url_file(path: str) -> str:
    if not path:
        return ""
    file = Path(path)
    if not file.exists():
        return ""
    try:
        return file.read_text(encoding="utf-8").strip()
    except OSError as e:
        logger.warning(f"Could not read {path}: {e}")
        return ""


def _extract_host(url: str) -> str:
    match = re.search(r"@([^/]+)", url)
    return match.group(1) if match else "unknown"


def mask_database_url(url: str) -> str:
    """Hide the password part of a connection URL."""
    return re.sub(r":[^:@/]*@", ":****@", url)


def normalize_database_url(url: str) -> str:
    """Point plain Postgres URLs at the asyncpg driver."""
    for scheme in ("postgres://", "postgresql://"):
        if url.startswith(scheme):
            return "postgresql+asyncpg://" + url.removeprefix(scheme)
    return url


def resolve_database_target(config: Settings) -> DatabaseTarget:
    """Pick the connection URL once at startup.

    Precedence: DB_URL_OVERRIDE > override file > Replit file > DATABASE_URL.
    """
    candidates = [
        ("env-override", lambda: config.db_url_override.strip()),
        ("db-override", lambda: _read_url_file(config.db_override_file)),
        ("replitdb", lambda: _read_url_file(config.replit_db_file)),
        ("env", lambda: config.database_url.strip()),
    ]
    for source, read in candidates:
        url = read()
        if url:
            break
    else:
        raise ConfigurationError(
            "DATABASE_URL must be set. Did you forget to provision a database?"
        )

    url = normalize_database_url(url)
    target = DatabaseTarget(
        url=url,
        source=source,
        host=_extract_host(url),
        masked_url=mask_database_url(url),
    )
    logger.info(f"Selected database source: {target.source}; host: {target.host}")
    return target


database_target = resolve_database_target(settings)
