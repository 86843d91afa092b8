"""Database settings (``DB_*`` environment variables).

SQLite through aiosqlite is the zero-configuration default; set
``DB_DRIVER=postgresql+asyncpg`` plus host and credentials for PostgreSQL.
"""

from functools import lru_cache
from typing import Optional
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """
    Where the reviewer store lives and how to connect to it.

    Example:
        DB_DRIVER=postgresql+asyncpg
        DB_HOST=db.internal
        DB_NAME=pr_reviewer
        DB_USER=reviewer
        DB_PASSWORD=secret
        DB_SSL_MODE=require
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    driver: str = Field(
        default="sqlite+aiosqlite",
        description="SQLAlchemy async driver: sqlite+aiosqlite or postgresql+asyncpg",
    )

    # PostgreSQL
    host: str = "localhost"
    port: int = 5432
    name: str = "pr_reviewer"
    user: str = ""
    password: str = ""

    # SQLite
    sqlite_path: Path = Field(
        default=Path("data/pr_reviewer.db"),
        description="SQLite file; parent directories are created on demand",
    )

    # Pool (PostgreSQL only; SQLite runs without a pool)
    pool_size: int = Field(default=10, ge=1, le=100)
    max_overflow: int = Field(default=20, ge=0, le=100)
    pool_timeout: int = Field(default=30, ge=1, description="Seconds to wait for a free connection")
    pool_recycle: int = Field(default=1800, ge=60, description="Seconds before a connection is replaced")
    pool_pre_ping: bool = True

    # TLS: disable, require (encrypt only) or verify-full
    ssl_mode: str = "disable"
    ssl_ca_cert: Optional[str] = None

    echo_sql: bool = Field(default=False, description="Log every SQL statement")
    query_timeout: int = Field(default=30, ge=1, description="Driver-level statement timeout, seconds")

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        return "sqlite" in self.driver.lower()

    @computed_field
    @property
    def is_postgres(self) -> bool:
        return "postgres" in self.driver.lower()

    def _auth(self) -> str:
        if not self.user:
            return ""
        if self.password:
            return f"{self.user}:{self.password}@"
        return f"{self.user}@"

    @computed_field
    @property
    def async_url(self) -> str:
        """URL for the application's async engine."""
        if self.is_sqlite:
            self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite+aiosqlite:///{self.sqlite_path.absolute()}"
        return f"{self.driver}://{self._auth()}{self.host}:{self.port}/{self.name}"

    @computed_field
    @property
    def sync_url(self) -> str:
        """URL for Alembic, which runs on a synchronous engine."""
        if self.is_sqlite:
            return f"sqlite:///{self.sqlite_path.absolute()}"
        return f"postgresql+psycopg2://{self._auth()}{self.host}:{self.port}/{self.name}"

    def get_connect_args(self) -> dict:
        """Driver keyword arguments passed through ``create_async_engine``."""
        if self.is_sqlite:
            return {"check_same_thread": False, "timeout": self.query_timeout}

        args = {"command_timeout": self.query_timeout}
        if self.ssl_mode != "disable":
            args["ssl"] = self._build_ssl_context()
        return args

    def _build_ssl_context(self):
        import ssl

        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        if self.ssl_ca_cert:
            context.load_verify_locations(self.ssl_ca_cert)
        if self.ssl_mode != "verify-full":
            # require: encrypted, unverified
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Settings read once from the environment."""
    return DatabaseSettings()
