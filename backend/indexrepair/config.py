from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Keys of the per-task configuration mapping handed to each worker.
INDEX_NAME_KEY = "indexrepair.index.name"
INDEX_TYPE_KEY = "indexrepair.index.type"
STORAGE_URL_KEY = "indexrepair.storage.url"
SEARCH_BACKEND_KEY = "indexrepair.search.backend"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Graph storage (edge store, index store, schema)
    storage_url: str = Field(default="sqlite+pysqlite:///./graph.db", alias="STORAGE_URL")

    # Index under repair
    index_name: str | None = Field(default=None, alias="INDEX_NAME")
    # Owning relation type name; blank for graph-level (composite/mixed) indexes.
    index_type: str | None = Field(default=None, alias="INDEX_TYPE")

    # Search store provider for mixed indexes: "noop" | "sql"
    search_backend: str = Field(default="noop", alias="SEARCH_BACKEND")

    # Local job runner
    repair_partitions: int = Field(default=4, alias="REPAIR_PARTITIONS")
    repair_max_workers: int = Field(default=4, alias="REPAIR_MAX_WORKERS")

    def sqlalchemy_database_uri(self) -> str:
        return normalize_database_uri(self.storage_url)

    def job_configuration(self) -> dict[str, object]:
        """Render the configuration mapping every worker task receives."""
        return {
            INDEX_NAME_KEY: self.index_name,
            INDEX_TYPE_KEY: self.index_type,
            STORAGE_URL_KEY: self.sqlalchemy_database_uri(),
            SEARCH_BACKEND_KEY: self.search_backend,
        }


def normalize_database_uri(url: str) -> str:
    # Support plain `postgresql://...` while ensuring a stable driver for SQLAlchemy.
    if url.startswith("postgresql://") and "+psycopg2" not in url:
        return url.replace("postgresql://", "postgresql+psycopg2://", 1)
    return url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
