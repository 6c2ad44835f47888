"""umbrella-search configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MigrationConfig(BaseSettings):
    """Settings for the ``search`` field back-fill migration."""

    model_config = SettingsConfigDict(env_prefix="UMBRELLA_SEARCH_MIGRATION_")

    enabled: bool = Field(
        default=False,
        description="Run the search field back-fill when the migration entry point starts",
    )
    batch_size: int = Field(default=1000, ge=1, description="Messages fetched and updated per batch")
    progress_full_threshold: int = Field(
        default=50_000,
        description="Below this many eligible messages, progress is logged after every batch",
    )
    progress_every: int = Field(
        default=10,
        ge=1,
        description="Batch interval between progress logs for large migrations",
    )


class Settings(BaseSettings):
    """Top-level settings.

    All env vars are prefixed with ``UMBRELLA_SEARCH_``.
    Example: ``UMBRELLA_SEARCH_ELASTICSEARCH_URL=http://es:9200``
    """

    model_config = SettingsConfigDict(env_prefix="UMBRELLA_SEARCH_")

    environment: str = Field(
        default="production",
        description="Deployment environment; 'test' disables the migration",
    )

    # --- Elasticsearch ---------------------------------------------------
    elasticsearch_url: str = Field(
        default="http://localhost:9200",
        description="Elasticsearch base URL",
    )
    request_timeout: float = Field(default=30.0, description="Elasticsearch request timeout in seconds")
    users_index: str = Field(default="users", description="Index holding user documents")
    mailboxes_index: str = Field(default="mailboxes", description="Index holding mailbox documents")
    messages_index: str = Field(default="messages", description="Index holding message documents")

    # --- Search -----------------------------------------------------------
    scope_threshold: int = Field(
        default=200,
        description="Mailbox count below which broad searches list mailboxes explicitly",
    )

    # --- Logging -----------------------------------------------------------
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(
        default=True,
        description="Use JSON log output (True for prod, False for dev)",
    )

    migration: MigrationConfig = Field(default_factory=MigrationConfig)

    def effective_migration(self) -> MigrationConfig:
        """Migration settings with ``enabled`` forced off in the test environment."""
        if self.environment == "test":
            return self.migration.model_copy(update={"enabled": False})
        return self.migration
