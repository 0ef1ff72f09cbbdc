"""Application configuration."""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_IGNORED_PROPERTY_IDS = [
    162, 166, 167, 168, 169, 170, 171,
    175, 176, 177, 178, 179, 180,
    182, 183, 184, 187, 188, 189,
    192, 194, 195, 196, 198, 200,
    267, 268,
]


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    postgres_host: str = "postgres"
    postgres_port: int = 5432
    postgres_user: str = "set_builder"
    postgres_password: str = "changeme"
    postgres_db: str = "set_builder_db"

    # Redis
    redis_url: str = "redis://redis:6379/0"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = True

    # Celery
    celery_broker_url: str = "redis://redis:6379/0"
    celery_result_backend: str = "redis://redis:6379/0"
    aggregate_interval_seconds: int = 900
    import_interval_seconds: int = 900

    # Files
    export_dir: str = "export"
    import_file: str = "import/neue_Sets.csv"
    import_archive_dir: str = "import/archive"

    # Pricing
    tax_rate: str = "0.19"
    channel_markup: str = "0.10"
    ignored_property_ids: List[int] = DEFAULT_IGNORED_PROPERTY_IDS

    # Notifications
    smtp_host: str = ""
    smtp_port: int = 25
    mail_sender: str = "set-builder@localhost"
    mail_recipient: str = ""

    # Workflow automation
    workflow_base_url: str = "https://apps.synesty.com/studio/api/flow/v1"
    workflow_token: str = ""
    workflow_create_sets_flow: str = "BundleErstellen"
    workflow_set_components_flow: str = "Sets-erstellen-Komponenten"
    workflow_timeout_seconds: int = 30

    # Environment
    environment: str = "development"

    @property
    def database_url(self) -> str:
        """Build database URL."""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
