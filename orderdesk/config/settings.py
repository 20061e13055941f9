from typing import Literal, Optional, Tuple, Type

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

# ----------------------------
# General / App settings
# ----------------------------
class AppSettings(BaseModel):
    app_name: str = "orderdesk"
    debug: bool = False
    env_mode: str = "local"  # "local" or "docker"

    host: str = "127.0.0.1"
    port: int = 8080

    log_file: str = "orderdesk.log"
    log_level: str = "INFO"


# ----------------------------
# Kafka settings
# ----------------------------
class KafkaSettings(BaseModel):
    host_local: str = "127.0.0.1"
    host_docker: str = "orderdesk_kafka"
    port: int = 9092
    # comma separated list, wins over host/port when set
    bootstrap_servers: Optional[str] = None

    order_created_topic: str = "order.created"
    order_status_changed_topic: str = "order.status.changed"

    reader_group_prefix: str = "last-message-reader"
    reader_poll_timeout_ms: int = 2000
    reader_raise_on_error: bool = False

    create_topics: bool = False
    num_partitions: int = 3
    replication_factor: int = 1

    max_retries: int = 5
    retry_backoff: float = 1.0

    def get_host(self, env_mode: str) -> str:
        return self.host_docker if env_mode == "docker" else self.host_local

    def get_bootstrap_servers(self, env_mode: str) -> str:
        if self.bootstrap_servers:
            return self.bootstrap_servers
        return f"{self.get_host(env_mode)}:{self.port}"


# ----------------------------
# PostgreSQL / DB settings
# ----------------------------
class PostgresSettings(BaseModel):
    host_local: str = "127.0.0.1"
    host_docker: str = "orderdesk_postgres"
    port: int = 5432
    user: str = "orders"
    password: str = "orders"
    db_name: str = "orders"

    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 1800

    def get_host(self, env_mode: str) -> str:
        return self.host_docker if env_mode == "docker" else self.host_local

    def get_database_url(self, env_mode: str, for_asyncpg: bool = False) -> str:
        """SQLAlchemy URL by default, plain DSN for direct asyncpg connections."""
        scheme = "postgresql" if for_asyncpg else "postgresql+asyncpg"
        host = self.get_host(env_mode)
        return f"{scheme}://{self.user}:{self.password}@{host}:{self.port}/{self.db_name}"


# ----------------------------
# Order feature settings
# ----------------------------
class OrderSettings(BaseModel):
    store: Literal["postgres", "memory"] = "postgres"
    strict_delete: bool = False


# ----------------------------
# Top-level settings
# ----------------------------
class Settings(BaseSettings):
    """
    Resolution order: constructor kwargs, ORDERDESK_* environment variables
    (nested with "__", e.g. ORDERDESK_KAFKA__PORT), .env, then orderdesk.yml.
    """

    app: AppSettings = Field(default_factory=AppSettings)
    kafka: KafkaSettings = Field(default_factory=KafkaSettings)
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    orders: OrderSettings = Field(default_factory=OrderSettings)

    model_config = SettingsConfigDict(
        env_prefix="ORDERDESK_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file="orderdesk.yml",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )
