"""
Builders for the application's components.

Each builder takes the Settings it needs explicitly; nothing here reads
configuration from the environment on its own.
"""

from aiokafka.errors import KafkaError

from orderdesk.config.db_session import get_sessionmaker
from orderdesk.config.logger import get_logger
from orderdesk.config.settings import Settings
from orderdesk.orders.last_event_reader import LastEventReader
from orderdesk.orders.order_service import OrderService
from orderdesk.orders.publisher import OrderEventPublisher
from orderdesk.orders.store import InMemoryOrderStore, OrderStore, SqlAlchemyOrderStore
from orderdesk.shared.clients import KafkaClient
from orderdesk.shared.health.health_check import HealthChecker
from orderdesk.shared.metrics import MetricsCollector
from orderdesk.shared.retry import ExponentialBackoffRetry


# ----------------------------
# Kafka client
# ----------------------------
def build_kafka_client(settings: Settings) -> KafkaClient:
    logger = get_logger("KafkaClient")
    retry_policy = ExponentialBackoffRetry(
        max_retries=settings.kafka.max_retries,
        base_delay=settings.kafka.retry_backoff,
        retry_on=(KafkaError, OSError),
        logger=logger,
    )
    return KafkaClient(
        bootstrap_servers=settings.kafka.get_bootstrap_servers(settings.app.env_mode),
        logger=logger,
        metrics=MetricsCollector(logger),
        retry_policy=retry_policy,
    )


# ----------------------------
# Order store
# ----------------------------
def build_order_store(settings: Settings) -> OrderStore:
    if settings.orders.store == "memory":
        return InMemoryOrderStore(logger=get_logger("InMemoryOrderStore"))

    database_url = settings.postgres.get_database_url(settings.app.env_mode)
    return SqlAlchemyOrderStore(
        session_factory=get_sessionmaker(database_url, settings.postgres),
        logger=get_logger("SqlAlchemyOrderStore"),
    )


# ----------------------------
# Events
# ----------------------------
def build_order_event_publisher(settings: Settings, kafka_client: KafkaClient) -> OrderEventPublisher:
    return OrderEventPublisher(
        kafka_client=kafka_client,
        order_created_topic=settings.kafka.order_created_topic,
        order_status_changed_topic=settings.kafka.order_status_changed_topic,
        logger=get_logger("OrderEventPublisher"),
    )


def build_last_event_reader(settings: Settings, kafka_client: KafkaClient) -> LastEventReader:
    return LastEventReader(
        kafka_client=kafka_client,
        group_prefix=settings.kafka.reader_group_prefix,
        poll_timeout_ms=settings.kafka.reader_poll_timeout_ms,
        raise_on_error=settings.kafka.reader_raise_on_error,
        logger=get_logger("LastEventReader"),
    )


# ----------------------------
# Order service
# ----------------------------
def build_order_service(settings: Settings, kafka_client: KafkaClient) -> OrderService:
    return OrderService(
        store=build_order_store(settings),
        publisher=build_order_event_publisher(settings, kafka_client),
        reader=build_last_event_reader(settings, kafka_client),
        default_read_topic=settings.kafka.order_created_topic,
        strict_delete=settings.orders.strict_delete,
    )


# ----------------------------
# Health
# ----------------------------
def build_health_checker(settings: Settings) -> HealthChecker:
    postgres_dsn = None
    if settings.orders.store == "postgres":
        postgres_dsn = settings.postgres.get_database_url(settings.app.env_mode, for_asyncpg=True)
    return HealthChecker(
        postgres_dsn=postgres_dsn,
        kafka_bootstrap_servers=settings.kafka.get_bootstrap_servers(settings.app.env_mode),
        logger=get_logger("HealthChecker"),
    )
