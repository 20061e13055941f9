from functools import lru_cache

from orderdesk.config.factory import build_health_checker, build_kafka_client, build_order_service
from orderdesk.config.logger import configure_logging
from orderdesk.config.settings import Settings
from orderdesk.orders.order_service import OrderService
from orderdesk.shared.clients import KafkaClient
from orderdesk.shared.health.health_check import HealthChecker

# ----------------------------
# Process-wide instances, built on first use
# ----------------------------


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.app)
    return settings


@lru_cache
def get_kafka_client() -> KafkaClient:
    return build_kafka_client(get_settings())


@lru_cache
def get_order_service() -> OrderService:
    return build_order_service(get_settings(), get_kafka_client())


@lru_cache
def get_health_checker() -> HealthChecker:
    return build_health_checker(get_settings())
