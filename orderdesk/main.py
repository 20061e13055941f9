"""
orderdesk application entrypoint.

Run with `python -m orderdesk.main` or `uvicorn orderdesk.main:app`.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from orderdesk.config.db_session import dispose_engine, init_db
from orderdesk.config.dependencies import get_kafka_client, get_settings
from orderdesk.config.logger import get_logger
from orderdesk.orders.exception_handlers import register_exception_handlers
from orderdesk.orders.routes import router as orders_router
from orderdesk.shared.health.router import health_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger = get_logger(settings.app.app_name)
    kafka_client = get_kafka_client()

    if settings.orders.store == "postgres":
        await init_db(settings.postgres.get_database_url(settings.app.env_mode), settings.postgres)

    if settings.kafka.create_topics:
        await kafka_client.create_topics(
            [settings.kafka.order_created_topic, settings.kafka.order_status_changed_topic],
            num_partitions=settings.kafka.num_partitions,
            replication_factor=settings.kafka.replication_factor,
        )

    logger.info(
        "Application startup complete",
        extra={
            "store": settings.orders.store,
            "bootstrap_servers": kafka_client.bootstrap_servers,
            "env_mode": settings.app.env_mode,
        },
    )
    try:
        yield
    finally:
        await kafka_client.stop()
        if settings.orders.store == "postgres":
            await dispose_engine()
        logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(title="orderdesk", lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(orders_router)
    app.include_router(health_router)
    return app


app = create_app()


def run():
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "orderdesk.main:app",
        host=settings.app.host,
        port=settings.app.port,
        log_level=settings.app.log_level.lower(),
    )


if __name__ == "__main__":
    run()
