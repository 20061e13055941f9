from unittest.mock import AsyncMock, MagicMock

import pytest

from orderdesk.shared.health import HealthChecker
from orderdesk.shared.health import health_check as health_module
from orderdesk.shared.retry import FixedDelayRetry


def make_checker(dsn=None, servers="localhost:9092") -> HealthChecker:
    logger = MagicMock()
    return HealthChecker(
        postgres_dsn=dsn,
        kafka_bootstrap_servers=servers,
        logger=logger,
        retry_policy=FixedDelayRetry(max_retries=1, delay=0, logger=logger),
        timeout=0.1,
    )


@pytest.mark.asyncio
async def test_postgres_is_skipped_without_dsn():
    result = await make_checker().check_postgres()
    assert result["status"] == "skipped"


@pytest.mark.asyncio
async def test_postgres_healthy(monkeypatch):
    conn = MagicMock()
    conn.fetchval = AsyncMock(return_value=1)
    conn.close = AsyncMock()
    monkeypatch.setattr(health_module.asyncpg, "connect", AsyncMock(return_value=conn))

    result = await make_checker(dsn="postgresql://u:p@db:5432/orders").check_postgres()

    assert result["status"] == "healthy"
    conn.fetchval.assert_awaited_once_with("SELECT 1")
    conn.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_postgres_unreachable_is_unhealthy(monkeypatch):
    monkeypatch.setattr(health_module.asyncpg, "connect", AsyncMock(side_effect=OSError("refused")))

    result = await make_checker(dsn="postgresql://u:p@db:5432/orders").check_postgres()

    assert result["status"] == "unhealthy"
    assert "refused" in result["error"]


@pytest.mark.asyncio
async def test_kafka_probes_first_bootstrap_server(monkeypatch):
    seen = []

    class FakeSocket:
        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    def fake_create_connection(address, timeout=None):
        seen.append(address)
        return FakeSocket()

    monkeypatch.setattr(health_module.socket, "create_connection", fake_create_connection)

    result = await make_checker(servers="broker-a:9093,broker-b:9093").check_kafka()

    assert result["status"] == "healthy"
    assert seen == [("broker-a", 9093)]


@pytest.mark.asyncio
async def test_run_all_summary_counts_skipped_as_healthy(monkeypatch):
    def refuse(address, timeout=None):
        raise ConnectionRefusedError("no broker")

    monkeypatch.setattr(health_module.socket, "create_connection", refuse)

    results = await make_checker().run_all()

    assert results["postgres"]["status"] == "skipped"
    assert results["kafka"]["status"] == "unhealthy"
    assert results["summary"] == {"total": 2, "healthy": 1, "unhealthy": 1}
