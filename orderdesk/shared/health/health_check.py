import asyncio
import socket
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import asyncpg

from orderdesk.shared.logger import JohnWickLogger
from orderdesk.shared.retry.base import RetryPolicy
from orderdesk.shared.retry.fixed_delay_retry import FixedDelayRetry


def _checked_at() -> str:
    return datetime.now(timezone.utc).isoformat()


class HealthChecker:
    """Connectivity checks for the service's backing systems."""

    SERVICES = ("postgres", "kafka")

    def __init__(
        self,
        postgres_dsn: Optional[str],
        kafka_bootstrap_servers: str,
        logger: Optional[JohnWickLogger] = None,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = 5.0,
    ):
        """
        :param postgres_dsn: plain asyncpg DSN, or None when orders live in memory
        :param kafka_bootstrap_servers: "host:port[,host:port...]"; the first entry is probed
        """
        self.postgres_dsn = postgres_dsn
        self.kafka_bootstrap_servers = kafka_bootstrap_servers
        self.logger = logger or JohnWickLogger("HealthChecker")
        self.retry_policy: RetryPolicy = retry_policy or FixedDelayRetry(max_retries=2, delay=0.5)
        self.timeout = timeout

    def _kafka_address(self) -> Tuple[str, int]:
        first = self.kafka_bootstrap_servers.split(",")[0].strip()
        host, _, port = first.rpartition(":")
        return host, int(port)

    async def check_postgres(self) -> Dict[str, Any]:
        if self.postgres_dsn is None:
            return {"status": "skipped", "reason": "in-memory store", "checked_at": _checked_at()}

        async def _check():
            conn = await asyncpg.connect(dsn=self.postgres_dsn, timeout=self.timeout)
            try:
                await conn.fetchval("SELECT 1")
            finally:
                await conn.close()
            return {"status": "healthy", "checked_at": _checked_at()}

        try:
            return await self.retry_policy.execute(_check)
        except Exception as e:
            self.logger.warning("Postgres check failed", extra={"error": str(e)})
            return {"status": "unhealthy", "error": str(e), "checked_at": _checked_at()}

    async def check_kafka(self) -> Dict[str, Any]:
        host, port = self._kafka_address()

        def _connect():
            with socket.create_connection((host, port), timeout=self.timeout):
                return True

        async def _check():
            await asyncio.to_thread(_connect)
            return {"status": "healthy", "checked_at": _checked_at()}

        try:
            return await self.retry_policy.execute(_check)
        except Exception as e:
            self.logger.warning("Kafka check failed", extra={"error": str(e), "host": host, "port": port})
            return {"status": "unhealthy", "error": str(e), "checked_at": _checked_at()}

    async def run_all(self, services: Optional[List[str]] = None) -> Dict[str, Any]:
        services = list(services or self.SERVICES)
        checks = {"postgres": self.check_postgres, "kafka": self.check_kafka}
        selected = [s for s in services if s in checks]

        results: Dict[str, Any] = dict(
            zip(selected, await asyncio.gather(*(checks[s]() for s in selected)))
        )

        total = len(results)
        healthy = sum(1 for r in results.values() if r["status"] in ("healthy", "skipped"))
        results["summary"] = {"total": total, "healthy": healthy, "unhealthy": total - healthy}
        return results
