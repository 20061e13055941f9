from fastapi import APIRouter, Depends

from orderdesk.config.dependencies import get_health_checker
from orderdesk.shared.health.health_check import HealthChecker

health_router = APIRouter(prefix="/health", tags=["health"])


@health_router.get("", summary="Check all services")
async def check_all_services(checker: HealthChecker = Depends(get_health_checker)):
    return await checker.run_all()


@health_router.get("/postgres", summary="Check Postgres")
async def check_postgres(checker: HealthChecker = Depends(get_health_checker)):
    return {"postgres": await checker.check_postgres()}


@health_router.get("/kafka", summary="Check Kafka")
async def check_kafka(checker: HealthChecker = Depends(get_health_checker)):
    return {"kafka": await checker.check_kafka()}
