from orderdesk.shared.health.health_check import HealthChecker

__all__ = ["HealthChecker"]
