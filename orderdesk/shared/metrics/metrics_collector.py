import threading
from typing import Dict

from orderdesk.shared.logger import JohnWickLogger


class MetricsCollector:
    """
    In-process counters shared by a component.
    Increments are thread-safe; `report` emits a structured snapshot through the logger.
    """

    def __init__(self, logger: JohnWickLogger):
        self.logger = logger
        self._counters: Dict[str, int] = {}
        self._lock = threading.Lock()

    def increment(self, key: str, amount: int = 1):
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + amount

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def report(self):
        counters = self.snapshot()
        if counters:
            self.logger.info("Metrics update", extra=counters)

    def get(self, key: str) -> int:
        with self._lock:
            return self._counters.get(key, 0)
