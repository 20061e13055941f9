from typing import Optional, Tuple, Type

from orderdesk.shared.logger import JohnWickLogger
from orderdesk.shared.retry.base import RetryPolicy


class ExponentialBackoffRetry(RetryPolicy):
    """Doubles the pause after each failure: base_delay, 2*base_delay, ... capped at max_delay."""

    def __init__(
        self,
        max_retries: int = 5,
        base_delay: float = 0.5,
        max_delay: float = 30.0,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        logger: Optional[JohnWickLogger] = None,
    ):
        super().__init__(max_retries, retry_on=retry_on, logger=logger)
        self.base_delay = base_delay
        self.max_delay = max_delay

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
