from typing import Optional, Tuple, Type

from orderdesk.shared.logger import JohnWickLogger
from orderdesk.shared.retry.base import RetryPolicy


class FixedDelayRetry(RetryPolicy):
    """Same pause between every attempt."""

    def __init__(
        self,
        max_retries: int = 3,
        delay: float = 1.0,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        logger: Optional[JohnWickLogger] = None,
    ):
        super().__init__(max_retries, retry_on=retry_on, logger=logger)
        self.delay = delay

    def delay_for(self, attempt: int) -> float:
        return self.delay
