import asyncio
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

from orderdesk.shared.logger import JohnWickLogger


class RetryPolicy(ABC):
    """
    Runs an async callable up to `max_retries` times, sleeping `delay_for(attempt)`
    between attempts. Only exceptions listed in `retry_on` are retried; anything
    else, and cancellation, propagates on the first occurrence.
    """

    def __init__(
        self,
        max_retries: int,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        logger: Optional[JohnWickLogger] = None,
    ):
        self.max_retries = max(1, max_retries)
        self.retry_on = retry_on
        self.logger = logger or JohnWickLogger(name=type(self).__name__)

    @abstractmethod
    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        name = getattr(func, "__name__", str(func))
        for attempt in range(1, self.max_retries + 1):
            try:
                return await func(*args, **kwargs)
            except asyncio.CancelledError:
                raise
            except self.retry_on as exc:
                if attempt == self.max_retries:
                    self.logger.error(
                        f"{type(self).__name__} retries exhausted",
                        extra={"function": name, "error": str(exc), "attempts": self.max_retries},
                    )
                    raise
                delay = self.delay_for(attempt)
                self.logger.warning(
                    f"Attempt {attempt} of {name} failed, retrying in {delay:.2f}s",
                    extra={"error": str(exc)},
                )
                await asyncio.sleep(delay)
