from orderdesk.shared.retry.base import RetryPolicy
from orderdesk.shared.retry.exponential_backoff_retry import ExponentialBackoffRetry
from orderdesk.shared.retry.fixed_delay_retry import FixedDelayRetry

__all__ = ["RetryPolicy", "ExponentialBackoffRetry", "FixedDelayRetry"]
