import inspect
from functools import wraps
from typing import Optional


def LoggerBinding(name: Optional[str] = None):
    """
    Inject a named logger into a class constructor or a function.

    The logger is only supplied when the caller didn't pass one, so tests can
    still hand in a mock.
    """

    def _make_logger(default_name: str):
        # late import: config.logger applies the configured file and level
        from orderdesk.config.logger import get_logger

        return get_logger(name or default_name)

    def decorator(obj):
        if isinstance(obj, type):
            orig_init = obj.__init__
            accepts_logger = "logger" in inspect.signature(orig_init).parameters

            @wraps(orig_init)
            def __init__(self, *args, **kwargs):
                if accepts_logger and kwargs.get("logger") is None:
                    kwargs["logger"] = _make_logger(obj.__name__)
                orig_init(self, *args, **kwargs)

            obj.__init__ = __init__
            return obj

        if callable(obj):
            @wraps(obj)
            def wrapper(*args, **kwargs):
                if kwargs.get("logger") is None:
                    kwargs["logger"] = _make_logger(obj.__name__)
                return obj(*args, **kwargs)

            return wrapper

        return obj

    return decorator
