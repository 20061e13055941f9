import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog


class JohnWickLogger:
    """
    Structured logger with two sinks: a colored console line and a JSON file line.

    One instance is cached per name, so constructing the same name twice reuses
    the underlying stdlib handlers instead of stacking new ones.
    """

    _logger_cache: Dict[str, "JohnWickLogger"] = {}

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET_COLOR = "\033[0m"

    # keys added by the processors, never echoed as user extras on the console
    _RESERVED = {"event", "level", "logger", "timestamp", "module", "function", "file", "lineno", "class"}

    def __init__(
        self,
        name: str = "orderdesk",
        log_file: str = "orderdesk.log",
        level: str = "INFO",
        context: Optional[dict] = None,
    ):
        self.name = name
        self.context = context or {}

        cached = self._logger_cache.get(name)
        if cached is not None:
            self.console_logger = cached.console_logger
            self.file_logger = cached.file_logger
            return

        def add_caller_stack(logger, method_name, event_dict):
            frame = inspect.currentframe()
            while frame:
                module_name = frame.f_globals.get("__name__")
                if (
                    module_name
                    and not module_name.startswith("structlog")
                    and not module_name.endswith("john_wick_logger")
                ):
                    event_dict["module"] = module_name
                    event_dict["function"] = frame.f_code.co_name
                    event_dict["lineno"] = frame.f_lineno
                    owner = frame.f_locals.get("self")
                    if owner is not None:
                        event_dict["class"] = owner.__class__.__name__
                    break
                frame = frame.f_back
            return event_dict

        def console_processor(logger, method_name, event_dict):
            ts = event_dict.get("timestamp") or datetime.now(timezone.utc).isoformat()
            level_name = event_dict.get("level", method_name).upper()
            msg = event_dict.get("event", "")

            caller = ""
            if level_name in ("WARNING", "ERROR", "CRITICAL"):
                module = event_dict.get("module", "")
                func = event_dict.get("function", "")
                if module and func:
                    caller = f" ({module}.{func}:{event_dict.get('lineno', '')})"

            extras = " ".join(
                f"{key}={value}" for key, value in event_dict.items() if key not in self._RESERVED
            )
            color = self.LEVEL_COLORS.get(level_name, "")
            line = f"{ts} [{self.name}] {level_name}: {msg}"
            if extras:
                line += f" {extras}"
            return f"{color}{line}{caller}{self.RESET_COLOR}"

        numeric_level = getattr(logging, level.upper(), logging.INFO)

        console_logger = logging.getLogger(f"{name}_console")
        console_logger.setLevel(numeric_level)
        console_logger.propagate = False
        if not console_logger.handlers:
            ch = logging.StreamHandler()
            ch.setFormatter(logging.Formatter("%(message)s"))
            console_logger.addHandler(ch)

        self.console_logger = structlog.wrap_logger(
            console_logger,
            processors=[
                structlog.processors.TimeStamper(fmt="ISO"),
                structlog.stdlib.add_log_level,
                add_caller_stack,
                console_processor,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        ).bind(**self.context)

        file_logger = logging.getLogger(f"{name}_file")
        file_logger.setLevel(numeric_level)
        file_logger.propagate = False
        if not any(isinstance(h, logging.FileHandler) for h in file_logger.handlers):
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(logging.Formatter("%(message)s"))
            file_logger.addHandler(fh)

        self.file_logger = structlog.wrap_logger(
            file_logger,
            processors=[
                structlog.processors.TimeStamper(fmt="ISO"),
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                add_caller_stack,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer(default=str),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        ).bind(logger=name, **self.context)

        self._logger_cache[name] = self

    def debug(self, msg: str, **extra: Any):
        self.console_logger.debug(msg, **extra)
        self.file_logger.debug(msg, **extra)

    def info(self, msg: str, **extra: Any):
        self.console_logger.info(msg, **extra)
        self.file_logger.info(msg, **extra)

    def warning(self, msg: str, **extra: Any):
        self.console_logger.warning(msg, **extra)
        self.file_logger.warning(msg, **extra)

    def error(self, msg: str, **extra: Any):
        self.console_logger.error(msg, **extra)
        self.file_logger.error(msg, **extra)

    def critical(self, msg: str, **extra: Any):
        self.console_logger.critical(msg, **extra)
        self.file_logger.critical(msg, **extra)

    def exception(self, msg: str, **extra: Any):
        self.console_logger.exception(msg, **extra)
        self.file_logger.exception(msg, **extra)
