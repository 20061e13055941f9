import os
from typing import Optional

from orderdesk.config.settings import AppSettings
from orderdesk.shared.logger import JohnWickLogger

_app_settings: Optional[AppSettings] = None


def configure_logging(app_settings: AppSettings) -> None:
    """Set the log file and level every logger created afterwards will use."""
    global _app_settings
    _app_settings = app_settings

    log_dir = os.path.dirname(app_settings.log_file)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)


def get_logger(name: str = "orderdesk") -> JohnWickLogger:
    if _app_settings is None:
        return JohnWickLogger(name=name)
    return JohnWickLogger(
        name=name,
        log_file=_app_settings.log_file,
        level=_app_settings.log_level,
    )
