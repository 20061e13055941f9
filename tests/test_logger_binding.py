from unittest.mock import MagicMock

from orderdesk.shared.annotations import LoggerBinding
from orderdesk.shared.logger import JohnWickLogger
from orderdesk.shared.metrics import MetricsCollector


@LoggerBinding()
class Widget:
    def __init__(self, logger=None):
        self.logger = logger


@LoggerBinding("custom-name")
def make_thing(logger=None):
    return logger


def test_class_gets_logger_named_after_it():
    widget = Widget()
    assert isinstance(widget.logger, JohnWickLogger)
    assert widget.logger.name == "Widget"


def test_explicit_logger_is_kept():
    mock = MagicMock()
    assert Widget(logger=mock).logger is mock


def test_function_gets_named_logger():
    assert make_thing().name == "custom-name"


def test_metrics_report_logs_snapshot():
    logger = MagicMock()
    metrics = MetricsCollector(logger)
    metrics.increment("orders_created")
    metrics.increment("orders_created", 2)

    metrics.report()

    assert metrics.snapshot() == {"orders_created": 3}
    logger.info.assert_called_once_with("Metrics update", extra={"orders_created": 3})
