from orderdesk.shared.metrics.metrics_collector import MetricsCollector
from orderdesk.shared.metrics.metrics_schema import KafkaMetrics, OrderMetrics

__all__ = ["MetricsCollector", "KafkaMetrics", "OrderMetrics"]
