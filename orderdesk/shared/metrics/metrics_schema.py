class KafkaMetrics:
    """Standard metric keys for KafkaClient"""
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED_DELIVERY = "failed_delivery"
    READER_SESSIONS = "reader_sessions"


class OrderMetrics:
    """Standard metric keys for OrderService"""
    CREATED = "orders_created"
    STATUS_CHANGED = "orders_status_changed"
    DELETED = "orders_deleted"
    QUEUE_READS = "orders_queue_reads"
    QUEUE_MISSES = "orders_queue_misses"
