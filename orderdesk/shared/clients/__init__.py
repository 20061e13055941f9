from orderdesk.shared.clients.kafka_client import KafkaClient

__all__ = ["KafkaClient"]
