from orderdesk.shared.annotations.logging import LoggerBinding

__all__ = ["LoggerBinding"]
