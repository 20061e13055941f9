from typing import Dict, Optional, Union


class OrderDeskError(Exception):
    """Base class for errors the HTTP layer turns into client responses."""

    status_code = 500
    error = "Internal Server Error"


class ValidationError(OrderDeskError):
    """Caller input broke a required-field or non-blank rule. Carries field -> message."""

    status_code = 400
    error = "Validation Error"

    def __init__(self, errors: Union[Dict[str, str], str], message: Optional[str] = None):
        if isinstance(errors, str):
            errors = {errors: message or "Invalid value"}
        self.errors: Dict[str, str] = dict(errors)
        super().__init__("Validation failed")


class OrderNotFoundError(OrderDeskError):
    status_code = 404
    error = "Not Found"

    def __init__(self, order_id_or_message: Union[int, str]):
        if isinstance(order_id_or_message, int):
            self.order_id: Optional[int] = order_id_or_message
            message = f"Order not found with id: {order_id_or_message}"
        else:
            self.order_id = None
            message = order_id_or_message
        super().__init__(message)


class BrokerUnavailableError(OrderDeskError):
    """The broker could not be reached while reading back events."""

    status_code = 503
    error = "Service Unavailable"
