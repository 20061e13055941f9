from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from orderdesk.config.logger import get_logger
from orderdesk.orders.errors import OrderDeskError, ValidationError
from orderdesk.orders.models import utcnow
from orderdesk.orders.schemas import ErrorResponse

logger = get_logger("ExceptionHandlers")


def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    validation_errors: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(
        timestamp=utcnow(),
        status=status_code,
        error=error,
        message=message,
        path=request.url.path,
        validation_errors=validation_errors or {},
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


async def handle_order_desk_error(request: Request, exc: OrderDeskError) -> JSONResponse:
    field_errors = exc.errors if isinstance(exc, ValidationError) else {}
    logger.warning(
        "Request rejected",
        extra={"path": request.url.path, "status": exc.status_code, "error": str(exc), "fields": field_errors},
    )
    return error_response(request, exc.status_code, exc.error, str(exc), field_errors)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body/path parsing failures, reported in the same field-map shape as ValidationError."""
    field_errors: Dict[str, str] = {}
    for err in exc.errors():
        # drop the leading "body"/"path"/"query" segment
        location = [str(part) for part in err.get("loc", ())[1:]] or ["request"]
        field_errors[".".join(location)] = err.get("msg", "Invalid value")

    logger.warning("Request body rejected", extra={"path": request.url.path, "fields": field_errors})
    return error_response(request, 400, ValidationError.error, "Validation failed", field_errors)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OrderDeskError, handle_order_desk_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
