"""
Uniform response envelope.

Success: ``{statusCode, data, message, success}``.
Failure: ``{statusCode, message, success: false, errors}``.
"""
import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaValidationError
from pydantic.alias_generators import to_camel

from .exceptions import ApiError, InternalError

logger = logging.getLogger(__name__)


def camelize(value: Any) -> Any:
    """Recursively rename dict keys from snake_case to camelCase."""
    if isinstance(value, dict):
        return {
            (to_camel(key) if isinstance(key, str) else key): camelize(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [camelize(item) for item in value]
    return value


def api_response(status_code: int, data: Any, message: str = "Success") -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "statusCode": status_code,
            "data": camelize(jsonable_encoder(data)),
            "message": message,
            "success": status_code < 400,
        },
    )


def error_response(status_code: int, message: str, errors: List[Any] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "statusCode": status_code,
            "message": message,
            "success": False,
            "errors": jsonable_encoder(errors or []),
        },
    )


def _schema_errors(raw_errors) -> List[Dict[str, Any]]:
    errors = []
    for error in raw_errors:
        message = str(error.get("msg", "Invalid value"))
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": message,
        })
    return errors


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message, exc.errors)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = _schema_errors(exc.errors())
    message = errors[0]["message"] if errors else "Invalid request"
    return error_response(400, message, errors)


async def schema_validation_handler(request: Request, exc: SchemaValidationError) -> JSONResponse:
    errors = _schema_errors(exc.errors())
    message = errors[0]["message"] if errors else "Invalid request"
    return error_response(400, message, errors)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    error = InternalError()
    return error_response(error.status_code, error.message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SchemaValidationError, schema_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
