# marketplace/api/errors.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from marketplace.domain.errors import MarketplaceError, ValidationError
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    return JSONResponse(status_code=exc.code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = {}
    for err in exc.errors():
        #last element of loc is the field name (body -> shipping_address)
        field = str(err["loc"][-1]) if err.get("loc") else "body"
        fields[field] = err.get("msg", "invalid")

    error = ValidationError("Parameters validation error", data=fields)
    return JSONResponse(status_code=error.code, content=error.to_dict())


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "name": "DatabaseError",
            "message": "Database operation failed",
            "code": 500,
            "type": "DATABASE_ERROR",
        },
    )


async def lock_backend_error_handler(request: Request, exc: RedisError):
    logger.error(f"Redis unavailable on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={
            "name": "ServiceUnavailable",
            "message": "Checkout is temporarily unavailable, retry shortly",
            "code": 503,
            "type": "SERVICE_UNAVAILABLE",
        },
    )


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(RedisError, lock_backend_error_handler)
