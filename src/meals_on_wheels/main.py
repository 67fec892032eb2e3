from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api import health, users
from .exceptions import OrderingError
from .utils.logging import add_context, clear_context, configure_logging
from meals_on_wheels.api.routes.addresses import router as addresses_router
from meals_on_wheels.api.routes.cart import router as cart_router
from meals_on_wheels.api.routes.orders import router as orders_router
from meals_on_wheels.api.routes.restaurant import router as restaurant_router

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application started")
    yield
    logger.info("Application stopped")


app = FastAPI(title="Meals on Wheels", lifespan=lifespan)

# Подключаем роуты
app.include_router(health.router)
app.include_router(users.router)
app.include_router(cart_router)
app.include_router(addresses_router)
app.include_router(orders_router)
app.include_router(restaurant_router)


@app.middleware("http")
async def request_context(request: Request, call_next):
    clear_context()
    add_context(method=request.method, path=request.url.path)
    return await call_next(request)


@app.exception_handler(OrderingError)
async def ordering_error_handler(request: Request, exc: OrderingError):
    """Типизированные ошибки ядра -> код ответа из exc.status_code."""
    if exc.status_code >= 500:
        logger.error("Ordering error", error=type(exc).__name__, detail=exc.detail)
    else:
        logger.info("Request rejected", error=type(exc).__name__, detail=exc.detail, status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Ошибки валидации входных данных отдаём как 400 с деталями по полям."""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": errors})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
