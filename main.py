# main.py
import os
import time
import logging
from contextlib import asynccontextmanager
from typing import cast, Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy import text
from starlette import status
from starlette.responses import JSONResponse

from fanvault.config.settings import settings
from fanvault.database.postgres import create_tables, engine
from fanvault.database.redis_client import redis_manager
from fanvault.endpoints.analytics import analytics_router
from fanvault.endpoints.auth import auth_router
from fanvault.endpoints.collections import collections_router
from fanvault.endpoints.custom_requests import custom_requests_router
from fanvault.endpoints.live_streams import streams_router
from fanvault.endpoints.messages import messages_router
from fanvault.endpoints.moderation import moderation_router
from fanvault.endpoints.notifications import notifications_router
from fanvault.endpoints.payments import payments_router
from fanvault.endpoints.platform_fee import platform_fee_router
from fanvault.endpoints.posts import posts_router
from fanvault.endpoints.profiles import profiles_router
from fanvault.endpoints.revenue import revenue_router
from fanvault.endpoints.subscriptions import subscriptions_router
from fanvault.endpoints.verification import verification_router
from fanvault.endpoints.websocket import realtime_router
from fanvault.endpoints.welcome_messages import welcome_messages_router
from logging_config import setup_logging

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup events
    setup_logging()
    logger.info("🚀 Запуск приложения...")

    try:
        # 1. Инициализация Redis
        await redis_manager.init_redis()
        logger.info("✅ Redis подключен успешно")
    except Exception as e:
        logger.error(f"❌ Ошибка подключения к Redis: {e}")
        if settings.ENVIRONMENT == "production":
            raise

    try:
        # 2. Создание таблиц (только для разработки)
        if settings.ENVIRONMENT == "development":
            await create_tables()
            logger.info("✅ Таблицы созданы (development mode)")

        logger.info("✅ Все системы инициализированы")

    except Exception as e:
        logger.warning(f"⚠️ Предупреждение при инициализации: {e}")

    yield

    # Shutdown events
    logger.info("🛑 Завершение работы приложения...")

    try:
        await redis_manager.close_redis()
        logger.info("✅ Redis отключен")
    except Exception as e:
        logger.warning(f"⚠️ Ошибка при отключении Redis: {e}")

    try:
        await engine.dispose()
        logger.info("✅ Подключения к БД закрыты")
    except Exception as e:
        logger.warning(f"⚠️ Ошибка при закрытии подключений БД: {e}")

    logger.info("👋 Приложение завершило работу")


# Создание FastAPI приложения
app = FastAPI(
    title="FanVault API",
    description="Платформа подписок на авторов: посты, сообщения, PPV, чаевые и трансляции",
    version="1.0.0",
    lifespan=lifespan,
    swagger_ui_parameters={
        "persistAuthorization": True,
        "tryItOutEnabled": True,
        "displayRequestDuration": True,
        "defaultModelsExpandDepth": -1,
        "filter": True,
    },
    redoc_url=None,
)
app.state.limiter = limiter

# Middleware и CORS
app.add_middleware(
    cast(Any, CORSMiddleware),
    allow_origins=[settings.FRONTEND_URL] if settings.ENVIRONMENT == "production" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type", "Stripe-Signature"],
)

app.add_middleware(
    cast(Any, TrustedHostMiddleware),
    allowed_hosts=os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
    if settings.ENVIRONMENT == "production" else ["*"],
)


# Middleware для логирования медленных запросов
@app.middleware("http")
async def log_slow_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    # Логируем только медленные запросы (> 1 сек)
    if process_time > 1.0:
        logger.warning(
            f"Медленный запрос: {request.method} {request.url} "
            f"- {process_time:.3f}s"
        )

    return response


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    return response

# ========== EXCEPTION HANDLERS ==========

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Глобальный обработчик исключений"""
    logger.error(f"Необработанное исключение: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal Server Error",
            "error_type": type(exc).__name__
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Обработчик ошибок валидации запросов"""
    logger.warning(f"Ошибка валидации запроса: {exc}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation Error",
            "errors": exc.errors()
        }
    )


@app.exception_handler(ValidationError)
async def pydantic_validation_handler(request: Request, exc: ValidationError):
    """Обработчик ошибок валидации Pydantic"""
    logger.warning(f"Ошибка валидации Pydantic: {exc}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Data Validation Error",
            "errors": exc.errors()
        }
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Обработчик превышения лимита запросов"""
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": "Too many requests"}
    )


@app.exception_handler(404)
async def not_found_handler(request: Request, exc: Exception):
    """Обработчик 404 ошибок"""
    detail = getattr(exc, "detail", None)
    # Неизвестный системный маршрут
    if request.url.path.startswith('/api/') or not detail:
        detail = "Endpoint not found"
    return JSONResponse(status_code=404, content={"detail": detail})

# ========== MEDIA ==========

os.makedirs(settings.MEDIA_ROOT, exist_ok=True)
app.mount(settings.MEDIA_URL_PREFIX, StaticFiles(directory=str(settings.MEDIA_ROOT)), name="media")

# ========== SYSTEM ==========

@app.get("/api/health", tags=["System"])
async def health_check(request: Request):
    """Проверка здоровья системы"""
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "services": {}
    }

    # Проверка Redis
    try:
        await redis_manager.redis_client.ping()
        health_status["services"]["redis"] = "healthy"
    except Exception as e:
        health_status["services"]["redis"] = f"unhealthy: {str(e)}"
        health_status["status"] = "degraded"

    # Проверка PostgreSQL
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        health_status["services"]["postgresql"] = "healthy"
    except Exception as e:
        health_status["services"]["postgresql"] = f"unhealthy: {str(e)}"
        health_status["status"] = "unhealthy"

    return health_status


@app.get("/api/status", tags=["System"])
@limiter.limit("10/minute")
async def api_status(request: Request):
    """Статус API с ограничением запросов"""
    return {
        "status": "operational",
        "version": "1.0.0",
        "payments": "stripe" if settings.STRIPE_ENABLED else "simulated",
        "docs": "/docs"
    }

# ========== ПОДКЛЮЧЕНИЕ РОУТЕРОВ ==========

app.include_router(auth_router)
app.include_router(profiles_router)
app.include_router(posts_router)
app.include_router(collections_router)
app.include_router(messages_router)
app.include_router(welcome_messages_router)
app.include_router(custom_requests_router)
app.include_router(subscriptions_router)
app.include_router(payments_router)
app.include_router(revenue_router)
app.include_router(platform_fee_router)
app.include_router(streams_router)
app.include_router(moderation_router)
app.include_router(verification_router)
app.include_router(notifications_router)
app.include_router(analytics_router)
app.include_router(realtime_router)
