# fanvault/config/settings.py
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

    # PostgreSQL
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "password")
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "fanvault_db")
    DB_ECHO = os.getenv("DB_ECHO", "False").lower() == "true"

    # Redis
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB = int(os.getenv("REDIS_DB", "0"))
    REDIS_PASSWORD = os.getenv("REDIS_PASSWORD", "")

    # JWT
    SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "120"))
    TOKEN_ISSUER = os.getenv("TOKEN_ISSUER", "fanvault-auth")
    TOKEN_AUDIENCE = os.getenv("TOKEN_AUDIENCE", "fanvault-api")

    # Celery
    CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", f"redis://{REDIS_HOST}:{REDIS_PORT}/0")
    CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", f"redis://{REDIS_HOST}:{REDIS_PORT}/1")

    # Медиа хранилище
    MEDIA_ROOT: Path = Path(os.getenv("MEDIA_ROOT", "media"))
    MEDIA_URL_PREFIX: str = "/media"
    MAX_UPLOAD_SIZE: int = int(os.getenv("MAX_UPLOAD_SIZE", str(50 * 1024 * 1024)))

    # Platform settings
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # Деньги считаются в центах
    CURRENCY = os.getenv("CURRENCY", "usd")
    PLATFORM_FEE_AMOUNT = int(os.getenv("PLATFORM_FEE_AMOUNT", "300"))
    PAYMENT_FEE_RATE = float(os.getenv("PAYMENT_FEE_RATE", "0.05"))
    REVENUE_FEE_RATE = float(os.getenv("REVENUE_FEE_RATE", "0.15"))
    MIN_PAYMENT_AMOUNT = 100
    MAX_PAYMENT_AMOUNT = 1_000_000

    # LiveKit
    LIVEKIT_HOST = os.getenv("LIVEKIT_HOST", default="http://localhost:7880")
    LIVEKIT_API_KEY = os.getenv("LIVEKIT_API_KEY", default="devkey")
    LIVEKIT_API_SECRET = os.getenv("LIVEKIT_API_SECRET", default="devsecret-devsecret-devsecret-01")
    LIVE_INGEST_HOST = os.getenv("LIVE_INGEST_HOST", "live.platform.com")

    # Stripe (пустой ключ включает симуляцию платежей)
    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
    STRIPE_PUBLISHABLE_KEY = os.getenv("STRIPE_PUBLISHABLE_KEY", "")
    STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "")

    @property
    def DATABASE_URL(self) -> str:
        """Асинхронный URL для FastAPI с asyncpg"""
        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@"
            f"{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def SYNC_DATABASE_URL(self) -> str:
        """URL для синхронных операций (Alembic, Celery)"""
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}@"
            f"{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def STRIPE_ENABLED(self) -> bool:
        return bool(self.STRIPE_SECRET_KEY)


settings = Settings()
