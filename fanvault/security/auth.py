# fanvault/security/auth.py
import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException, status, Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.config.settings import settings
from fanvault.database import models
from fanvault.database.postgres import get_db

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["argon2", "bcrypt"],
    deprecated="auto",
    argon2__time_cost=3,
    argon2__memory_cost=65536,
    argon2__parallelism=2,
    bcrypt__rounds=12,
)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


def get_password_hash(password: str) -> str:
    """Хеширование пароля"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверка пароля"""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode.update({
        "exp": expire,
        "iss": settings.TOKEN_ISSUER,
        "aud": settings.TOKEN_AUDIENCE
    })

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def decode_token(token: str) -> dict:
    """Декодирование токена с проверкой подписи, аудитории и издателя"""
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
        audience=settings.TOKEN_AUDIENCE,
        issuer=settings.TOKEN_ISSUER
    )


async def get_current_user(
        token: str = Depends(oauth2_scheme),
        db: AsyncSession = Depends(get_db)
) -> models.Profile:
    """Получение текущего пользователя по JWT"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token)
        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    result = await db.execute(
        select(models.Profile).where(models.Profile.id == int(user_id))
    )
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise credentials_exception
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[models.Profile]:
    """Получение пользователя по email"""
    result = await db.execute(
        select(models.Profile).where(models.Profile.email == email.lower())
    )
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[models.Profile]:
    """Получение пользователя по username"""
    result = await db.execute(
        select(models.Profile).where(models.Profile.username == username)
    )
    return result.scalar_one_or_none()


async def authenticate_user(db: AsyncSession, email: str, password: str):
    """Аутентификация пользователя по email и паролю"""
    user = await get_user_by_email(db, email)

    if not user:
        logger.warning(f"🔐 AUTH: User not found with email: {email}")
        return False

    if not verify_password(password, user.hashed_password):
        logger.warning(f"🔐 AUTH: Invalid password for user {user.id}")
        return False

    logger.info(f"🔐 AUTH: User {user.id} authenticated successfully")
    return user


optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


async def get_current_user_optional(
        token: Optional[str] = Depends(optional_oauth2_scheme),
        db: AsyncSession = Depends(get_db)
) -> Optional[models.Profile]:
    """Текущий пользователь или None для анонимного запроса"""
    if not token:
        return None
    try:
        user_id = decode_token(token).get("sub")
    except JWTError:
        return None
    if user_id is None:
        return None

    result = await db.execute(
        select(models.Profile).where(models.Profile.id == int(user_id))
    )
    user = result.scalar_one_or_none()
    return user if user and user.is_active else None
