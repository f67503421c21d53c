# fanvault/services/auth_service.py
import logging
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.schemas.auth import UserRegister, UserLogin, TokenResponse
from fanvault.security.auth import (
    get_user_by_email,
    get_user_by_username,
    get_password_hash,
    authenticate_user,
    create_access_token
)

logger = logging.getLogger(__name__)


class AuthService:

    @staticmethod
    async def register_user(user_data: UserRegister, db: AsyncSession) -> dict:
        """
        Регистрация нового пользователя
        """
        if await get_user_by_email(db, user_data.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email уже зарегистрирован"
            )

        if await get_user_by_username(db, user_data.username):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Username уже занят"
            )

        new_user = models.Profile(
            email=user_data.email.lower(),
            username=user_data.username,
            display_name=user_data.display_name,
            hashed_password=get_password_hash(user_data.password),
            age_verified=user_data.age_verified,
            terms_accepted_at=datetime.now()
        )

        db.add(new_user)
        await db.commit()
        await db.refresh(new_user)

        logger.info(f"✅ Пользователь зарегистрирован: {new_user.id}")

        return {
            "message": "Пользователь зарегистрирован успешно",
            "user_id": new_user.id,
            "email": new_user.email,
            "username": new_user.username
        }

    @staticmethod
    async def login_user(login_data: UserLogin, db: AsyncSession) -> TokenResponse:
        """
        Вход по email и паролю
        """
        user = await authenticate_user(db, login_data.email, login_data.password)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Неверный email или пароль"
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Аккаунт деактивирован"
            )

        access_token = create_access_token(data={"sub": str(user.id)})
        logger.info(f"🔑 Выдан токен пользователю {user.id}")

        return TokenResponse(
            access_token=access_token,
            user_id=user.id,
            username=user.username,
            is_creator=user.is_creator
        )
