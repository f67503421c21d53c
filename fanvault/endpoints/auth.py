# fanvault/endpoints/auth.py
import logging

from fastapi import Depends, APIRouter
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.schemas.auth import UserRegister, UserLogin, TokenResponse
from fanvault.schemas.user import PrivateProfileResponse
from fanvault.security.auth import get_current_user
from fanvault.services.auth_service import AuthService

logger = logging.getLogger(__name__)

auth_router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
    responses={404: {"description": "Not found"}}
)


@auth_router.post("/register", status_code=201)
async def register(user_data: UserRegister, db: AsyncSession = Depends(get_db)):
    """
    Регистрация нового пользователя
    """
    return await AuthService.register_user(user_data, db)


@auth_router.post("/login", response_model=TokenResponse)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """
    Вход по email и паролю
    """
    return await AuthService.login_user(login_data, db)


@auth_router.post("/token", response_model=TokenResponse)
async def token(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    """Вход через OAuth2 форму (username = email), для Swagger UI"""
    return await AuthService.login_user(UserLogin(email=form_data.username, password=form_data.password), db)


@auth_router.get("/me", response_model=PrivateProfileResponse)
async def me(current_user: models.Profile = Depends(get_current_user)):
    return current_user


@auth_router.post("/logout")
async def logout(current_user: models.Profile = Depends(get_current_user)):
    """Токен удаляется на клиенте"""
    logger.info(f"👋 Пользователь {current_user.id} вышел")
    return {"message": "Logged out"}
