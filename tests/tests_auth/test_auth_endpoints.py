# tests/tests_auth/test_auth_endpoints.py
import uuid

import pytest
from fastapi import status

from conftest import TEST_PASSWORD, auth_headers


def register_payload(**overrides):
    unique_id = uuid.uuid4().hex[:8]
    data = {
        "email": f"new_{unique_id}@example.com",
        "password": "TestPass123",
        "confirm_password": "TestPass123",
        "username": f"new_{unique_id}",
        "display_name": "New User",
        "age_verified": True,
        "terms_accepted": True,
    }
    data.update(overrides)
    return data


@pytest.mark.asyncio
class TestRegistration:
    """Тесты регистрации"""

    async def test_register_success(self, client):
        payload = register_payload()
        response = await client.post("/auth/register", json=payload)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["user_id"] > 0
        assert data["email"] == payload["email"]
        assert data["username"] == payload["username"]

    async def test_register_duplicate_email(self, client, fan):
        response = await client.post("/auth/register", json=register_payload(email=fan.email))
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_register_duplicate_username(self, client, fan):
        response = await client.post("/auth/register", json=register_payload(username=fan.username))
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_register_requires_age_confirmation(self, client):
        response = await client.post("/auth/register", json=register_payload(age_verified=False))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_register_requires_terms(self, client):
        response = await client.post("/auth/register", json=register_payload(terms_accepted=False))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_register_passwords_must_match(self, client):
        response = await client.post("/auth/register", json=register_payload(confirm_password="Different123"))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_register_weak_password(self, client):
        response = await client.post(
            "/auth/register", json=register_payload(password="weakpass", confirm_password="weakpass")
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_register_invalid_username(self, client):
        response = await client.post("/auth/register", json=register_payload(username="bad name!"))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
class TestLogin:
    """Тесты входа"""

    async def test_register_then_login(self, client):
        payload = register_payload()
        await client.post("/auth/register", json=payload)

        response = await client.post("/auth/login", json={"email": payload["email"], "password": payload["password"]})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["username"] == payload["username"]
        assert data["is_creator"] is False

        me = await client.get("/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.status_code == status.HTTP_200_OK
        assert me.json()["email"] == payload["email"]

    async def test_login_wrong_password(self, client, fan):
        response = await client.post("/auth/login", json={"email": fan.email, "password": "WrongPass123"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_login_unknown_email(self, client):
        response = await client.post("/auth/login", json={"email": "nobody@example.com", "password": TEST_PASSWORD})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_login_inactive_account(self, client, user_factory):
        user = await user_factory(is_active=False)
        response = await client.post("/auth/login", json={"email": user.email, "password": TEST_PASSWORD})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_oauth2_token_form(self, client, fan):
        response = await client.post("/auth/token", data={"username": fan.email, "password": TEST_PASSWORD})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user_id"] == fan.id


@pytest.mark.asyncio
class TestCurrentUser:

    async def test_me_returns_private_profile(self, client, fan):
        response = await client.get("/auth/me", headers=auth_headers(fan))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == fan.id
        assert data["email"] == fan.email
        assert data["is_admin"] is False
        assert "hashed_password" not in data

    async def test_me_without_token(self, client):
        response = await client.get("/auth/me")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_me_with_invalid_token(self, client):
        response = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
