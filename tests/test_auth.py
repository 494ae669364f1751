"""Tests for authentication"""

import pytest
from httpx import AsyncClient


async def login(client, email, password):
    return await client.post("/auth/login", data={"username": email, "password": password})


@pytest.mark.asyncio
async def test_login_and_me(test_user, client: AsyncClient):
    """Test login returns tokens that identify the user"""
    response = await login(client, "owner@moonbrew.coffee", "testpass123")

    assert response.status_code == 200
    tokens = response.json()
    assert tokens["token_type"] == "bearer"
    assert tokens["refresh_token"]

    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "owner@moonbrew.coffee"
    assert data["active_organization_id"] == str(test_user.active_organization_id)


@pytest.mark.asyncio
async def test_login_wrong_password(test_user, client: AsyncClient):
    """Test login with a wrong password"""
    response = await login(client, "owner@moonbrew.coffee", "wrong")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient):
    """Test the profile endpoint requires authentication"""
    response = await client.get("/auth/me")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_register(test_db, client: AsyncClient):
    """Test registering a new account"""
    payload = {"email": "new@sunset.diner", "password": "s3cret-pass", "full_name": "New Owner"}

    response = await client.post("/auth/register", json=payload)
    assert response.status_code == 201
    assert response.json()["role"] == "restaurant_admin"
    assert response.json()["active_organization_id"] is None

    response = await client.post("/auth/register", json=payload)
    assert response.status_code == 409

    response = await login(client, "new@sunset.diner", "s3cret-pass")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_refresh_rotates_token(test_user, client: AsyncClient):
    """Test refresh issues new tokens and rejects access tokens"""
    tokens = (await login(client, "owner@moonbrew.coffee", "testpass123")).json()

    response = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    rotated = response.json()

    # The previous refresh token is no longer accepted
    if rotated["refresh_token"] != tokens["refresh_token"]:
        response = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == 401

    response = await client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_invalidates_refresh_token(test_user, client: AsyncClient):
    """Test logout revokes the refresh token"""
    tokens = (await login(client, "owner@moonbrew.coffee", "testpass123")).json()
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    response = await client.post("/auth/logout", headers=headers)
    assert response.status_code == 200

    response = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_switch_active_organization(test_db, test_user, other_org, authenticated_client: AsyncClient):
    """Test switching between the user's restaurants"""
    original_id = str(test_user.active_organization_id)

    response = await authenticated_client.post("/organizations", json={"name": "Moonbrew Annex"})
    assert response.status_code == 201
    annex_id = response.json()["id"]

    response = await authenticated_client.put(
        "/auth/me/active_organization",
        json={"organization_id": original_id},
    )
    assert response.status_code == 200
    assert response.json()["active_organization_id"] == original_id

    response = await authenticated_client.put(
        "/auth/me/active_organization",
        json={"organization_id": annex_id},
    )
    assert response.status_code == 200
    assert response.json()["active_organization_id"] == annex_id

    response = await authenticated_client.put(
        "/auth/me/active_organization",
        json={"organization_id": str(other_org.id)},
    )
    assert response.status_code == 403
