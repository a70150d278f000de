"""Login for customers, including accounts created at prebook."""

from __future__ import annotations

import pytest

from hotel_api.core.security import decode_access_token

pytestmark = pytest.mark.asyncio


async def test_login_issues_token(app_context) -> None:
    response = await app_context["client"].post(
        "/api/v1/auth/token",
        json={
            "mobile": app_context["customer_mobile"],
            "password": app_context["customer_password"],
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["token_type"] == "bearer"
    assert decode_access_token(payload["access_token"])["sub"] == str(app_context["customer_id"])


async def test_login_rejects_wrong_password(app_context) -> None:
    response = await app_context["client"].post(
        "/api/v1/auth/token",
        json={"mobile": app_context["customer_mobile"], "password": "wrong"},
    )
    assert response.status_code == 401


async def test_invalid_token_is_rejected(app_context) -> None:
    response = await app_context["client"].get(
        "/api/v1/transactions", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401
