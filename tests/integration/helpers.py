"""Shared helpers for integration tests."""

import uuid

from httpx import AsyncClient

from src.xp_gateway.auth.jwt_handler import create_access_token

ADMIN_ID = "it-admin"


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def unique_user(prefix: str = "it") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}"


async def fund(client: AsyncClient, user_id: str, program: str, amount: int) -> None:
    """Credit points through the admin endpoint."""
    resp = await client.post(
        "/api/v1/admin/wallets/credit",
        json={"user_id": user_id, "program": program, "amount": amount},
        headers=auth_headers(ADMIN_ID),
    )
    assert resp.status_code == 200, resp.text
