"""Helpers shared by unit and integration tests."""

from typing import Any

from httpx import AsyncClient

from src.sm_realtime.hub import Session


def drain(session: Session) -> list[dict[str, Any]]:
    """Pop every frame currently queued for a session."""
    frames = []
    while not session.queue.empty():
        frames.append(session.queue.get_nowait())
    return frames


def event_names(session: Session) -> list[str]:
    return [f["event"] for f in drain(session)]


async def register(
    client: AsyncClient, phone: str, user_type: str = "client", name: str = "Test User"
) -> tuple[dict[str, Any], dict[str, str]]:
    """Register through the API; returns (user, auth headers)."""
    resp = await client.post(
        "/api/v1/register",
        json={"full_name": name, "phone": phone, "password": "secret1", "user_type": user_type},
    )
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    return data["user"], {"Authorization": f"Bearer {data['token']}"}
