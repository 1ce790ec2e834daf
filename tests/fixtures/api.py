"""HTTP seeding helpers for API tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fastapi.testclient import TestClient


def put_profile(client: TestClient, profile_id: str, **fields: Any) -> dict[str, Any]:
    body = {"name": f"Name {profile_id}", **fields}
    response = client.put(f"/v1/profiles/{profile_id}", json=body)
    assert response.status_code == 200
    return response.json()


def send_request(client: TestClient, from_id: str, to_id: str, **fields: Any) -> dict[str, Any]:
    body = {"from_profile_id": from_id, "to_profile_id": to_id, **fields}
    response = client.post("/v1/requests", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def connect(client: TestClient, from_id: str, to_id: str) -> dict[str, Any]:
    """Send and accept a direct request; return the resulting edge."""
    request = send_request(client, from_id, to_id)
    response = client.post(f"/v1/requests/{request['request_id']}/accept")
    assert response.status_code == 200, response.text
    return response.json()
