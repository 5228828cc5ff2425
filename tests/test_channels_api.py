"""Channel API tests, including the events each mutation broadcasts.

A FakeSocket registered directly with the registry stands in for a
connected browser; it records every frame it is sent.
"""

import asyncio
import json

import pytest

from huddle.realtime.registry import registry
from huddle.services.channel_service import ChannelService


class FakeSocket:
    def __init__(self):
        self.frames: list[dict] = []

    async def send_text(self, data: str) -> None:
        self.frames.append(json.loads(data))


@pytest.fixture
async def workspace_id(user):
    return user.default_workspace_id


@pytest.fixture
def listener(workspace_id):
    sock = FakeSocket()
    registry.register(sock, workspace_id)
    return sock


async def _create(client, workspace_id, name="design", **extra):
    return await client.post(
        "/api/v1/channels", json={"workspace_id": workspace_id, "name": name, **extra}
    )


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_channel(client, workspace_id):
    r = await _create(client, workspace_id, topic="UI work", description="Design talk")
    assert r.status_code == 201
    data = r.json()
    assert data["name"] == "design"
    assert data["workspace_id"] == workspace_id
    assert data["channel_type"] == "PUBLIC"
    assert data["topic"] == "UI work"
    assert data["archived"] is False


@pytest.mark.asyncio
async def test_create_channel_broadcasts_event(client, workspace_id, listener):
    r = await _create(client, workspace_id, channel_type="PRIVATE")
    channel = r.json()

    assert len(listener.frames) == 1
    event = listener.frames[0]
    assert event["type"] == "CHANNEL_CREATED"
    assert event["workspaceId"] == workspace_id
    assert event["data"]["channelId"] == channel["id"]
    assert event["data"]["name"] == "design"
    assert event["data"]["channelType"] == "PRIVATE"
    assert event["data"]["isPrivate"] is True
    assert event["data"]["archived"] is False
    assert "createdAt" in event["data"]


@pytest.mark.asyncio
async def test_create_channel_not_broadcast_to_other_workspaces(
    client, workspace_id, make_user, listener
):
    bob = await make_user("bob@example.com", "Bob")
    other = FakeSocket()
    registry.register(other, bob.default_workspace_id)

    await _create(client, workspace_id)

    assert [e["type"] for e in listener.frames] == ["CHANNEL_CREATED"]
    assert other.frames == []


@pytest.mark.asyncio
async def test_create_channel_survives_dead_socket(client, workspace_id, listener):
    class DeadSocket:
        async def send_text(self, data):
            raise ConnectionResetError("gone")

    dead = DeadSocket()
    registry.register(dead, workspace_id)

    r = await _create(client, workspace_id)
    assert r.status_code == 201
    assert len(listener.frames) == 1
    assert registry.workspace_of(dead) is None


@pytest.mark.asyncio
async def test_create_channel_duplicate_name(client, workspace_id, listener):
    assert (await _create(client, workspace_id)).status_code == 201
    r = await _create(client, workspace_id)
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "CHANNEL_NAME_TAKEN"
    assert len(listener.frames) == 1


@pytest.mark.asyncio
async def test_create_channel_concurrent_duplicates(client, workspace_id, listener):
    first, second = await asyncio.gather(
        _create(client, workspace_id, name="dup"), _create(client, workspace_id, name="dup")
    )
    assert sorted([first.status_code, second.status_code]) == [201, 409]
    loser = first if first.status_code == 409 else second
    assert loser.json()["detail"]["code"] == "CHANNEL_NAME_TAKEN"
    assert [e["type"] for e in listener.frames] == ["CHANNEL_CREATED"]


@pytest.mark.asyncio
async def test_create_channel_name_constraint_is_a_conflict(
    client, workspace_id, listener, monkeypatch
):
    async def never_taken(self, *args, **kwargs):
        return False

    assert (await _create(client, workspace_id)).status_code == 201
    monkeypatch.setattr(ChannelService, "_name_taken", never_taken)

    r = await _create(client, workspace_id)
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "CHANNEL_NAME_TAKEN"
    assert len(listener.frames) == 1

    r = await client.get(f"/api/v1/workspaces/{workspace_id}/channels")
    assert [c["name"] for c in r.json()] == ["design", "general"]


@pytest.mark.asyncio
async def test_create_channel_not_member(client, make_user):
    bob = await make_user("bob@example.com", "Bob")
    r = await _create(client, bob.default_workspace_id)
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "NOT_WORKSPACE_MEMBER"


@pytest.mark.asyncio
async def test_create_channel_missing_workspace(client):
    r = await _create(client, 999999)
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "WORKSPACE_NOT_FOUND"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"name": ""},
    {"name": "x" * 51},
    {"name": "ok", "channel_type": "DM"},
    {"name": "ok", "description": "d" * 256},
])
async def test_create_channel_validation(client, workspace_id, body):
    r = await client.post("/api/v1/channels", json={"workspace_id": workspace_id, **body})
    assert r.status_code == 422


# ═══════════════════════════════════════════════════════════
# Read / update / archive
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_channels_hides_archived(client, workspace_id):
    channel = (await _create(client, workspace_id)).json()
    await client.delete(f"/api/v1/channels/{channel['id']}")

    r = await client.get(f"/api/v1/workspaces/{workspace_id}/channels")
    assert [c["name"] for c in r.json()] == ["general"]

    r = await client.get(
        f"/api/v1/workspaces/{workspace_id}/channels", params={"include_archived": "true"}
    )
    assert [c["name"] for c in r.json()] == ["design", "general"]

    r = await client.get(
        f"/api/v1/workspaces/{workspace_id}/channels", params={"includeArchived": "true"}
    )
    assert [c["name"] for c in r.json()] == ["design", "general"]


@pytest.mark.asyncio
async def test_get_channel(client, workspace_id):
    channel = (await _create(client, workspace_id)).json()
    r = await client.get(f"/api/v1/channels/{channel['id']}")
    assert r.status_code == 200
    assert r.json()["name"] == "design"


@pytest.mark.asyncio
async def test_get_channel_not_found(client):
    r = await client.get("/api/v1/channels/999999")
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "CHANNEL_NOT_FOUND"


@pytest.mark.asyncio
async def test_update_channel_broadcasts_event(client, workspace_id, listener):
    channel = (await _create(client, workspace_id)).json()

    r = await client.patch(
        f"/api/v1/channels/{channel['id']}", json={"name": "ux", "topic": "New topic"}
    )
    assert r.status_code == 200
    assert r.json()["name"] == "ux"
    assert r.json()["topic"] == "New topic"

    assert [e["type"] for e in listener.frames] == ["CHANNEL_CREATED", "CHANNEL_UPDATED"]
    assert listener.frames[1]["data"]["name"] == "ux"
    assert listener.frames[1]["data"]["topic"] == "New topic"


@pytest.mark.asyncio
async def test_update_channel_name_taken(client, workspace_id):
    channel = (await _create(client, workspace_id)).json()
    r = await client.patch(f"/api/v1/channels/{channel['id']}", json={"name": "general"})
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_update_channel_name_constraint_is_a_conflict(
    client, workspace_id, listener, monkeypatch
):
    async def never_taken(self, *args, **kwargs):
        return False

    channel = (await _create(client, workspace_id)).json()
    monkeypatch.setattr(ChannelService, "_name_taken", never_taken)

    r = await client.patch(f"/api/v1/channels/{channel['id']}", json={"name": "general"})
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "CHANNEL_NAME_TAKEN"
    assert [e["type"] for e in listener.frames] == ["CHANNEL_CREATED"]

    r = await client.get(f"/api/v1/channels/{channel['id']}")
    assert r.json()["name"] == "design"


@pytest.mark.asyncio
async def test_archive_channel_broadcasts_once(client, workspace_id, listener):
    channel = (await _create(client, workspace_id)).json()

    r = await client.delete(f"/api/v1/channels/{channel['id']}")
    assert r.status_code == 204
    r = await client.delete(f"/api/v1/channels/{channel['id']}")
    assert r.status_code == 204

    types = [e["type"] for e in listener.frames]
    assert types == ["CHANNEL_CREATED", "CHANNEL_ARCHIVED"]
    assert listener.frames[1]["data"]["archived"] is True


@pytest.mark.asyncio
async def test_update_archived_channel(client, workspace_id):
    channel = (await _create(client, workspace_id)).json()
    await client.delete(f"/api/v1/channels/{channel['id']}")

    r = await client.patch(f"/api/v1/channels/{channel['id']}", json={"topic": "late"})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "CHANNEL_ARCHIVED"
