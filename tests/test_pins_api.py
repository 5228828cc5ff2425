"""Pinned message API tests."""

import pytest

from huddle.services.pin_service import PinService


@pytest.fixture
async def channel(client, user):
    r = await client.post(
        "/api/v1/channels",
        json={"workspace_id": user.default_workspace_id, "name": "announcements"},
    )
    return r.json()


@pytest.fixture
async def message(client, channel):
    r = await client.post(
        f"/api/v1/channels/{channel['id']}/messages", json={"content": "Ship it Friday"}
    )
    return r.json()


@pytest.mark.asyncio
async def test_pin_message(client, user, message):
    r = await client.post(f"/api/v1/messages/{message['id']}/pin", json={"reason": "Deadline"})
    assert r.status_code == 201
    pin = r.json()
    assert pin["message_id"] == message["id"]
    assert pin["workspace_id"] == message["workspace_id"]
    assert pin["pinned_by"] == user.id
    assert pin["pinned_reason"] == "Deadline"


@pytest.mark.asyncio
async def test_pin_twice(client, message):
    url = f"/api/v1/messages/{message['id']}/pin"
    assert (await client.post(url, json={"reason": "one"})).status_code == 201
    r = await client.post(url, json={"reason": "two"})
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "ALREADY_PINNED"


@pytest.mark.asyncio
async def test_pin_constraint_is_a_conflict(client, message, monkeypatch):
    async def not_pinned(self, message):
        return False

    url = f"/api/v1/messages/{message['id']}/pin"
    assert (await client.post(url, json={"reason": "one"})).status_code == 201
    monkeypatch.setattr(PinService, "_is_pinned", not_pinned)

    r = await client.post(url, json={"reason": "two"})
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "ALREADY_PINNED"


@pytest.mark.asyncio
@pytest.mark.parametrize("reason", ["", "x" * 501])
async def test_pin_reason_length(client, message, reason):
    r = await client.post(f"/api/v1/messages/{message['id']}/pin", json={"reason": reason})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "INVALID_PIN_REASON"


@pytest.mark.asyncio
async def test_pin_missing_message(client):
    r = await client.post("/api/v1/messages/999999/pin", json={"reason": "why"})
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "MESSAGE_NOT_FOUND"


@pytest.mark.asyncio
async def test_list_pins(client, channel, message):
    other = (await client.post(
        f"/api/v1/channels/{channel['id']}/messages", json={"content": "Second"}
    )).json()
    await client.post(f"/api/v1/messages/{message['id']}/pin", json={"reason": "first"})
    await client.post(f"/api/v1/messages/{other['id']}/pin", json={"reason": "second"})

    r = await client.get(f"/api/v1/channels/{channel['id']}/pins")
    assert r.status_code == 200
    pins = r.json()
    assert [p["message_id"] for p in pins] == [message["id"], other["id"]]
    assert pins[0]["content"] == "Ship it Friday"
    assert pins[0]["pinned_reason"] == "first"


@pytest.mark.asyncio
async def test_unpin_is_idempotent(client, channel, message):
    url = f"/api/v1/messages/{message['id']}/pin"
    await client.post(url, json={"reason": "temp"})

    assert (await client.delete(url)).status_code == 204
    assert (await client.delete(url)).status_code == 204

    r = await client.get(f"/api/v1/channels/{channel['id']}/pins")
    assert r.json() == []


@pytest.mark.asyncio
async def test_list_pins_missing_channel(client):
    r = await client.get("/api/v1/channels/999999/pins")
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "CHANNEL_NOT_FOUND"
