"""Workspace and membership API tests.

Pattern: test_<verb>_<noun>_<scenario>
"""

import pytest

from huddle.services.workspace_service import WorkspaceService


@pytest.fixture
async def workspace(client):
    r = await client.post(
        "/api/v1/workspaces", json={"name": "Acme", "description": "Acme Corp"}
    )
    assert r.status_code == 201
    return r.json()


# ═══════════════════════════════════════════════════════════
# Workspaces
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_workspace(client, workspace):
    assert workspace["name"] == "Acme"
    assert workspace["description"] == "Acme Corp"
    assert workspace["archived"] is False
    assert "created_at" in workspace

    r = await client.get(f"/api/v1/workspaces/{workspace['id']}/channels")
    channels = r.json()
    assert [c["name"] for c in channels] == ["general"]
    assert channels[0]["topic"] == "Default channel for general discussions"
    assert channels[0]["channel_type"] == "PUBLIC"


@pytest.mark.asyncio
async def test_create_workspace_makes_caller_owner(client, user, workspace):
    r = await client.get(f"/api/v1/workspaces/{workspace['id']}/members")
    assert r.status_code == 200
    members = r.json()
    assert len(members) == 1
    assert members[0]["user_id"] == user.id
    assert members[0]["role"] == "OWNER"
    assert "joined_at" in members[0]


@pytest.mark.asyncio
async def test_list_workspaces_only_membership(client, make_user, workspace):
    await make_user("bob@example.com", "Bob")

    r = await client.get("/api/v1/workspaces")
    assert r.status_code == 200
    names = [w["name"] for w in r.json()]
    assert names == ["Alice's Workspace", "Acme"]


@pytest.mark.asyncio
async def test_get_workspace(client, workspace):
    r = await client.get(f"/api/v1/workspaces/{workspace['id']}")
    assert r.status_code == 200
    assert r.json()["name"] == "Acme"


@pytest.mark.asyncio
async def test_get_workspace_not_found(client):
    r = await client.get("/api/v1/workspaces/999999")
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "WORKSPACE_NOT_FOUND"


@pytest.mark.asyncio
async def test_get_workspace_not_member(client, make_user):
    bob = await make_user("bob@example.com", "Bob")
    r = await client.get(f"/api/v1/workspaces/{bob.default_workspace_id}")
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "NOT_WORKSPACE_MEMBER"


@pytest.mark.asyncio
async def test_update_workspace(client, workspace):
    r = await client.put(
        f"/api/v1/workspaces/{workspace['id']}",
        json={"name": "Acme Inc", "description": "Renamed"},
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Acme Inc"
    assert r.json()["description"] == "Renamed"


@pytest.mark.asyncio
async def test_archive_workspace(client, workspace):
    r = await client.delete(f"/api/v1/workspaces/{workspace['id']}")
    assert r.status_code == 204

    r = await client.get(f"/api/v1/workspaces/{workspace['id']}")
    assert r.status_code == 200
    assert r.json()["archived"] is True


@pytest.mark.asyncio
async def test_create_workspace_validates_name(client):
    r = await client.post("/api/v1/workspaces", json={"name": ""})
    assert r.status_code == 422


# ═══════════════════════════════════════════════════════════
# Members
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_add_member(client, make_user, workspace, login_as):
    bob = await make_user("bob@example.com", "Bob")

    r = await client.post(
        f"/api/v1/workspaces/{workspace['id']}/members", json={"email": "bob@example.com"}
    )
    assert r.status_code == 201
    data = r.json()
    assert data["message"] == "Member added successfully"
    assert data["member"] == {
        "user_id": bob.id, "email": "bob@example.com", "display_name": "Bob",
    }

    r = await client.get(f"/api/v1/workspaces/{workspace['id']}/members")
    assert [(m["email"], m["role"]) for m in r.json()] == [
        ("alice@example.com", "OWNER"),
        ("bob@example.com", "MEMBER"),
    ]

    # Bob can now see the workspace
    login_as(bob.id)
    r = await client.get(f"/api/v1/workspaces/{workspace['id']}")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_add_member_unknown_email(client, workspace):
    r = await client.post(
        f"/api/v1/workspaces/{workspace['id']}/members", json={"email": "ghost@example.com"}
    )
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "EMAIL_NOT_FOUND"


@pytest.mark.asyncio
async def test_add_member_twice(client, make_user, workspace):
    await make_user("bob@example.com", "Bob")
    url = f"/api/v1/workspaces/{workspace['id']}/members"
    assert (await client.post(url, json={"email": "bob@example.com"})).status_code == 201

    r = await client.post(url, json={"email": "bob@example.com"})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "ALREADY_MEMBER"


@pytest.mark.asyncio
async def test_add_member_constraint_is_rejected(client, make_user, workspace, monkeypatch):
    bob = await make_user("bob@example.com", "Bob")
    url = f"/api/v1/workspaces/{workspace['id']}/members"
    assert (await client.post(url, json={"email": "bob@example.com"})).status_code == 201

    real_get_membership = WorkspaceService.get_membership

    async def hide_bob(self, workspace_id, user_id):
        if user_id == bob.id:
            return None
        return await real_get_membership(self, workspace_id, user_id)

    monkeypatch.setattr(WorkspaceService, "get_membership", hide_bob)

    r = await client.post(url, json={"email": "bob@example.com"})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "ALREADY_MEMBER"


@pytest.mark.asyncio
async def test_members_require_membership(client, make_user):
    bob = await make_user("bob@example.com", "Bob")
    r = await client.get(f"/api/v1/workspaces/{bob.default_workspace_id}/members")
    assert r.status_code == 403
