"""ChannelStore tests — folding workspace events into the channel list."""

from huddle.client.store import ChannelStore


def _rest(channel_id, name, archived=False):
    """A channel row as GET /workspaces/{id}/channels returns it."""
    return {
        "id": channel_id,
        "workspace_id": 1,
        "name": name,
        "description": None,
        "topic": None,
        "channel_type": "PUBLIC",
        "archived": archived,
        "created_at": "2024-05-01T10:00:00Z",
        "updated_at": "2024-05-01T10:00:00Z",
    }


def _event(event_type, channel_id, name="design", workspace_id=1, **data):
    payload = {
        "channelId": channel_id,
        "workspaceId": workspace_id,
        "name": name,
        "channelType": "PUBLIC",
        "isPrivate": False,
        "archived": False,
        "createdAt": "2024-05-01T10:00:00Z",
    }
    payload.update(data)
    return {"type": event_type, "workspaceId": workspace_id, "data": payload}


def _loaded():
    store = ChannelStore(workspace_id=1)
    store.load([_rest(1, "general"), _rest(2, "random")])
    return store


def test_load_from_rest_rows():
    store = _loaded()
    assert [c.name for c in store.visible()] == ["general", "random"]
    assert store.get(2).channel_id == 2
    assert store.current is None


def test_created_appends():
    store = _loaded()
    assert store.apply(_event("CHANNEL_CREATED", 3, "design")) is True
    assert [c.channel_id for c in store.channels] == [1, 2, 3]
    assert store.get(3).name == "design"


def test_created_is_deduplicated():
    """The creator sees its own REST response and then the event."""
    store = _loaded()
    store.apply(_event("CHANNEL_CREATED", 3))
    assert store.apply(_event("CHANNEL_CREATED", 3)) is False
    assert len(store.channels) == 3


def test_updated_replaces_and_refreshes_current():
    store = _loaded()
    store.select(2)

    assert store.apply(_event("CHANNEL_UPDATED", 2, "watercooler", topic="chit-chat"))
    assert store.get(2).name == "watercooler"
    assert store.current.name == "watercooler"
    assert store.current.topic == "chit-chat"
    assert [c.channel_id for c in store.channels] == [1, 2]


def test_updated_unknown_channel_ignored():
    store = _loaded()
    assert store.apply(_event("CHANNEL_UPDATED", 99)) is False
    assert len(store.channels) == 2


def test_archived_marks_and_deselects():
    store = _loaded()
    store.select(2)

    assert store.apply(_event("CHANNEL_ARCHIVED", 2, "random", archived=True))
    assert store.get(2).archived is True
    assert store.current is None
    assert [c.name for c in store.visible()] == ["general"]
    assert [c.name for c in store.visible(show_archived=True)] == ["general", "random"]


def test_archived_keeps_other_selection():
    store = _loaded()
    store.select(1)
    store.apply(_event("CHANNEL_ARCHIVED", 2, "random"))
    assert store.current.channel_id == 1


def test_events_for_other_workspace_ignored():
    store = _loaded()
    assert store.apply(_event("CHANNEL_CREATED", 3, workspace_id=2)) is False
    assert len(store.channels) == 2


def test_control_frames_ignored():
    store = _loaded()
    assert store.apply({"type": "CONNECTED", "workspaceId": 1, "data": {"connections": 1}}) is False
    assert store.apply({"type": "MESSAGE_CREATED", "workspaceId": 1, "data": {}}) is False


def test_reload_keeps_selection_when_present():
    store = _loaded()
    store.select(2)
    store.load([_rest(2, "random"), _rest(3, "design")])
    assert store.current.channel_id == 2

    store.load([_rest(3, "design")])
    assert store.current is None


def test_clear():
    store = _loaded()
    store.select(1)
    store.clear()
    assert store.channels == []
    assert store.current is None
