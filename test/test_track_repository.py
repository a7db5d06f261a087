from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect

from database.connection import UpstreamStoreError
from models.track import TrackCreate, TrackUpdate
from repositories.track_repository import (
    create_track,
    delete_track,
    get_track_by_id,
    serialize_track,
    update_track,
)
from helpers import SAMPLE_TRACK


def test_serialize_exposes_id_only():
    oid = ObjectId()
    track = serialize_track({"_id": oid, "name": "X"})

    assert track == {"id": str(oid), "name": "X"}
    assert serialize_track(None) is None


def test_create_then_fetch_returns_same_values(memory_store):
    created = create_track(memory_store, TrackCreate(**SAMPLE_TRACK))

    fetched = get_track_by_id(memory_store, created["id"])

    for field, value in SAMPLE_TRACK.items():
        assert fetched[field] == value
    assert fetched["explicit"] is False
    assert fetched["created_at"] == fetched["updated_at"]
    assert fetched == created


def test_list_artist_is_stored_as_list(memory_store):
    created = create_track(memory_store, TrackCreate(**{**SAMPLE_TRACK, "artist_name": ["A", "B"]}))

    assert get_track_by_id(memory_store, created["id"])["artist_name"] == ["A", "B"]


def test_malformed_id_is_not_found_without_store_call():
    store = MagicMock()

    assert get_track_by_id(store, "not-an-id") is None
    assert update_track(store, "nope", TrackUpdate(popularity=1)) is None
    assert delete_track(store, "123") is False
    store.tracks.find_one.assert_not_called()


def test_partial_update_only_touches_sent_fields(memory_store):
    created = create_track(memory_store, TrackCreate(**SAMPLE_TRACK))

    updated = update_track(memory_store, created["id"], TrackUpdate(popularity=95))

    assert updated["popularity"] == 95
    assert updated["name"] == "X"
    assert updated["energy"] == 0.7


def test_update_missing_track(memory_store):
    assert update_track(memory_store, str(ObjectId()), TrackUpdate(genre="rock")) is None


def test_delete_by_identity(memory_store):
    created = create_track(memory_store, TrackCreate(**SAMPLE_TRACK))

    assert delete_track(memory_store, created["id"]) is True
    assert delete_track(memory_store, created["id"]) is False
    assert get_track_by_id(memory_store, created["id"]) is None


def test_store_errors_are_translated(store, collection):
    collection.find_one.side_effect = AutoReconnect("down")

    with pytest.raises(UpstreamStoreError):
        get_track_by_id(store, str(ObjectId()))
