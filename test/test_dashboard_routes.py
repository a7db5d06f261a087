from bson import ObjectId
from pymongo.errors import OperationFailure


def test_genre_stats_is_unbounded_by_default(client, collection):
    collection.aggregate.return_value = iter([
        {"_id": "A", "count": 10, "avg_tempo": 120, "avg_energy": 0.5, "avg_popularity": 60, "avg_danceability": 0.4},
    ])

    resp = client.get("/dashboard/genre-stats")

    assert resp.status_code == 200
    assert resp.json()[0]["genre"] == "A"
    pipeline = collection.aggregate.call_args[0][0]
    assert not any("$limit" in stage for stage in pipeline)


def test_genre_stats_with_cap(client, collection):
    collection.aggregate.return_value = iter([])

    client.get("/dashboard/genre-stats", params={"limit": 3})

    assert collection.aggregate.call_args[0][0][-1] == {"$limit": 3}


def test_artist_stats_default_cap(client, collection):
    collection.aggregate.return_value = iter([])

    assert client.get("/dashboard/artist-stats").status_code == 200

    pipeline = collection.aggregate.call_args[0][0]
    assert pipeline[-1] == {"$limit": 7}
    assert list(pipeline[1]["$sort"])[0] == "track_count"


def test_top_popular(client, collection):
    oid = ObjectId()
    collection.find.return_value.sort.return_value.limit.return_value = [
        {"_id": oid, "name": "X", "artist_name": "Y", "popularity": 80, "genre": "pop"},
    ]

    resp = client.get("/dashboard/top-popular")

    assert resp.json() == [{"id": str(oid), "name": "X", "artist_name": "Y", "popularity": 80, "genre": "pop"}]
    collection.find.return_value.sort.return_value.limit.assert_called_once_with(5)


def test_invalid_cap_is_rejected(client):
    assert client.get("/dashboard/top-popular", params={"limit": 0}).status_code == 422


def test_explicit_stats_on_empty_collection(client, collection):
    collection.aggregate.return_value = iter([])

    resp = client.get("/dashboard/explicit-stats")

    assert resp.json() == {"totalTracks": 0, "explicitCount": 0, "explicitPercentage": 0}


def test_explicit_by_genre(client, collection):
    collection.aggregate.return_value = iter([
        {"_id": "rap", "total_count": 8, "explicit_count": 3, "explicit_ratio": 0.375},
    ])

    resp = client.get("/dashboard/explicit-by-genre")

    assert resp.json() == [{"genre": "rap", "total_count": 8, "explicit_count": 3, "explicit_percentage": 37.5}]


def test_popularity_distribution(client, collection):
    collection.aggregate.return_value = iter([{"_id": 10, "count": 1}, {"_id": 90, "count": 3}])

    resp = client.get("/dashboard/popularity-distribution")

    assert resp.json() == [{"popularity": 10, "count": 1}, {"popularity": 90, "count": 3}]


def test_all_tracks_projection(client, collection):
    oid = ObjectId()
    collection.find.return_value.limit.return_value = [
        {"_id": oid, "popularity": 50, "energy": 0.4, "danceability": 0.3, "valence": 0.2, "duration_ms": 1000},
    ]

    resp = client.get("/dashboard/all-tracks")

    assert resp.json() == [{"id": str(oid), "popularity": 50, "energy": 0.4, "danceability": 0.3,
                            "valence": 0.2, "duration_ms": 1000}]
    collection.find.return_value.limit.assert_called_once_with(2000)


def test_snapshot_failure_returns_500(client, collection):
    collection.count_documents.side_effect = OperationFailure("boom")
    collection.aggregate.return_value = iter([])

    resp = client.get("/dashboard/stats")

    assert resp.status_code == 500


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
