from mediashelf.models import MediaType
from mediashelf.routers import favorites, watchlist


def test_favorite_add_list_remove(client, make_media):
    item = make_media("Alien", MediaType.MOVIE)

    res = client.post("/api/favorites", json={"mediaId": item.id})
    assert res.status_code == 201
    body = res.json()
    assert body["mediaId"] == item.id
    assert body["userId"] == 1
    assert body["mediaItem"]["title"] == "Alien"

    listed = client.get("/api/favorites").json()
    assert [f["mediaId"] for f in listed] == [item.id]

    res = client.request("DELETE", "/api/favorites", json={"mediaId": item.id})
    assert res.json() == {"success": True}
    assert client.get("/api/favorites").json() == []


def test_duplicate_favorite_is_rejected(client, make_media):
    item = make_media()
    assert client.post("/api/favorites", json={"mediaId": item.id}).status_code == 201
    res = client.post("/api/favorites", json={"mediaId": item.id})
    assert res.status_code == 400
    assert res.json() == {"error": "Already in favorites"}


def test_favorite_validation(client):
    res = client.post("/api/favorites", json={})
    assert res.status_code == 400
    assert res.json() == {"error": "Media ID is required"}
    assert client.post("/api/favorites", json={"mediaId": 404}).status_code == 404


def test_remove_missing_favorite_is_ok(client):
    res = client.request("DELETE", "/api/favorites", json={"mediaId": 12})
    assert res.status_code == 200


def test_watchlist_defaults_and_duplicate(client, make_media):
    item = make_media("Severance", MediaType.TV_SHOW)
    res = client.post("/api/watchlist", json={"mediaId": item.id})
    assert res.status_code == 201
    body = res.json()
    assert body["priority"] == "MEDIUM"
    assert body["notes"] == ""
    assert body["mediaItem"]["tags"] == []

    res = client.post("/api/watchlist", json={"mediaId": item.id, "priority": "HIGH"})
    assert res.status_code == 400
    assert res.json() == {"error": "Already in watchlist"}


def test_watchlist_rejects_unknown_priority(client, make_media):
    item = make_media()
    res = client.post("/api/watchlist", json={"mediaId": item.id, "priority": "SOMEDAY"})
    assert res.status_code == 400


def test_watchlist_ordered_by_priority_rank(client, make_media):
    low = make_media("Low")
    urgent = make_media("Urgent")
    high = make_media("High")
    medium = make_media("Medium")
    for item, priority in ((low, "LOW"), (urgent, "URGENT"), (high, "HIGH"), (medium, "MEDIUM")):
        client.post("/api/watchlist", json={"mediaId": item.id, "priority": priority})

    order = [e["priority"] for e in client.get("/api/watchlist").json()]
    assert order == ["URGENT", "HIGH", "MEDIUM", "LOW"]


def test_watchlist_patch_is_partial(client, make_media):
    item = make_media()
    client.post("/api/watchlist", json={"mediaId": item.id, "notes": "weekend"})

    res = client.patch("/api/watchlist", json={"mediaId": item.id, "priority": "URGENT"})
    assert res.status_code == 200
    assert res.json()["priority"] == "URGENT"
    assert res.json()["notes"] == "weekend"

    res = client.patch("/api/watchlist", json={"mediaId": item.id, "notes": "tonight"})
    assert res.json()["priority"] == "URGENT"
    assert res.json()["notes"] == "tonight"


def test_watchlist_missing_entry(client):
    assert client.patch("/api/watchlist", json={"mediaId": 5, "priority": "LOW"}).status_code == 404
    res = client.request("DELETE", "/api/watchlist", json={"mediaId": 5})
    assert res.status_code == 404
    assert res.json() == {"error": "Watchlist item not found"}


def test_watchlist_remove(client, make_media):
    item = make_media()
    client.post("/api/watchlist", json={"mediaId": item.id})
    res = client.request("DELETE", "/api/watchlist", json={"mediaId": item.id})
    assert res.json() == {"success": True}
    assert client.get("/api/watchlist").json() == []


def test_favorite_unique_index_reports_conflict(client, make_media, monkeypatch):
    item = make_media()
    assert client.post("/api/favorites", json={"mediaId": item.id}).status_code == 201

    # 동시 요청: 존재 확인은 통과했지만 INSERT에서 유니크 제약에 걸리는 경우
    monkeypatch.setattr(favorites, "find_favorite", lambda db, owner_id, media_id: None)
    res = client.post("/api/favorites", json={"mediaId": item.id})
    assert res.status_code == 400
    assert res.json() == {"error": "Already in favorites"}
    assert len(client.get("/api/favorites").json()) == 1


def test_watchlist_unique_index_reports_conflict(client, make_media, monkeypatch):
    item = make_media()
    assert client.post("/api/watchlist", json={"mediaId": item.id}).status_code == 201

    monkeypatch.setattr(watchlist, "find_entry", lambda db, owner_id, media_id: None)
    res = client.post("/api/watchlist", json={"mediaId": item.id, "priority": "HIGH"})
    assert res.status_code == 400
    assert res.json() == {"error": "Already in watchlist"}
