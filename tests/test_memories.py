from app.models.memory import Memory


def _create(client, **overrides):
    payload = {"title": "Spot", "description": "", "position": [10, 20], "files": []}
    payload.update(overrides)
    return client.post("/api/memories", json=payload)


def test_create_requires_session(client):
    r = _create(client)
    assert r.status_code == 401
    assert r.json() == {"message": "Not authorized, no token provided"}

    client.cookies.set("token", "garbage")
    assert _create(client).status_code == 401


def test_create_end_to_end(client, verified_user):
    r = _create(client)
    assert r.status_code == 201
    body = r.json()
    assert body["author"] == verified_user["username"] == "janed"
    assert body["title"] == "Spot"
    assert body["position"] == [10, 20]
    assert body["description"] == ""
    assert body["files"] == []
    assert body["id"]


def test_create_trims_text_and_keeps_file_kinds(client, verified_user):
    files = [
        {"name": "beach.jpg", "type": "image"},
        {"name": "waves.mp4", "type": "video"},
        {"name": "gulls.mp3", "type": "audio"},
    ]
    r = _create(client, title="  Beach  ", description="  first trip ", files=files)
    assert r.status_code == 201
    body = r.json()
    assert body["title"] == "Beach"
    assert body["description"] == "first trip"
    assert body["files"] == files


def test_create_validation(client, verified_user):
    for overrides in ({"title": ""}, {"title": "   "}, {"title": None}, {"position": None}):
        r = _create(client, **overrides)
        assert r.status_code == 400, overrides
        assert r.json() == {"message": "Title and position are required."}
    assert _create(client, position=[10]).status_code == 400
    assert _create(client, position=[95, 20]).status_code == 400
    assert _create(client, position=[10, 200]).status_code == 400
    assert _create(client, files=[{"name": "doc.pdf", "type": "document"}]).status_code == 400


def test_author_comes_from_session_not_body(client, db, verified_user):
    r = _create(client, author="someone-else", authorId=999)
    assert r.status_code == 201
    assert r.json()["author"] == "janed"
    db.expire_all()
    memory = db.query(Memory).one()
    assert str(memory.author_id) == verified_user["id"]


def test_create_rejects_pin_inside_exclusivity_radius(client, verified_user):
    assert _create(client).status_code == 201
    # ~5.6 m away
    r = _create(client, position=[10.00005, 20])
    assert r.status_code == 409
    assert "too close" in r.json()["message"]
    # ~11.1 m away
    assert _create(client, position=[10.0001, 20]).status_code == 201


def test_exclusivity_recheck_can_be_disabled(client, settings, verified_user):
    settings.enforce_exclusivity_on_create = False
    assert _create(client).status_code == 201
    assert _create(client).status_code == 201


def test_list_is_public_and_in_insertion_order(client, verified_user):
    _create(client, title="First", position=[1, 1])
    _create(client, title="Second", position=[2, 2])
    client.cookies.clear()
    r = client.get("/api/memories")
    assert r.status_code == 200
    items = r.json()
    assert [m["title"] for m in items] == ["First", "Second"]
    assert all(m["author"] == "janed" for m in items)
    assert set(items[0]) == {"id", "title", "description", "position", "files", "author"}


def test_list_with_missing_author_shows_unknown(client, db):
    db.add(Memory(latitude=1.0, longitude=2.0, title="Orphan", description="", files=[], author_id=12345))
    db.commit()
    items = client.get("/api/memories").json()
    assert items[0]["author"] == "Unknown"
    assert items[0]["position"] == [1.0, 2.0]


def test_empty_list(client):
    assert client.get("/api/memories").json() == []


def test_create_near_pole_rejects_close_pin_at_distant_longitude(client, verified_user):
    assert _create(client, position=[89.9999, 0]).status_code == 201
    # ~9.9 m away despite 53 degrees of longitude
    r = _create(client, position=[89.9999, 53.0])
    assert r.status_code == 409
