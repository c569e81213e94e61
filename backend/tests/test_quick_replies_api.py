def test_requires_session(client):
    assert client.get("/api/quick-replies").status_code == 401


def test_crud(client, make_user, login):
    login(make_user())

    created = client.post("/api/quick-replies", json={"title": "Greeting", "content": "Hi! How can I help?"})
    assert created.status_code == 201
    reply_id = created.json()["id"]

    updated = client.put("/api/quick-replies", json={"id": reply_id, "title": "Hello", "content": "Hello there"})
    assert updated.status_code == 200
    assert updated.json()["title"] == "Hello"

    listing = client.get("/api/quick-replies").json()
    assert [r["id"] for r in listing] == [reply_id]

    assert client.delete("/api/quick-replies", params={"id": reply_id}).json() == {"success": True, "id": reply_id}
    assert client.get("/api/quick-replies").json() == []


def test_validation(client, make_user, login):
    login(make_user())
    response = client.post("/api/quick-replies", json={"title": "", "content": "x"})
    assert response.status_code == 400
    assert "title" in response.json()["details"]


def test_delete_requires_id(client, make_user, login):
    login(make_user())
    assert client.delete("/api/quick-replies").status_code == 400


def test_other_users_replies_are_invisible(client, make_user, login):
    owner = make_user()
    intruder = make_user(email="intruder@acme.io")
    login(owner)
    reply_id = client.post("/api/quick-replies", json={"title": "Mine", "content": "Mine"}).json()["id"]

    login(intruder)

    assert client.get("/api/quick-replies").json() == []
    assert client.put("/api/quick-replies", json={"id": reply_id, "title": "x", "content": "x"}).status_code == 404
    assert client.delete("/api/quick-replies", params={"id": reply_id}).status_code == 404
