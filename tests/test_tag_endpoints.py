from conftest import register_and_login


def test_create_and_list_tags(client):
    r = client.post("/tags", json={"name": "  Home "})
    assert r.status_code == 200
    body = r.json()
    assert body["msg"] == "Tag added"
    assert body["data"]["name"] == "Home"

    assert client.get("/tags").json() == [body["data"]]


def test_tag_names_are_unique(client):
    client.post("/tags", json={"name": "Home"})
    r = client.post("/tags", json={"name": "Home"})
    assert r.status_code == 409
    assert r.json()["error"]["type"] == "ConflictError"


def test_empty_tag_name(client):
    r = client.post("/tags", json={"name": "   "})
    assert r.status_code == 400


def test_delete_tag(client):
    tag = client.post("/tags", json={"name": "Temp"}).json()["data"]
    r = client.delete(f"/tags/{tag['id']}")
    assert r.status_code == 200
    assert r.json() == {"msg": "Delete tag successfully", "data": {"id": tag["id"]}}
    assert client.get("/tags").json() == []


def test_delete_missing_tag(client):
    r = client.delete("/tags/does-not-exist")
    assert r.status_code == 404
    assert r.json()["error"]["type"] == "NotFound"


def test_cannot_delete_tag_in_use(client):
    tag = client.post("/tags", json={"name": "Used"}).json()["data"]
    client.put("/todo", json={"todoText": "uses tag", "tagId": tag["id"]})

    r = client.delete(f"/tags/{tag['id']}")
    assert r.status_code == 409
    assert "error" in r.json()


def test_tag_in_use_by_another_users_todo(client, make_client):
    tag = client.post("/tags", json={"name": "Shared"}).json()["data"]
    alice = make_client()
    register_and_login(alice, "alice", "secret1")
    alice.put("/todo", json={"todoText": "private", "tagId": tag["id"]})

    assert client.delete(f"/tags/{tag['id']}").status_code == 409


def test_delete_unused_tags(client):
    used = client.post("/tags", json={"name": "Used"}).json()["data"]
    client.post("/tags", json={"name": "Idle1"})
    client.post("/tags", json={"name": "Idle2"})
    client.put("/todo", json={"todoText": "t", "tagId": used["id"]})

    r = client.post("/tags/unused")
    assert r.json()["deletedCount"] == 2
    assert [t["name"] for t in client.get("/tags").json()] == ["Used"]
