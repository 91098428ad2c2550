"""
HTTP tests for books, tips and posts under the default shared-secret setup,
run once per storage backend.
"""

import pytest


def test_liveness(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "Minbar server is running"


def test_create_book_with_admin_header(client, admin_headers):
    response = client.post(
        "/books",
        json={"title": "Fiqh", "url": "http://x/f.pdf"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["message"] == "Book added successfully"
    book = body["data"]
    assert book["title"] == "Fiqh"
    assert book["url"] == "http://x/f.pdf"
    assert book["id"]
    assert isinstance(book["createdAt"], int)
    assert "updatedAt" not in book

    listed = client.get("/books").json()["data"]
    assert [b["id"] for b in listed] == [book["id"]]


def test_create_book_without_secret_is_forbidden(client):
    response = client.post("/books", json={"title": "Fiqh", "url": "http://x/f.pdf"})
    assert response.status_code == 403
    body = response.json()
    assert body["ok"] is False
    assert body["message"]
    assert client.get("/books").json()["data"] == []


def test_wrong_secret_is_forbidden(client):
    response = client.post(
        "/books",
        json={"title": "Fiqh", "url": "http://x/f.pdf"},
        headers={"x-admin-pass": "nope"},
    )
    assert response.status_code == 403


def test_secret_in_body_is_accepted(client, admin_pass):
    response = client.post(
        "/books",
        json={"title": "Aqeedah", "url": "http://x/a.pdf", "password": admin_pass},
    )
    assert response.status_code == 200
    # The credential is never stored on the record
    assert "password" not in response.json()["data"]


def test_create_book_requires_title_and_url(client, admin_headers):
    response = client.post("/books", json={"title": "Only title"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["ok"] is False

    response = client.post("/books", json={"title": "   ", "url": "u"}, headers=admin_headers)
    assert response.status_code == 400


def test_get_single_book(client, admin_headers):
    created = client.post("/books", json={"title": "T", "url": "u"}, headers=admin_headers).json()["data"]
    response = client.get(f"/books/{created['id']}")
    assert response.status_code == 200
    assert response.json()["data"] == created

    assert client.get("/books/does-not-exist").status_code == 404


def test_partial_update_keeps_other_fields(client, admin_headers):
    created = client.post("/books", json={"title": "Old", "url": "http://x/old.pdf"}, headers=admin_headers).json()["data"]

    response = client.put(f"/books/{created['id']}", json={"title": "New", "url": ""}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Book updated"
    updated = response.json()["data"]
    assert updated["title"] == "New"
    assert updated["url"] == "http://x/old.pdf"
    assert updated["createdAt"] == created["createdAt"]
    assert updated["updatedAt"] > updated["createdAt"]


def test_repeated_updates_move_forward(client, admin_headers):
    created = client.post("/posts", json={"title": "P"}, headers=admin_headers).json()["data"]
    first = client.put(f"/posts/{created['id']}", json={"title": "P1"}, headers=admin_headers).json()["data"]
    second = client.put(f"/posts/{created['id']}", json={"title": "P2"}, headers=admin_headers).json()["data"]
    assert second["updatedAt"] > first["updatedAt"]


def test_update_and_delete_unknown_id(client, admin_headers):
    client.post("/books", json={"title": "Keep", "url": "u"}, headers=admin_headers)
    before = client.get("/books").json()["data"]

    response = client.put("/books/missing", json={"title": "x"}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json() == {"ok": False, "message": "Book not found"}

    response = client.delete("/books/missing", headers=admin_headers)
    assert response.status_code == 404

    assert client.get("/books").json()["data"] == before


def test_delete_book(client, admin_headers):
    created = client.post("/books", json={"title": "T", "url": "u"}, headers=admin_headers).json()["data"]

    assert client.delete(f"/books/{created['id']}").status_code == 403

    response = client.delete(f"/books/{created['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Book deleted"
    assert client.get("/books").json()["data"] == []


def test_tip_with_empty_text(client, admin_headers):
    response = client.post("/tips", json={"text": ""}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["text"] == ""

    response = client.post("/tips", json={"text": "Be kind", "imageUrl": "http://img/1.png"}, headers=admin_headers)
    tip = response.json()["data"]
    assert tip["imageUrl"] == "http://img/1.png"
    assert len(client.get("/tips").json()["data"]) == 2


def test_posts_are_listed_newest_first(client, admin_headers):
    for title in ("first", "second", "third"):
        client.post("/posts", json={"title": title, "videoUrl": f"http://v/{title}.mp4"}, headers=admin_headers)

    posts = client.get("/posts").json()["data"]
    created = [p["createdAt"] for p in posts]
    assert created == sorted(created, reverse=True)
    assert {p["title"] for p in posts} == {"first", "second", "third"}


def test_post_requires_title(client, admin_headers):
    response = client.post("/posts", json={"description": "no title"}, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.parametrize("collection", ["books", "tips", "posts"])
def test_empty_collections_list(client, collection):
    response = client.get(f"/{collection}")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "data": []}



def test_update_tip_image_url(client, admin_headers):
    created = client.post("/tips", json={"text": "Read daily"}, headers=admin_headers).json()["data"]
    assert "imageUrl" not in created

    response = client.put(f"/tips/{created['id']}", json={"imageUrl": "http://img/2.png"}, headers=admin_headers)
    assert response.status_code == 200
    tip = response.json()["data"]
    assert tip["imageUrl"] == "http://img/2.png"
    assert tip["text"] == "Read daily"
    assert "image_url" not in tip

    stored = client.get(f"/tips/{created['id']}").json()["data"]
    assert stored == tip


def test_update_post_video_url(client, admin_headers):
    created = client.post(
        "/posts",
        json={"title": "Talk", "description": "Friday", "videoUrl": "http://v/old.mp4"},
        headers=admin_headers,
    ).json()["data"]

    response = client.put(
        f"/posts/{created['id']}",
        json={"videoUrl": "http://v/new.mp4", "description": ""},
        headers=admin_headers,
    )
    assert response.status_code == 200
    post = response.json()["data"]
    assert post["videoUrl"] == "http://v/new.mp4"
    assert post["description"] == "Friday"
    assert post["title"] == "Talk"
    assert "video_url" not in post
