from __future__ import annotations

import uuid

import pytest
from sqlalchemy.exc import SQLAlchemyError

from models.comment import Comment
from models.post import Post


@pytest.fixture()
def post(storage, user) -> Post:
    p = Post(title="Test Post", content="Test Content", sender_id=user.id)
    storage.new(p)
    storage.save()
    return p


class TestCreatePost:
    def test_sender_is_the_caller(self, client, user, auth_headers):
        res = client.post(
            "/post",
            headers=auth_headers,
            json={"title": "My new Post", "content": "This is the content of my first post!"},
        )
        assert res.status_code == 201
        data = res.get_json()["data"]
        assert data["title"] == "My new Post"
        assert data["senderId"] == user.id
        assert data["id"]

    def test_client_supplied_sender_is_ignored(self, client, user, auth_headers):
        res = client.post(
            "/post",
            headers=auth_headers,
            json={"title": "t", "content": "c", "senderId": str(uuid.uuid4())},
        )
        assert res.status_code == 201
        assert res.get_json()["data"]["senderId"] == user.id

    def test_empty_title(self, client, auth_headers):
        res = client.post("/post", headers=auth_headers, json={"title": "", "content": "c"})
        assert res.status_code == 400
        assert "title" in res.get_json()["details"]

    def test_store_error(self, client, storage, auth_headers, monkeypatch):
        def boom():
            raise SQLAlchemyError("Database error")

        monkeypatch.setattr(storage, "save", boom)
        res = client.post("/post", headers=auth_headers, json={"title": "t", "content": "c"})
        assert res.status_code == 500
        assert res.get_json()["error"] == "Failed to create post"


class TestListPosts:
    def test_all_posts(self, client, post, auth_headers):
        res = client.get("/post", headers=auth_headers)
        assert res.status_code == 200
        body = res.get_json()
        assert [p["id"] for p in body["data"]] == [post.id]
        assert body["meta"] == {"page": 1, "limit": 20, "total": 1}

    def test_filter_by_sender(self, client, storage, auth_service, post, auth_headers):
        other = auth_service.register("other", "other@example.com", "pw")
        storage.new(Post(title="Other", content="x", sender_id=other.id))
        storage.save()

        res = client.get(f"/post?sender={post.sender_id}", headers=auth_headers)
        assert res.status_code == 200
        data = res.get_json()["data"]
        assert len(data) == 1
        assert data[0]["senderId"] == post.sender_id

    def test_invalid_sender_id(self, client, auth_headers):
        res = client.get("/post?sender=invalid-id", headers=auth_headers)
        assert res.status_code == 400
        assert res.get_json()["error"] == "Invalid sender id"

    def test_bad_pagination(self, client, auth_headers):
        res = client.get("/post?page=x", headers=auth_headers)
        assert res.status_code == 400


class TestSinglePost:
    def test_get(self, client, post, auth_headers):
        res = client.get(f"/post/{post.id}", headers=auth_headers)
        assert res.status_code == 200
        assert res.get_json()["data"]["title"] == "Test Post"

    def test_get_missing(self, client, auth_headers):
        res = client.get(f"/post/{uuid.uuid4()}", headers=auth_headers)
        assert res.status_code == 404
        assert res.get_json()["error"] == "Post not found"

    def test_update(self, client, post, auth_headers):
        res = client.put(
            f"/post/{post.id}",
            headers=auth_headers,
            json={"title": "Updated Title", "content": "Updated Content"},
        )
        assert res.status_code == 200
        assert res.get_json()["data"]["title"] == "Updated Title"
        assert res.get_json()["data"]["content"] == "Updated Content"

    def test_update_missing(self, client, auth_headers):
        res = client.put(f"/post/{uuid.uuid4()}", headers=auth_headers, json={"title": "Updated Title"})
        assert res.status_code == 404

    def test_delete_removes_comments(self, client, storage, user, post, auth_headers):
        storage.new(Comment(post_id=post.id, author_id=user.id, content="bye"))
        storage.save()

        res = client.delete(f"/post/{post.id}", headers=auth_headers)
        assert res.status_code == 200
        assert res.get_json()["message"] == "Post deleted successfully"
        assert storage.get(Post, post.id) is None
        assert storage.count(Comment) == 0

    def test_delete_missing(self, client, auth_headers):
        res = client.delete(f"/post/{uuid.uuid4()}", headers=auth_headers)
        assert res.status_code == 404
        assert res.get_json()["error"] == "Post not found"
