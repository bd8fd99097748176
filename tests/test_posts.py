"""
Tests for posts endpoints.
"""
import os
from datetime import datetime, timedelta

from postboard.models.post import Post


def post_form(title="First post", content="Hello there", status="published", category="news, tech"):
    return {"title": title, "content": content, "status": status, "category": category}


class TestListPosts:
    """Test GET /api/post."""

    def test_get_posts_empty(self, client, auth_headers):
        response = client.get("/api/post", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_posts_newest_first_regardless_of_insertion(self, client, auth_headers, make_post, hours_ago):
        make_post("middle", created_at=hours_ago(2))
        make_post("newest", created_at=hours_ago(1))
        make_post("oldest", created_at=hours_ago(3))

        response = client.get("/api/post", headers=auth_headers)
        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["newest", "middle", "oldest"]

    def test_references_resolved_to_names(self, client, auth_headers, make_post, test_user, other_user):
        make_post(
            "resolved",
            comments=[{"id": "c1", "text": "nice", "user": other_user.id, "created_at": "2024-01-01T00:00:00"}],
            likes=[{"id": "l1", "user": other_user.id}],
        )

        data = client.get("/api/post", headers=auth_headers).json()[0]
        assert data["user"] == {"id": test_user.id, "name": "Test User"}
        assert data["comments"][0]["user"] == {"id": other_user.id, "name": "Other User"}
        assert data["likes"][0]["user"] == {"id": other_user.id, "name": "Other User"}

    def test_unknown_user_resolves_to_null_name(self, client, db, auth_headers, make_post, other_user):
        make_post("orphan", user=other_user)
        db.delete(other_user)
        db.commit()

        data = client.get("/api/post", headers=auth_headers).json()[0]
        assert data["user"]["name"] is None

    def test_get_single_post(self, client, auth_headers, make_post):
        post = make_post("single")
        response = client.get(f"/api/post/{post.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["title"] == "single"

    def test_get_single_post_not_found(self, client, auth_headers):
        response = client.get(f"/api/post/{'0' * 32}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"msg": "Post not found"}

    def test_post_and_comment_timestamps_carry_utc_offset(self, client, auth_headers, make_post):
        post = make_post(
            "stamped",
            comments=[{"id": "c1", "text": "old", "user": "f" * 32, "created_at": "2024-01-01T00:00:00"}],
        )
        client.post(f"/api/post/comment/{post.id}", headers=auth_headers, json={"text": "new"})

        data = client.get(f"/api/post/{post.id}", headers=auth_headers).json()
        stamps = [data["created_at"]] + [c["created_at"] for c in data["comments"]]
        assert len(stamps) == 3
        for stamp in stamps:
            parsed = datetime.fromisoformat(stamp.replace("Z", "+00:00"))
            assert parsed.utcoffset() == timedelta(0)

    def test_get_single_post_invalid_id(self, client, auth_headers):
        response = client.get("/api/post/not-an-id", headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"msg": "Invalid ID"}


class TestCreatePost:
    """Test POST /api/post."""

    def test_create_post(self, client, db, test_user, auth_headers, png_image, settings):
        response = client.post(
            "/api/post",
            headers=auth_headers,
            data=post_form(category="a, b,c"),
            files={"image": png_image},
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        post = data[0]
        assert post["title"] == "First post"
        assert post["status"] == "published"
        assert post["category"] == [" a", " b", " c"]
        assert post["user"] == {"id": test_user.id, "name": "Test User"}
        assert post["comments"] == []
        assert post["likes"] == []

        image = post["image"]
        assert image["mime_type"] == "image/png"
        assert image["file_name"].endswith("photo.png")
        assert image["file_name"][:-len("photo.png")].isdigit()
        assert image["file_path"] == f"/uploads/{image['file_name']}"
        assert image["file_size"] == len(png_image[1])
        assert os.path.exists(os.path.join(settings.upload_dir, image["file_name"]))

    def test_create_post_keeps_category_list(self, client, auth_headers, png_image):
        response = client.post(
            "/api/post",
            headers=auth_headers,
            data={**post_form(), "category": ["one", "two"]},
            files={"image": png_image},
        )
        assert response.status_code == 200
        assert response.json()[0]["category"] == ["one", "two"]

    def test_create_post_unauthenticated(self, client, png_image):
        response = client.post("/api/post", data=post_form(), files={"image": png_image})
        assert response.status_code == 401

    def test_create_post_requires_title_and_content(self, client, db, auth_headers, png_image):
        response = client.post(
            "/api/post",
            headers=auth_headers,
            data={"title": "", "status": "draft"},
            files={"image": png_image},
        )
        assert response.status_code == 400
        assert [e["msg"] for e in response.json()["errors"]] == [
            "Title is required",
            "Content is required",
        ]
        assert db.query(Post).count() == 0

    def test_create_post_whitespace_counts_as_content(self, client, auth_headers, png_image):
        response = client.post(
            "/api/post",
            headers=auth_headers,
            data={"title": "   ", "content": " ", "category": ""},
            files={"image": png_image},
        )
        assert response.status_code == 200
        created = response.json()[0]
        assert created["title"] == "   "
        assert created["content"] == " "

    def test_create_post_requires_image(self, client, db, auth_headers):
        response = client.post("/api/post", headers=auth_headers, data=post_form())
        assert response.status_code == 400
        assert response.json() == {
            "errors": [{"msg": "Image is required", "param": "image", "location": "files"}]
        }
        assert db.query(Post).count() == 0

    def test_create_post_duplicate_title(self, client, db, auth_headers, png_image, make_post, settings):
        make_post("First post")
        response = client.post(
            "/api/post",
            headers=auth_headers,
            data=post_form(),
            files={"image": png_image},
        )
        assert response.status_code == 401
        assert response.json() == {"errors": [{"msg": "This post already exist"}]}
        assert db.query(Post).count() == 1
        assert not os.path.exists(settings.upload_dir) or os.listdir(settings.upload_dir) == []

    def test_create_post_rejects_non_png(self, client, db, auth_headers, settings):
        response = client.post(
            "/api/post",
            headers=auth_headers,
            data=post_form(),
            files={"image": ("photo.png", b"\xff\xd8\xff", "image/jpeg")},
        )
        assert response.status_code == 400
        assert response.json() == {"errors": [{"msg": "Please, upload only PNG images"}]}
        assert db.query(Post).count() == 0
        assert not os.path.exists(settings.upload_dir) or os.listdir(settings.upload_dir) == []

    def test_create_post_write_failure_is_500(self, client, db, auth_headers, png_image, monkeypatch):
        from postboard.uploads import ImageIngest

        def broken_save(self, upload):
            raise OSError("disk full")

        monkeypatch.setattr(ImageIngest, "save", broken_save)
        response = client.post(
            "/api/post",
            headers=auth_headers,
            data=post_form(),
            files={"image": png_image},
        )
        assert response.status_code == 500
        assert response.text == "Server Error"
        assert db.query(Post).count() == 0


class TestUpdatePost:
    """Test PUT /api/post/{id}."""

    def create(self, client, headers, image, **form):
        response = client.post(
            "/api/post",
            headers=headers,
            data=post_form(**form),
            files={"image": image},
        )
        assert response.status_code == 200
        return response.json()[0]

    def test_update_post_replaces_fields_image_and_owner(
        self, client, auth_headers, other_headers, other_user, png_image, settings
    ):
        original = self.create(client, auth_headers, png_image)
        old_file = os.path.join(settings.upload_dir, original["image"]["file_name"])
        assert os.path.exists(old_file)

        response = client.put(
            f"/api/post/{original['id']}",
            headers=other_headers,
            data=post_form(title="Edited", content="New body", status="draft", category="x"),
            files={"image": ("second.png", png_image[1], "image/png")},
        )
        assert response.status_code == 200
        post = response.json()[0]
        assert post["id"] == original["id"]
        assert post["title"] == "Edited"
        assert post["content"] == "New body"
        assert post["status"] == "draft"
        assert post["category"] == [" x"]
        assert post["user"] == {"id": other_user.id, "name": "Other User"}
        assert post["image"]["file_name"].endswith("second.png")

        assert not os.path.exists(old_file)
        assert os.path.exists(os.path.join(settings.upload_dir, post["image"]["file_name"]))

    def test_update_post_rejects_non_png_without_writing(self, client, auth_headers, png_image, settings):
        original = self.create(client, auth_headers, png_image)
        before = sorted(os.listdir(settings.upload_dir))

        response = client.put(
            f"/api/post/{original['id']}",
            headers=auth_headers,
            data=post_form(title="Edited"),
            files={"image": ("pic.gif", b"GIF89a", "image/gif")},
        )
        assert response.status_code == 400
        assert sorted(os.listdir(settings.upload_dir)) == before

    def test_update_post_requires_image(self, client, auth_headers, make_post):
        post = make_post("no image update")
        response = client.put(f"/api/post/{post.id}", headers=auth_headers, data=post_form())
        assert response.status_code == 400
        assert response.json()["errors"][0]["msg"] == "Image is required"

    def test_update_post_invalid_id(self, client, auth_headers, png_image):
        response = client.put(
            "/api/post/123",
            headers=auth_headers,
            data=post_form(),
            files={"image": png_image},
        )
        assert response.status_code == 400
        assert response.json() == {"msg": "Invalid ID"}

    def test_update_missing_post(self, client, auth_headers, png_image, settings):
        response = client.put(
            f"/api/post/{'a' * 32}",
            headers=auth_headers,
            data=post_form(),
            files={"image": png_image},
        )
        assert response.status_code == 404

    def test_update_survives_missing_previous_file(self, client, auth_headers, png_image, make_post):
        post = make_post("lost file", image={
            "file_name": "1700000000000gone.png",
            "mime_type": "image/png",
            "file_size": 10,
            "file_path": "/uploads/1700000000000gone.png",
        })
        response = client.put(
            f"/api/post/{post.id}",
            headers=auth_headers,
            data=post_form(title="lost file"),
            files={"image": png_image},
        )
        assert response.status_code == 200
        assert response.json()[0]["image"]["file_name"].endswith("photo.png")


class TestDeletePost:
    """Test DELETE /api/post/{id}."""

    def test_delete_post_removes_record_and_file(self, client, db, auth_headers, png_image, make_post, settings):
        make_post("keeper")
        created = client.post(
            "/api/post",
            headers=auth_headers,
            data=post_form(title="doomed"),
            files={"image": png_image},
        ).json()
        doomed = next(p for p in created if p["title"] == "doomed")
        stored = os.path.join(settings.upload_dir, doomed["image"]["file_name"])
        assert os.path.exists(stored)

        response = client.delete(f"/api/post/{doomed['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["keeper"]
        assert not os.path.exists(stored)
        assert db.query(Post).filter(Post.id == doomed["id"]).first() is None

        listing = client.get("/api/post", headers=auth_headers).json()
        assert doomed["id"] not in [p["id"] for p in listing]

    def test_delete_post_without_file_on_disk(self, client, auth_headers, make_post):
        post = make_post("no file", image={
            "file_name": "missing.png",
            "mime_type": "image/png",
            "file_size": 1,
            "file_path": "/uploads/missing.png",
        })
        response = client.delete(f"/api/post/{post.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_delete_missing_post(self, client, auth_headers):
        response = client.delete(f"/api/post/{'b' * 32}", headers=auth_headers)
        assert response.status_code == 404

    def test_delete_post_unauthenticated(self, client, make_post):
        post = make_post("protected")
        response = client.delete(f"/api/post/{post.id}")
        assert response.status_code == 401
