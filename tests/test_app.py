import io

from conftest import auth_headers, post_form, thumbnail_file


def test_root_returns_welcome_payload(client, test_settings) -> None:
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["version"] == test_settings.VERSION
    assert body["environment"] == "test"


def test_responses_carry_processing_time(client) -> None:
    response = client.get("/api/posts")

    assert response.status_code == 200
    assert float(response.headers["x-process-time"]) >= 0


def test_upload_directory_is_created_on_startup(client, upload_dir) -> None:
    assert upload_dir.is_dir()


def test_r2_posts_expose_public_thumbnail_url(r2_client, s3_client) -> None:
    headers, _ = auth_headers(r2_client, "Ada", "ada@x.com")

    response = r2_client.post("/api/posts", data=post_form(), files=thumbnail_file(), headers=headers)

    assert response.status_code == 201
    post = response.json()
    assert ("blog", post["thumbnail"]) in s3_client.objects
    assert post["thumbnail_url"] == f"https://cdn.example.com/{post['thumbnail']}"
    assert r2_client.get(f"/api/posts/{post['id']}").json()["thumbnail_url"] == post["thumbnail_url"]
    assert r2_client.get(f"/uploads/{post['thumbnail']}").status_code == 404


def test_r2_avatar_change_exposes_public_url_and_removes_old_object(r2_client, s3_client) -> None:
    headers, user_id = auth_headers(r2_client, "Ada", "ada@x.com")
    avatar = {"avatar": ("me.png", io.BytesIO(b"\x89" * 100), "image/png")}
    first = r2_client.post("/api/users/change-avatar", files=avatar, headers=headers).json()

    avatar = {"avatar": ("me.png", io.BytesIO(b"\x89" * 100), "image/png")}
    second = r2_client.post("/api/users/change-avatar", files=avatar, headers=headers).json()

    assert second["avatar_url"] == f"https://cdn.example.com/{second['avatar']}"
    assert r2_client.get(f"/api/users/{user_id}").json()["avatar_url"] == second["avatar_url"]
    assert list(s3_client.objects) == [("blog", second["avatar"])]
    assert ("blog", first["avatar"]) not in s3_client.objects


def test_r2_delete_post_removes_object(r2_client, s3_client) -> None:
    headers, _ = auth_headers(r2_client, "Ada", "ada@x.com")
    post = r2_client.post("/api/posts", data=post_form(), files=thumbnail_file(), headers=headers).json()

    assert r2_client.delete(f"/api/posts/{post['id']}", headers=headers).status_code == 200
    assert s3_client.objects == {}
