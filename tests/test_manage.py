import manage
from starterblog.db.session import Database
from starterblog.modules.posts.models.post import Post
from starterblog.modules.user_management.models.user import User


def test_init_db_then_recount_posts(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'blog.db'}"

    assert manage.main(["--database-url", url, "init-db"]) == 0

    database = Database(url)
    db = database.session()
    user = User(name="Ada", email="ada@x.com", hashed_password="x", posts=5)
    db.add(user)
    db.commit()
    db.add(Post(creator=user.id, title="T", category="Art", description="d", thumbnail="t.png"))
    db.commit()
    user_id = user.id
    db.close()

    assert manage.main(["--database-url", url, "recount-posts"]) == 0

    db = database.session()
    assert db.query(User).filter(User.id == user_id).one().posts == 1
    db.close()
    database.dispose()


def test_no_command_prints_help() -> None:
    assert manage.main([]) == 1


def test_serve_runs_uvicorn_with_options(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(manage.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    assert manage.main(["serve", "--port", "9000", "--reload"]) == 0

    assert calls == [("starterblog.main:app", {"host": "0.0.0.0", "port": 9000, "reload": True})]
