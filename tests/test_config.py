import pytest

from starterblog.core.config import DEFAULT_SECRET_KEY, Settings


def test_cors_lists_accept_comma_separated_values(monkeypatch) -> None:
    monkeypatch.setenv("BACKEND_CORS_ORIGINS", "https://blog.io, https://admin.blog.io")
    monkeypatch.setenv("BACKEND_CORS_METHODS", '["GET", "POST"]')

    settings = Settings()

    assert settings.BACKEND_CORS_ORIGINS == ["https://blog.io", "https://admin.blog.io"]
    assert settings.BACKEND_CORS_METHODS == ["GET", "POST"]


def test_token_lifetime_defaults_to_one_day() -> None:
    assert Settings().ACCESS_TOKEN_EXPIRE_MINUTES == 24 * 60


def test_unknown_storage_backend_is_rejected() -> None:
    with pytest.raises(ValueError):
        Settings(STORAGE_BACKEND="ftp")


def test_default_secret_refused_in_production() -> None:
    with pytest.raises(RuntimeError):
        Settings(ENVIRONMENT="production", SECRET_KEY=DEFAULT_SECRET_KEY).validate_runtime_config()

    Settings(ENVIRONMENT="production", SECRET_KEY="real-secret").validate_runtime_config()
