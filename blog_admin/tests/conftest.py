"""Shared fixtures for blog-admin tests."""

import pytest


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset the cached settings between tests."""
    yield

    from blog_admin.config import get_settings

    get_settings.cache_clear()


@pytest.fixture
def mock_settings(monkeypatch, tmp_path):
    """Provide a Settings object whose directories all live under tmp_path."""
    from blog_admin.config import Settings, get_settings

    test_settings = Settings(
        project_root=tmp_path,
        content_dir=tmp_path / "content",
        uploads_dir=tmp_path / "uploads",
        uploads_url_prefix="/images/uploads",
        max_upload_bytes=1024,
    )

    get_settings.cache_clear()
    monkeypatch.setattr("blog_admin.config.get_settings", lambda: test_settings)

    # Patch get_settings in all modules that import it directly
    # (from blog_admin.config import get_settings creates a local binding that
    # the blog_admin.config monkeypatch above does not affect)
    for mod_path in [
        "blog_admin.main",
        "blog_admin.services.post_storage",
        "blog_admin.services.media_storage",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    return test_settings


@pytest.fixture
def content_dir(mock_settings):
    return mock_settings.posts_path


@pytest.fixture
def uploads_dir(mock_settings):
    return mock_settings.uploads_path
