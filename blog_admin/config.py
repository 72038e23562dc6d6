"""Application configuration via environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    log_level: str = "INFO"
    api_prefix: str = "/api"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:4321",
        "http://localhost:3000",
    ]

    # Filesystem layout (relative paths resolve against project_root)
    project_root: Path = Path(".")
    content_dir: Path = Path("src/content/blog")
    uploads_dir: Path = Path("public/images/uploads")
    uploads_url_prefix: str = "/images/uploads"

    # Media uploads
    max_upload_bytes: int = 10 * 1024 * 1024

    model_config = {"env_file": ".env", "env_prefix": "BLOG_ADMIN_", "extra": "ignore"}

    def resolve(self, path: Path) -> Path:
        """Return *path* anchored at the project root unless already absolute."""
        if path.is_absolute():
            return path
        return self.project_root / path

    @property
    def posts_path(self) -> Path:
        return self.resolve(self.content_dir)

    @property
    def uploads_path(self) -> Path:
        return self.resolve(self.uploads_dir)


@lru_cache
def get_settings() -> Settings:
    return Settings()
