"""Filesystem-backed post store: one ``<slug>.md`` file per post.

There is no locking and no cache. Listing decodes every file on each call and
concurrent saves to one slug resolve as last-writer-wins. Each write lands via
a temp file and ``os.replace`` so a crash never leaves a truncated post.
"""

import logging
import os
import re
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path

from blog_admin.config import get_settings
from blog_admin.errors import (
    InvalidFormatError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from blog_admin.models.post import PostIndex, PostRecord, PostSummary, SavedPost, split_tags
from blog_admin.services.frontmatter import (
    decode_post,
    encode_post,
    is_draft_value,
    parse_frontmatter,
)
from blog_admin.services.markdown import read_time_minutes

logger = logging.getLogger(__name__)

POST_SUFFIX = ".md"
PREVIEW_LENGTH = 200
REQUIRED_FIELDS = ("title", "content", "author")

_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_TAG_RE = re.compile(r"<[^>]*>")


def slugify(text: str) -> str:
    """Derive a filesystem-safe slug from a title."""
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text, flags=re.ASCII)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


def validate_slug(slug: str) -> str:
    """Reject slugs that are not lowercase, hyphen-separated ``[a-z0-9]`` runs.

    This also keeps path traversal (``..``, slashes) out of file names.
    """
    if not slug or not _SLUG_RE.match(slug):
        raise ValidationError(f"Invalid slug: {slug!r}")
    return slug


def validate_file_slug(slug: str) -> str:
    """Check the stem of an existing post file before touching it.

    Hand-written files may carry names ``slugify`` never produces (``My_Post``),
    so only path separators, NUL and a leading dot (hidden files, ``..``) are
    rejected.
    """
    if not slug or slug.startswith(".") or any(c in slug for c in "/\\\x00"):
        raise ValidationError(f"Invalid slug: {slug!r}")
    return slug


def _content_dir() -> Path:
    return get_settings().posts_path


def _post_path(slug: str) -> Path:
    return _content_dir() / f"{validate_file_slug(slug)}{POST_SUFFIX}"


def _display_path(path: Path) -> str:
    try:
        return path.relative_to(get_settings().project_root).as_posix()
    except ValueError:
        return path.as_posix()


def _preview(body: str) -> str:
    text = " ".join(_TAG_RE.sub("", body).split())
    if len(text) > PREVIEW_LENGTH:
        return text[:PREVIEW_LENGTH] + "..."
    return text


def _summarize(path: Path) -> PostSummary:
    text = path.read_text(encoding="utf-8")
    stat = path.stat()
    slug = path.stem
    try:
        meta, body = parse_frontmatter(text)
    except InvalidFormatError:
        logger.warning("Post file %s has no frontmatter, listing with defaults", path.name)
        meta, body = {}, text

    def _text(key: str) -> str:
        value = meta.get(key, "")
        return ", ".join(value) if isinstance(value, list) else value

    tags = meta.get("tags", [])
    read_time = _text("readTime")
    return PostSummary(
        slug=slug,
        title=_text("title") or slug,
        description=_text("description"),
        author=_text("author"),
        category=_text("category") or "general",
        tags=tags if isinstance(tags, list) else split_tags(tags),
        featured=_text("featured") == "true",
        image=_text("image"),
        read_time=int(read_time) if read_time.isdigit() else 0,
        draft=is_draft_value(meta.get("draft")),
        publish_date=_text("publishDate"),
        preview=_preview(body),
        last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        file_size=stat.st_size,
    )


async def list_posts() -> PostIndex:
    """List every post's metadata, most recently modified first.

    A missing content directory is an empty blog, not an error.
    """
    content_dir = _content_dir()
    if not content_dir.is_dir():
        return PostIndex(posts=[], total=0)

    posts: list[PostSummary] = []
    try:
        for path in sorted(content_dir.glob(f"*{POST_SUFFIX}")):
            try:
                validate_file_slug(path.stem)
            except ValidationError:
                logger.debug("Skipping %s: not addressable by slug", path.name)
                continue
            try:
                posts.append(_summarize(path))
            except UnicodeDecodeError:
                logger.warning("Skipping %s: not valid UTF-8", path.name)
    except OSError as e:
        logger.error("Could not list posts in %s: %s", content_dir, e)
        raise StorageError(f"Failed to list posts: {e}") from e

    posts.sort(key=lambda p: p.last_modified, reverse=True)
    return PostIndex(posts=posts, total=len(posts))


async def load_post(slug: str) -> PostRecord:
    """Read and fully decode one post, body converted to editor HTML."""
    path = _post_path(slug)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise NotFoundError("Post not found") from None
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Could not read post %s: %s", slug, e)
        raise StorageError(f"Failed to load post: {e}") from e
    return decode_post(text, slug)


def _write_atomic(path: Path, text: str) -> None:
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


async def save_post(post: PostRecord) -> SavedPost:
    """Validate, encode and write a post, replacing any file with the same slug.

    The slug falls back to one derived from the title. publishDate is stamped
    with today's date and readTime recomputed from the content.
    """
    missing = [name for name in REQUIRED_FIELDS if not getattr(post, name).strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    slug = validate_slug(post.slug.strip() or slugify(post.title))
    post = post.model_copy(
        update={
            "slug": slug,
            "publish_date": date.today(),
            "read_time": read_time_minutes(post.content),
        }
    )
    text = encode_post(post)

    path = _post_path(slug)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _write_atomic(path, text)
    except OSError as e:
        logger.error("Could not write post %s: %s", slug, e)
        raise StorageError(f"Failed to save post: {e}") from e

    logger.info("Saved post %s (%s)", slug, post.status)
    return SavedPost(post=post, filepath=_display_path(path))


async def delete_post(slug: str) -> None:
    """Permanently remove a post file."""
    path = _post_path(slug)
    try:
        path.unlink()
    except FileNotFoundError:
        raise NotFoundError("Post not found") from None
    except OSError as e:
        logger.error("Could not delete post %s: %s", slug, e)
        raise StorageError(f"Failed to delete post: {e}") from e
    logger.info("Deleted post %s", slug)
