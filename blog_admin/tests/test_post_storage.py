"""Tests for the filesystem post store: save, load, delete, list and slug rules."""

import os
from datetime import date

import pytest

from blog_admin.errors import (
    InvalidFormatError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from blog_admin.models.post import PostRecord
from blog_admin.services.post_storage import (
    delete_post,
    list_posts,
    load_post,
    save_post,
    slugify,
    validate_file_slug,
    validate_slug,
)


def _hello(**overrides) -> PostRecord:
    fields = dict(title="Hello World", author="Jane", content="<p>Hi</p>", status="draft")
    fields.update(overrides)
    return PostRecord(**fields)


def _write(path, text, mtime=None):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))


class TestSlugs:
    @pytest.mark.parametrize(
        ("title", "slug"),
        [
            ("Hello World", "hello-world"),
            ("  Python 3.12: What's New?  ", "python-312-whats-new"),
            ("snake_case and--dashes", "snake-case-and-dashes"),
            ("Café au lait", "caf-au-lait"),
            ("!!!", ""),
        ],
    )
    def test_slugify(self, title, slug):
        assert slugify(title) == slug

    @pytest.mark.parametrize("slug", ["", "../etc/passwd", "Upper", "a--b", "-a", "a b"])
    def test_invalid_slugs_rejected(self, slug):
        with pytest.raises(ValidationError):
            validate_slug(slug)

    def test_valid_slug_passes(self):
        assert validate_slug("post-2024-recap") == "post-2024-recap"

    @pytest.mark.parametrize("slug", ["My_Post", "Notes 2024", "post.v2"])
    def test_file_slug_accepts_hand_written_names(self, slug):
        assert validate_file_slug(slug) == slug

    @pytest.mark.parametrize("slug", ["", "..", ".hidden", "a/b", "a\\b", "a\x00b"])
    def test_file_slug_rejects_escapes(self, slug):
        with pytest.raises(ValidationError):
            validate_file_slug(slug)


class TestSave:
    async def test_save_derives_slug_and_writes_file(self, content_dir):
        saved = await save_post(_hello())

        path = content_dir / "hello-world.md"
        assert saved.post.slug == "hello-world"
        assert saved.filepath == "content/hello-world.md"
        text = path.read_text(encoding="utf-8")
        assert "\ndraft: true\n" in text
        assert text.endswith("---\n\nHi\n\n")

    async def test_save_stamps_publish_date_and_read_time(self, content_dir):
        saved = await save_post(_hello(publish_date=date(2001, 1, 1)))
        assert saved.post.publish_date == date.today()
        assert saved.post.read_time == 1
        text = (content_dir / "hello-world.md").read_text(encoding="utf-8")
        assert f"publishDate: {date.today().isoformat()}\n" in text

    async def test_save_uses_explicit_slug(self, content_dir):
        await save_post(_hello(slug="custom-slug"))
        assert (content_dir / "custom-slug.md").exists()

    async def test_save_overwrites_same_slug(self, content_dir):
        await save_post(_hello(content="<p>First</p>"))
        await save_post(_hello(content="<p>Second</p>"))

        assert list(content_dir.glob("*.md")) == [content_dir / "hello-world.md"]
        post = await load_post("hello-world")
        assert post.content == "<p>Second</p>"

    async def test_save_leaves_no_temp_files(self, content_dir):
        await save_post(_hello())
        assert sorted(p.name for p in content_dir.iterdir()) == ["hello-world.md"]

    @pytest.mark.parametrize("missing", ["title", "author", "content"])
    async def test_missing_required_field_writes_nothing(self, content_dir, missing):
        with pytest.raises(ValidationError, match=missing):
            await save_post(_hello(**{missing: "  "}))
        assert not content_dir.exists()

    async def test_bad_explicit_slug_rejected(self, content_dir):
        with pytest.raises(ValidationError):
            await save_post(_hello(slug="../escape"))
        assert not content_dir.exists()

    async def test_title_without_slug_characters_rejected(self, content_dir):
        with pytest.raises(ValidationError):
            await save_post(_hello(title="???"))

    async def test_write_failure_raises_storage_error(self, content_dir, mocker):
        mocker.patch(
            "blog_admin.services.post_storage._write_atomic",
            side_effect=PermissionError("read-only filesystem"),
        )
        with pytest.raises(StorageError, match="read-only"):
            await save_post(_hello())


class TestLoad:
    async def test_save_then_load(self, content_dir):
        post = _hello(tags=["intro", "news"], meta_description="First post")
        await save_post(post)

        loaded = await load_post("hello-world")
        assert loaded.title == post.title
        assert loaded.author == post.author
        assert loaded.content == post.content
        assert loaded.tags == ["intro", "news"]
        assert loaded.meta_description == "First post"
        assert loaded.status == "draft"

    async def test_load_missing_post(self, content_dir):
        with pytest.raises(NotFoundError):
            await load_post("nope")

    async def test_load_rejects_traversal(self, content_dir):
        with pytest.raises(ValidationError):
            await load_post("../secrets")

    async def test_load_hand_named_file(self, content_dir):
        _write(content_dir / "My_Post.md", '---\ntitle: "Mine"\n---\n\nA\n')
        post = await load_post("My_Post")
        assert post.slug == "My_Post"
        assert post.title == "Mine"

    async def test_load_malformed_file(self, content_dir):
        _write(content_dir / "broken.md", "no frontmatter here\n")
        with pytest.raises(InvalidFormatError):
            await load_post("broken")


class TestDelete:
    async def test_delete_missing_post(self, content_dir):
        with pytest.raises(NotFoundError):
            await delete_post("ghost")

    async def test_delete_hand_named_file(self, content_dir):
        _write(content_dir / "My_Post.md", '---\ntitle: "Mine"\n---\n\nA\n')
        await delete_post("My_Post")
        assert not (content_dir / "My_Post.md").exists()

    async def test_delete_then_load(self, content_dir):
        await save_post(_hello())
        await delete_post("hello-world")

        assert not (content_dir / "hello-world.md").exists()
        with pytest.raises(NotFoundError):
            await load_post("hello-world")


class TestList:
    async def test_absent_directory_is_empty(self, content_dir):
        index = await list_posts()
        assert index.posts == []
        assert index.total == 0

    async def test_sorted_by_modification_time(self, content_dir):
        _write(content_dir / "older.md", '---\ntitle: "Older"\n---\n\nA\n', mtime=1_000)
        _write(content_dir / "newer.md", '---\ntitle: "Newer"\n---\n\nB\n', mtime=2_000)
        _write(content_dir / "notes.txt", "ignored")

        index = await list_posts()
        assert [p.slug for p in index.posts] == ["newer", "older"]
        assert index.total == 2

    async def test_hidden_files_not_listed(self, content_dir):
        _write(content_dir / ".scratch.md", '---\ntitle: "Hidden"\n---\n')
        _write(content_dir / "shown.md", '---\ntitle: "Shown"\n---\n')

        index = await list_posts()
        assert [p.slug for p in index.posts] == ["shown"]

    async def test_summary_fields(self, content_dir):
        await save_post(
            _hello(
                tags="a, b",
                meta_description="Desc",
                featured_image="/img.png",
                content="<p>" + "word " * 300 + "</p>",
            )
        )

        summary = (await list_posts()).posts[0]
        assert summary.slug == "hello-world"
        assert summary.title == "Hello World"
        assert summary.description == "Desc"
        assert summary.author == "Jane"
        assert summary.category == "technology"
        assert summary.tags == ["a", "b"]
        assert summary.featured is False
        assert summary.image == "/img.png"
        assert summary.read_time == 2
        assert summary.draft is True
        assert summary.publish_date == date.today().isoformat()
        assert summary.preview.endswith("...")
        assert len(summary.preview) == 203
        assert summary.file_size == (content_dir / "hello-world.md").stat().st_size

    async def test_file_without_frontmatter_uses_defaults(self, content_dir):
        _write(content_dir / "plain-notes.md", "Just <b>text</b>\n")

        summary = (await list_posts()).posts[0]
        assert summary.title == "plain-notes"
        assert summary.category == "general"
        assert summary.draft is False
        assert summary.preview == "Just text"
