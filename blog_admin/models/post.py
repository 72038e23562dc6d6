"""Blog post data models."""

from datetime import date, datetime
from typing import Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
)

PostStatus = Literal["draft", "published"]


def split_tags(value: str) -> list[str]:
    """Split a comma-joined tag string, dropping blanks."""
    return [t.strip() for t in value.split(",") if t.strip()]


class PostRecord(BaseModel):
    """A post as edited in the admin UI.

    ``content`` is the editor's HTML. ``tags`` travel as a comma-joined string
    over JSON and as a list everywhere else.
    """

    slug: str = ""
    title: str = ""
    author: str = ""
    content: str = ""
    meta_description: str = Field("", alias="metaDescription")
    focus_keywords: str = Field("", alias="focusKeywords")
    canonical_url: str = Field("", alias="canonicalURL")
    robots_meta: str = Field("index,follow", alias="robotsMeta")
    og_title: str = Field("", alias="ogTitle")
    og_description: str = Field("", alias="ogDescription")
    og_image: str = Field("", alias="ogImage")
    category: str = "technology"
    tags: list[str] = []
    featured_image: str | None = Field(None, alias="featuredImage")
    schema_type: str = Field("Article", alias="schemaType")
    publisher_name: str = Field("", alias="publisherName")
    publisher_logo: str = Field("", alias="publisherLogo")
    status: PostStatus = Field(
        "draft", validation_alias=AliasChoices("status", "publishStatus")
    )
    visibility: str = "public"
    publish_date: date | None = Field(None, alias="publishDate")
    read_time: int = Field(0, alias="readTime")

    model_config = {"populate_by_name": True}

    @field_validator(
        "slug",
        "title",
        "author",
        "content",
        "meta_description",
        "focus_keywords",
        "canonical_url",
        "og_title",
        "og_description",
        "og_image",
        "publisher_name",
        "publisher_logo",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        """The editor sends null for untouched inputs."""
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _parse_tags(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return split_tags(value)
        return value

    @field_validator(
        "category", "robots_meta", "schema_type", "visibility", "status", mode="before"
    )
    @classmethod
    def _blank_to_default(cls, value: object, info: ValidationInfo) -> object:
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("read_time", mode="before")
    @classmethod
    def _null_read_time(cls, value: object) -> object:
        return 0 if value is None else value

    @field_validator("publish_date", mode="before")
    @classmethod
    def _lenient_date(cls, value: object) -> object:
        """Keep the calendar day of an ISO date or datetime; unreadable values become None."""
        if isinstance(value, datetime):
            return value.date()
        if not isinstance(value, str):
            return value
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None

    @field_serializer("tags", when_used="json")
    def _join_tags(self, tags: list[str]) -> str:
        return ", ".join(tags)

    @property
    def is_draft(self) -> bool:
        return self.status == "draft"


class PostSummary(BaseModel):
    """Post metadata for the admin listing (frontmatter only)."""

    slug: str
    title: str
    description: str = ""
    author: str = ""
    category: str = "general"
    tags: list[str] = []
    featured: bool = False
    image: str = ""
    read_time: int = Field(0, alias="readTime")
    draft: bool = False
    publish_date: str = Field("", alias="publishDate")
    preview: str = ""
    last_modified: datetime = Field(alias="lastModified")
    file_size: int = Field(alias="fileSize")

    model_config = {"populate_by_name": True}


class PostIndex(BaseModel):
    """Post listing, newest modification first."""

    posts: list[PostSummary]
    total: int


class SavedPost(BaseModel):
    """Result of writing a post to disk."""

    post: PostRecord
    filepath: str


class PostListResponse(PostIndex):
    success: bool = True


class PostResponse(BaseModel):
    success: bool = True
    post: PostRecord


class SavePostResponse(BaseModel):
    success: bool = True
    message: str
    slug: str
    filepath: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
