"""Post file codec: PostRecord <-> Markdown with a frontmatter header.

The header is a fixed, hand-written ``key: value`` dialect rather than YAML.
Scalars are written double-quoted without escaping, arrays as ``[...]``, and
keys in a fixed order so rewritten files diff cleanly against existing content.
"""

import logging
import re
from datetime import date
from typing import Any

from blog_admin.errors import InvalidFormatError
from blog_admin.models.post import PostRecord, split_tags
from blog_admin.services.markdown import (
    html_to_markdown,
    markdown_to_html,
    read_time_minutes,
)

logger = logging.getLogger(__name__)

FrontmatterValue = str | list[str]

_DOCUMENT_RE = re.compile(r"^---\n(?:(.*?)\n)?---(?:\n|$)(.*)$", re.DOTALL)

DEFAULT_CATEGORY = "technology"
DEFAULT_ROBOTS = "index,follow"
DEFAULT_SCHEMA_TYPE = "Article"
DEFAULT_VISIBILITY = "public"

# frontmatter key -> PostRecord attribute, for plain string fields
_STRING_FIELDS = {
    "title": "title",
    "description": "meta_description",
    "author": "author",
    "category": "category",
    "focus_keywords": "focus_keywords",
    "canonical_url": "canonical_url",
    "robots_meta": "robots_meta",
    "og_title": "og_title",
    "og_description": "og_description",
    "og_image": "og_image",
    "schema_type": "schema_type",
    "publisher_name": "publisher_name",
    "publisher_logo": "publisher_logo",
    "visibility": "visibility",
}

# Keys written by the editor's Markdown export, read when the stored key is absent
_EXPORT_KEYS = {"meta_description": "description", "status": "draft"}


def _parse_value(raw: str) -> FrontmatterValue:
    value = raw.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    if value.startswith("[") and value.endswith("]"):
        members = (m.strip().strip('"').strip() for m in value[1:-1].split(","))
        return [m for m in members if m]
    return value


def split_document(text: str) -> tuple[str, str]:
    """Split a post file into its raw frontmatter block and body.

    Raises InvalidFormatError when the file does not open with a closed
    ``---`` block.
    """
    match = _DOCUMENT_RE.match(text.replace("\r\n", "\n"))
    if not match:
        raise InvalidFormatError("Invalid post format")
    return match.group(1) or "", match.group(2)


def parse_frontmatter(text: str) -> tuple[dict[str, FrontmatterValue], str]:
    """Parse the frontmatter of a post file.

    Each line is split on its first colon, so values such as URLs keep their
    own colons. Returns the key/value mapping and the untouched Markdown body.
    """
    block, body = split_document(text)
    meta: dict[str, FrontmatterValue] = {}
    for line in block.split("\n"):
        key, sep, raw = line.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        meta[key] = _parse_value(raw)
    return meta, body


def _as_text(value: FrontmatterValue | None) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(value)
    return value


def _parse_date(value: FrontmatterValue | None) -> date | None:
    text = _as_text(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.warning("Ignoring unparsable publishDate %r", text)
        return None


def _parse_int(value: FrontmatterValue | None) -> int:
    try:
        return int(_as_text(value).strip())
    except ValueError:
        return 0


def is_draft_value(value: FrontmatterValue | None) -> bool:
    return _as_text(value).strip() == "true"


def decode_post(text: str, slug: str) -> PostRecord:
    """Decode a post file into the record the editor works with.

    Unknown keys are ignored. Missing strings decode to their defaults, and
    the body is converted back to editor HTML. Files exported by the editor
    (``meta_description``, ``status: "draft"``) decode the same way as stored
    posts.
    """
    meta, body = parse_frontmatter(text)
    exported = {
        stored: meta[key]
        for key, stored in _EXPORT_KEYS.items()
        if key in meta and stored not in meta
    }

    fields: dict[str, Any] = {"slug": slug}
    for key, attr in _STRING_FIELDS.items():
        if key in meta:
            fields[attr] = _as_text(meta[key])
    if "description" in exported:
        fields["meta_description"] = _as_text(exported["description"])

    tags = meta.get("tags")
    if tags is not None:
        fields["tags"] = tags if isinstance(tags, list) else split_tags(tags)

    image = _as_text(meta.get("image"))
    fields["featured_image"] = image or None
    if "draft" in exported:
        draft = _as_text(exported["draft"]).strip() == "draft"
    else:
        draft = is_draft_value(meta.get("draft"))
    fields["status"] = "draft" if draft else "published"
    fields["publish_date"] = _parse_date(meta.get("publishDate"))
    fields["read_time"] = _parse_int(meta.get("readTime"))
    fields["content"] = markdown_to_html(body)

    return PostRecord(**fields)


_LINE_BREAK_RE = re.compile(r"\s*[\r\n]+\s*")


def _quoted(key: str, value: str) -> str:
    """One ``key: "value"`` line; line breaks in the value fold to spaces."""
    return f'{key}: "{_LINE_BREAK_RE.sub(" ", value)}"'


def encode_post(post: PostRecord) -> str:
    """Encode a record as a post file (frontmatter, blank line, Markdown body)."""
    publish_date = post.publish_date or date.today()
    tags = ", ".join(f'"{_LINE_BREAK_RE.sub(" ", tag)}"' for tag in post.tags)

    lines = [
        "---",
        _quoted("title", post.title),
        _quoted("description", post.meta_description),
        _quoted("author", post.author),
        f"publishDate: {publish_date.isoformat()}",
        _quoted("category", post.category or DEFAULT_CATEGORY),
        f"tags: [{tags}]",
        "featured: false",
        _quoted("image", post.featured_image or ""),
        f"readTime: {read_time_minutes(post.content)}",
        f"draft: {'true' if post.is_draft else 'false'}",
        _quoted("focus_keywords", post.focus_keywords),
        _quoted("canonical_url", post.canonical_url),
        _quoted("robots_meta", post.robots_meta or DEFAULT_ROBOTS),
        _quoted("og_title", post.og_title),
        _quoted("og_description", post.og_description),
        _quoted("og_image", post.og_image),
        _quoted("schema_type", post.schema_type or DEFAULT_SCHEMA_TYPE),
        _quoted("publisher_name", post.publisher_name),
        _quoted("publisher_logo", post.publisher_logo),
        _quoted("visibility", post.visibility or DEFAULT_VISIBILITY),
        "---",
        "",
        "",
    ]
    return "\n".join(lines) + html_to_markdown(post.content)
