"""Turn an uploaded .md or .txt file into an unsaved PostRecord."""

import html
import logging
from pathlib import PurePath

from blog_admin.errors import InvalidFormatError, UnsupportedTypeError, ValidationError
from blog_admin.models.post import PostRecord
from blog_admin.services.frontmatter import decode_post
from blog_admin.services.markdown import markdown_to_html
from blog_admin.services.post_storage import slugify

logger = logging.getLogger(__name__)

IMPORT_SUFFIXES = {".md", ".txt"}


def _text_to_html(text: str) -> str:
    blocks = []
    for paragraph in text.replace("\r\n", "\n").split("\n\n"):
        lines = [html.escape(line.strip()) for line in paragraph.strip().split("\n")]
        if any(lines):
            blocks.append(f"<p>{'<br>'.join(lines)}</p>")
    return "".join(blocks)


def import_document(filename: str, data: bytes) -> PostRecord:
    """Decode an uploaded document for the editor without writing anything.

    Markdown with frontmatter keeps its metadata; Markdown without it and
    plain text only fill the content. The slug comes from the title, else the
    file name.
    """
    path = PurePath(filename or "")
    suffix = path.suffix.lower()
    if suffix not in IMPORT_SUFFIXES:
        raise UnsupportedTypeError(f"Unsupported file format: {suffix or path.name}")

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError("File must be UTF-8 text") from None

    if suffix == ".txt":
        post = PostRecord(content=_text_to_html(text))
    else:
        try:
            post = decode_post(text, slug="")
        except InvalidFormatError:
            logger.info("Imported %s has no frontmatter, using body only", path.name)
            post = PostRecord(content=markdown_to_html(text))

    post.slug = slugify(post.title) or slugify(path.stem)
    return post
