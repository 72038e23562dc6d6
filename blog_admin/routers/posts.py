"""Post endpoints: list, load, save, delete, analyze and import."""

import logging

from fastapi import APIRouter, File, Query, UploadFile

from blog_admin.errors import ValidationError
from blog_admin.models.analysis import AnalysisResponse, AnalyzeRequest
from blog_admin.models.post import (
    MessageResponse,
    PostListResponse,
    PostRecord,
    PostResponse,
    SavePostResponse,
)
from blog_admin.services.content_analysis import analyze
from blog_admin.services.post_import import import_document
from blog_admin.services.post_storage import (
    delete_post,
    list_posts,
    load_post,
    save_post,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


def _require_slug(slug: str | None) -> str:
    if not slug:
        raise ValidationError("No slug provided")
    return slug


@router.get("", response_model=PostListResponse)
async def list_all_posts():
    """List post metadata, most recently modified first."""
    index = await list_posts()
    return PostListResponse(posts=index.posts, total=index.total)


@router.get("/load", response_model=PostResponse)
async def load_post_for_editing(
    slug: str | None = Query(default=None, max_length=200),
):
    """Load one post with its body converted to editor HTML."""
    post = await load_post(_require_slug(slug))
    return PostResponse(post=post)


@router.post("/save", response_model=SavePostResponse)
async def save_post_from_editor(post: PostRecord):
    """Write a post as a draft or published Markdown file."""
    saved = await save_post(post)
    action = "saved as draft" if saved.post.is_draft else "published"
    return SavePostResponse(
        message=f"Post {action} successfully!",
        slug=saved.post.slug,
        filepath=saved.filepath,
    )


@router.delete("/delete", response_model=MessageResponse)
async def delete_post_file(
    slug: str | None = Query(default=None, max_length=200),
):
    """Permanently delete a post file."""
    await delete_post(_require_slug(slug))
    return MessageResponse(message="Post deleted successfully")


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_draft(draft: AnalyzeRequest):
    """Score a draft's readability and SEO without saving it."""
    analysis = analyze(
        draft.title,
        draft.content,
        meta_description=draft.meta_description,
        focus_keywords=draft.focus_keywords,
        featured_image=draft.featured_image,
    )
    return AnalysisResponse(analysis=analysis)


@router.post("/import", response_model=PostResponse)
async def import_post_file(file: UploadFile | None = File(default=None)):
    """Decode an uploaded .md or .txt file into a post record (nothing is saved)."""
    if file is None:
        raise ValidationError("No file provided")
    data = await file.read()
    post = import_document(file.filename or "", data)
    logger.info("Imported %s as %r", file.filename, post.slug)
    return PostResponse(post=post)
