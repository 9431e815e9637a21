"""CRUD endpoints for posts under /api/posts.

Routes only assemble the request descriptor; every decision is made by
:mod:`backend.app.services.post_controller`.
"""

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from backend.app.api.dependencies import get_optional_identity, require_identity
from backend.app.db.session import get_db
from backend.app.models.posts import (
    MessageResponse,
    PostCreateBody,
    PostDetailResponse,
    PostListQuery,
    PostResponse,
    PostUpdateBody,
)
from backend.app.services import post_controller
from backend.app.services.post_controller import ControllerResult, Identity

router = APIRouter(prefix="/api/posts")

_ERRORS: dict[int | str, dict] = {
    400: {"description": "Validation detail as {error}, anything else as {message}"},
    401: {"model": MessageResponse},
    403: {"model": MessageResponse},
    404: {"model": MessageResponse},
    500: {"model": MessageResponse},
}


def _render(result: ControllerResult) -> JSONResponse:
    return JSONResponse(
        status_code=result.status_code,
        content=jsonable_encoder(result.payload),
    )


@router.post("", status_code=201, response_model=PostResponse, responses=_ERRORS)
def create_post(
    body: PostCreateBody | None = None,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
) -> JSONResponse:
    """Create a post authored by the caller."""
    return _render(post_controller.create_post(db, identity, body or PostCreateBody()))


@router.get("", response_model=list[PostDetailResponse], responses=_ERRORS)
def list_posts(
    category: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    db: Session = Depends(get_db),
) -> JSONResponse:
    """Return one page of posts, optionally filtered by category."""
    query = PostListQuery(category=category, page=page, limit=limit)
    return _render(post_controller.list_posts(db, query))


@router.get("/{post_id}", response_model=PostDetailResponse, responses=_ERRORS)
def get_post(post_id: str, db: Session = Depends(get_db)) -> JSONResponse:
    """Return a single post."""
    return _render(post_controller.get_post(db, post_id))


@router.put("/{post_id}", response_model=PostResponse, responses=_ERRORS)
def update_post(
    post_id: str,
    body: PostUpdateBody | None = None,
    identity: Identity | None = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> JSONResponse:
    """Update the caller's own post; omitted fields are left unchanged."""
    return _render(
        post_controller.update_post(db, identity, post_id, body or PostUpdateBody()),
    )


@router.delete("/{post_id}", response_model=MessageResponse, responses=_ERRORS)
def delete_post(
    post_id: str,
    identity: Identity | None = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> JSONResponse:
    """Delete the caller's own post."""
    return _render(post_controller.delete_post(db, identity, post_id))
