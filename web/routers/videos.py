"""Local video library routes: uploaded video metadata, views, likes."""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from web.shared import limiter
from web.deps import get_current_user, get_video_store

router = APIRouter()


class VideoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    video_url: str = Field(..., pattern=r"^https://")
    thumbnail_url: str = Field("", max_length=2000)
    category: str = Field("", max_length=50)
    tags: str = Field("", max_length=500)
    is_public: bool = True


class VideoUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    thumbnail_url: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = Field(None, max_length=50)
    tags: Optional[str] = Field(None, max_length=500)
    is_public: Optional[bool] = None


_NOT_FOUND = {"error": "Video not found"}
_NOT_FOUND_OR_UNAUTHORIZED = {"error": "Video not found or unauthorized"}


@router.post("/api/videos")
@limiter.limit("10/minute")
async def create_video(request: Request, body: VideoCreate,
                       user_id: str = Depends(get_current_user)):
    """Store metadata for a video already uploaded to the media host."""
    vs = get_video_store(request)
    video = vs.add_video(creator=user_id, **body.model_dump())
    return JSONResponse(video, status_code=201)


@router.get("/api/videos")
@limiter.limit("30/minute")
async def list_videos(
    request: Request,
    category: str = Query("", max_length=50),
    sort: str = Query("", max_length=20),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """Paginated listing of public library videos."""
    videos, total_pages = get_video_store(request).list_videos(
        category=category, sort=sort, page=page, limit=limit)
    return JSONResponse({"videos": videos, "total_pages": total_pages})


@router.get("/api/videos/{video_id}")
async def get_video(request: Request, video_id: int):
    """One library video; each fetch counts as a view."""
    video = get_video_store(request).record_view(video_id)
    if not video:
        return JSONResponse(_NOT_FOUND, status_code=404)
    return JSONResponse(video)


@router.patch("/api/videos/{video_id}")
@limiter.limit("10/minute")
async def update_video(request: Request, video_id: int, body: VideoUpdate,
                       user_id: str = Depends(get_current_user)):
    video = get_video_store(request).update_video(
        video_id, user_id, **body.model_dump(exclude_none=True))
    if not video:
        return JSONResponse(_NOT_FOUND_OR_UNAUTHORIZED, status_code=404)
    return JSONResponse(video)


@router.delete("/api/videos/{video_id}")
@limiter.limit("10/minute")
async def delete_video(request: Request, video_id: int,
                       user_id: str = Depends(get_current_user)):
    if not get_video_store(request).delete_video(video_id, user_id):
        return JSONResponse(_NOT_FOUND_OR_UNAUTHORIZED, status_code=404)
    return JSONResponse({"message": "Video deleted successfully"})


@router.post("/api/videos/{video_id}/like")
@limiter.limit("30/minute")
async def toggle_like(request: Request, video_id: int,
                      user_id: str = Depends(get_current_user)):
    vs = get_video_store(request)
    video = vs.toggle_like(video_id, user_id)
    if not video:
        return JSONResponse(_NOT_FOUND, status_code=404)
    video["liked"] = vs.is_liked_by(video_id, user_id)
    return JSONResponse(video)
