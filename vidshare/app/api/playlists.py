"""
Playlist management API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..middleware.permissions import get_current_user
from ..models import User
from ..responses import api_response
from ..schemas import PlaylistCreateRequest, PlaylistUpdateRequest
from ..services.playlist_service import PlaylistService
from ..services.view_pipeline import parse_id

router = APIRouter(prefix="/api/v1/playlists", tags=["playlists"])


@router.post("/")
async def create_playlist(
    payload: PlaylistCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await PlaylistService(db).create_playlist(current_user.id, payload.name, payload.description)
    return api_response(201, playlist, "Playlist created successfully")


@router.get("/user/{user_id}")
async def user_playlists(
    user_id: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    result = await PlaylistService(db).get_user_playlists(parse_id(user_id, "user"), page, limit)
    return api_response(200, result.to_dict(), "User playlists fetched successfully")


@router.get("/{playlist_id}")
async def get_playlist(playlist_id: str, db: AsyncSession = Depends(get_db)):
    playlist = await PlaylistService(db).get_playlist_by_id(parse_id(playlist_id, "playlist"))
    return api_response(200, playlist, "Playlist fetched successfully")


@router.patch("/add/{video_id}/{playlist_id}")
async def add_video_to_playlist(
    video_id: str,
    playlist_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await PlaylistService(db).add_video(
        current_user.id, parse_id(playlist_id, "playlist"), parse_id(video_id, "video")
    )
    return api_response(200, playlist, "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}")
async def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await PlaylistService(db).remove_video(
        current_user.id, parse_id(playlist_id, "playlist"), parse_id(video_id, "video")
    )
    return api_response(200, playlist, "Video removed from playlist successfully")


@router.patch("/{playlist_id}")
async def update_playlist(
    playlist_id: str,
    payload: PlaylistUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await PlaylistService(db).update_playlist(
        current_user.id, parse_id(playlist_id, "playlist"), name=payload.name, description=payload.description
    )
    return api_response(200, playlist, "Playlist updated successfully")


@router.delete("/{playlist_id}")
async def delete_playlist(
    playlist_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await PlaylistService(db).delete_playlist(current_user.id, parse_id(playlist_id, "playlist"))
    return api_response(200, {}, "Playlist deleted successfully")
