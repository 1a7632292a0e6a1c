"""
User account and channel profile API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shared_lib.s3 import BlobStorage
from ..config import get_settings
from ..db import get_db
from ..dependencies import discard_uploads, get_blob_storage, save_upload
from ..exceptions import ValidationError
from ..middleware.permissions import (
    ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, get_current_user, get_optional_user,
)
from ..models import User
from ..responses import api_response
from ..schemas import (
    ChangePasswordRequest, LoginRequest, RefreshTokenRequest, RegisterForm, UpdateAccountRequest,
)
from ..services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


def _set_token_cookies(response: JSONResponse, access_token: str, refresh_token: str) -> JSONResponse:
    settings = get_settings()
    for name, value in ((ACCESS_TOKEN_COOKIE, access_token), (REFRESH_TOKEN_COOKIE, refresh_token)):
        response.set_cookie(name, value, httponly=True, secure=settings.COOKIE_SECURE, samesite="lax")
    return response


@router.post("/register")
async def register(
    username: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    full_name: Optional[str] = Form(None, alias="fullName"),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    """Create an account; the avatar image is required, the cover image optional."""
    form = RegisterForm(username=username, email=email, full_name=full_name, password=password)
    avatar_path = cover_path = None
    try:
        avatar_path = await save_upload(avatar)
        cover_path = await save_upload(cover_image)
        user = await UserService(db).register(
            username=form.username,
            email=form.email,
            full_name=form.full_name,
            password=form.password,
            avatar_path=avatar_path,
            storage=storage,
            cover_image_path=cover_path,
        )
    finally:
        discard_uploads(avatar_path, cover_path)
    return api_response(201, user, "User created successfully")


@router.post("/login")
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    if not payload.identifier:
        raise ValidationError("Email or Username is required")

    result = await UserService(db).login(payload.identifier, payload.password)
    response = api_response(200, result, "Login successful")
    return _set_token_cookies(response, result["access_token"], result["refresh_token"])


@router.post("/logout")
async def logout(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    await UserService(db).logout(current_user.id)
    response = api_response(200, {}, "Logout successful")
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)
    return response


@router.post("/refresh-token")
async def refresh_token(
    request: Request,
    payload: Optional[RefreshTokenRequest] = None,
    db: AsyncSession = Depends(get_db)
):
    """Rotate the token pair; the refresh token comes from the cookie or the body."""
    token = request.cookies.get(REFRESH_TOKEN_COOKIE) or (payload.refresh_token if payload else None)
    tokens = await UserService(db).refresh_access_token(token)
    response = api_response(200, tokens, "Token refreshed successfully")
    return _set_token_cookies(response, tokens["access_token"], tokens["refresh_token"])


@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await UserService(db).change_password(current_user.id, payload.old_password, payload.new_password)
    return api_response(200, {}, "Password changed successfully")


@router.get("/current-user")
async def current_user_details(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    user = await UserService(db).get_current_user(current_user.id)
    return api_response(200, user, "Current user fetched successfully")


@router.patch("/update-account")
async def update_account(
    payload: UpdateAccountRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    user = await UserService(db).update_account_details(
        current_user.id, full_name=payload.full_name, email=payload.email
    )
    return api_response(200, user, "Account details updated successfully")


@router.patch("/avatar")
async def update_avatar(
    avatar: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    avatar_path = None
    try:
        avatar_path = await save_upload(avatar)
        user = await UserService(db).update_avatar(current_user.id, avatar_path, storage)
    finally:
        discard_uploads(avatar_path)
    return api_response(200, user, "Avatar updated successfully")


@router.patch("/cover-image")
async def update_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    cover_path = None
    try:
        cover_path = await save_upload(cover_image)
        user = await UserService(db).update_cover_image(current_user.id, cover_path, storage)
    finally:
        discard_uploads(cover_path)
    return api_response(200, user, "Cover image updated successfully")


@router.get("/c/{username}")
async def channel_profile(
    username: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    channel = await UserService(db).get_channel_profile(username, viewer.id if viewer else None)
    return api_response(200, channel, "Channel profile fetched successfully")


@router.get("/history")
async def watch_history(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await UserService(db).get_watch_history(current_user.id, page, limit)
    return api_response(200, result.to_dict(), "Watch history fetched successfully")
