"""
Request schemas.

Bodies are accepted in camelCase (``fullName``) or snake_case. Text fields are
trimmed; required fields that are missing or blank fail with a field-specific
message, which the error handlers surface as the envelope ``message``.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from pydantic.alias_generators import to_camel


def _trimmed(value):
    if isinstance(value, str):
        value = value.strip()
    return value


def _required(value, message: str):
    value = _trimmed(value)
    if value is None or value == "":
        raise ValueError(message)
    return value


def _optional(value, message: str):
    """Absent stays None; present-but-blank is rejected."""
    if value is None:
        return None
    return _required(value, message)


class RequestModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )


# Users

class RegisterForm(RequestModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    password: Optional[str] = None

    @field_validator("username", "email", "full_name", "password", mode="before")
    @classmethod
    def validate_required(cls, v):
        return _required(v, "All fields are required")


class LoginRequest(RequestModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("username", "email", mode="before")
    @classmethod
    def validate_identifier(cls, v):
        return _trimmed(v) or None

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, v):
        return _required(v, "Password is required")

    @property
    def identifier(self) -> Optional[str]:
        return self.username or self.email


class RefreshTokenRequest(RequestModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(RequestModel):
    old_password: Optional[str] = None
    new_password: Optional[str] = None

    @field_validator("old_password", "new_password", mode="before")
    @classmethod
    def validate_passwords(cls, v):
        return _required(v, "Both old and new passwords are required")


class UpdateAccountRequest(RequestModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("full_name", mode="before")
    @classmethod
    def validate_full_name(cls, v):
        return _optional(v, "Full name cannot be empty")

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        return _optional(v, "Email cannot be empty")


# Videos

class PublishVideoForm(RequestModel):
    title: Optional[str] = None
    description: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v):
        return _required(v, "Title is required")

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v):
        return _required(v, "Description is required")


class UpdateVideoForm(RequestModel):
    title: Optional[str] = None
    description: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v):
        return _optional(v, "Title cannot be empty")

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v):
        return _optional(v, "Description cannot be empty")


# Comments and tweets

class CommentRequest(RequestModel):
    content: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def validate_content(cls, v):
        return _required(v, "Comment content is required")


class TweetRequest(RequestModel):
    content: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def validate_content(cls, v):
        return _required(v, "Tweet content is required")


# Playlists

class PlaylistCreateRequest(RequestModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return _required(v, "Playlist name is required")

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v):
        return _required(v, "Playlist description is required")


class PlaylistUpdateRequest(RequestModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return _optional(v, "Playlist name cannot be empty")

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v):
        return _optional(v, "Playlist description cannot be empty")
